from .base import UseCase, UseCaseRequest, UseCaseResponse
from .commit_buckets import (
    BucketCommitResult,
    CommitBucketsRequest,
    CommitBucketsResponse,
    CommitBucketsUseCase,
)
from .manage_members import (
    DeleteAssetsUseCase,
    MemberSelectionRequest,
    MemberSelectionResponse,
    RemoveMembersUseCase,
)
from .start_review import StartReviewRequest, StartReviewResponse, StartReviewUseCase

__all__ = [
    "UseCase",
    "UseCaseRequest",
    "UseCaseResponse",
    "BucketCommitResult",
    "CommitBucketsRequest",
    "CommitBucketsResponse",
    "CommitBucketsUseCase",
    "DeleteAssetsUseCase",
    "MemberSelectionRequest",
    "MemberSelectionResponse",
    "RemoveMembersUseCase",
    "StartReviewRequest",
    "StartReviewResponse",
    "StartReviewUseCase",
]
