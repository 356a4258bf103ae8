import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .base import UseCase, UseCaseRequest, UseCaseResponse
from photoswipe.domain.models import CollectionHandle
from photoswipe.domain.repositories import ICollectionStore


@dataclass(frozen=True)
class MemberSelectionRequest(UseCaseRequest):
    collection: Optional[CollectionHandle] = None
    asset_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MemberSelectionResponse(UseCaseResponse):
    affected_count: int = 0


class _SelectionUseCase(UseCase):
    def __init__(self, store: ICollectionStore):
        self._store = store
        self._logger = logging.getLogger(__name__)

    def _selected(self, request: MemberSelectionRequest):
        wanted = set(request.asset_ids)
        members = self._store.list_members(request.collection)
        return [asset for asset in members if asset.id in wanted]


class RemoveMembersUseCase(_SelectionUseCase):
    """Take the selected assets out of an album without deleting them."""

    def execute(self, request: MemberSelectionRequest) -> MemberSelectionResponse:
        if request.collection is None:
            return MemberSelectionResponse(success=False, error="No collection selected")
        selected = self._selected(request)
        if not selected:
            return MemberSelectionResponse()
        try:
            self._store.remove_members(request.collection, selected).result()
        except Exception as e:
            self._logger.error(f"Error removing from '{request.collection.title}': {e}")
            return MemberSelectionResponse(success=False, error=str(e))
        return MemberSelectionResponse(affected_count=len(selected))


class DeleteAssetsUseCase(_SelectionUseCase):
    """Delete the selected assets of an album from the library."""

    def execute(self, request: MemberSelectionRequest) -> MemberSelectionResponse:
        if request.collection is None:
            return MemberSelectionResponse(success=False, error="No collection selected")
        selected = self._selected(request)
        if not selected:
            return MemberSelectionResponse()
        try:
            self._store.delete_assets(selected).result()
        except Exception as e:
            self._logger.error(f"Error deleting: {e}")
            return MemberSelectionResponse(success=False, error=str(e))
        return MemberSelectionResponse(affected_count=len(selected))
