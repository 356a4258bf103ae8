"""Bucket layouts for the two review flows."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Sequence, Tuple

from photoswipe.config import DEFAULT_GROUP_LABELS, DELETE_BUCKET_ID, KEEP_BUCKET_ID
from photoswipe.domain.models import Bucket, BucketSet, Outcome


class ReviewMode(str, Enum):
    # Swipe left to delete, right to keep.
    CLEANUP = "cleanup"
    # Swipe left/up/right into three user-labelled groups; down skips.
    TAGGING = "tagging"


def group_bucket_id(index: int) -> str:
    return f"group-{index + 1}"


def build_layout(
    mode: ReviewMode,
    group_labels: Sequence[str] = DEFAULT_GROUP_LABELS,
) -> Tuple[BucketSet, Dict[Outcome, str]]:
    """Return fresh buckets and the outcome routing for *mode*."""

    if mode is ReviewMode.CLEANUP:
        buckets = BucketSet([
            Bucket(DELETE_BUCKET_ID, "Delete", reserved=True),
            Bucket(KEEP_BUCKET_ID, "Keep", persist=False),
        ])
        return buckets, {Outcome.PRIMARY: DELETE_BUCKET_ID, Outcome.SECONDARY: KEEP_BUCKET_ID}

    labels = list(group_labels)[:3]
    labels += list(DEFAULT_GROUP_LABELS[len(labels):])
    buckets = BucketSet([Bucket(group_bucket_id(i), label) for i, label in enumerate(labels)])
    routing = {
        Outcome.PRIMARY: group_bucket_id(0),
        Outcome.TERTIARY: group_bucket_id(1),
        Outcome.SECONDARY: group_bucket_id(2),
    }
    return buckets, routing
