"""PhotoSwipe: swipe-driven photo review with batch paging and bucket commits."""

__version__ = "0.1.0"
