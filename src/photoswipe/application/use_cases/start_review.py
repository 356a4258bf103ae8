import logging
from dataclasses import dataclass, field
from typing import Optional

from .base import UseCase, UseCaseRequest, UseCaseResponse
from photoswipe.application.dtos import ReviewOptions
from photoswipe.application.services.batch_loader import BatchLoader
from photoswipe.application.services.dispatch import Dispatcher
from photoswipe.application.services.gesture_classifier import SwipeClassifier
from photoswipe.application.services.review_modes import build_layout
from photoswipe.application.services.review_session import ReviewSession
from photoswipe.domain.models import AccessStatus
from photoswipe.domain.repositories import IAssetSource, IAuthorizationGate, IPreviewDecoder
from photoswipe.errors import AuthorizationDeniedError
from photoswipe.errors.handler import ErrorHandler, ErrorSeverity
from photoswipe.events.bus import EventBus


@dataclass(frozen=True)
class StartReviewRequest(UseCaseRequest):
    options: ReviewOptions = field(default_factory=ReviewOptions)


@dataclass(frozen=True)
class StartReviewResponse(UseCaseResponse):
    access: AccessStatus = AccessStatus.DENIED
    session: Optional[ReviewSession] = None


class StartReviewUseCase(UseCase):
    """Check library access, then build and prime a review session."""

    def __init__(
        self,
        gate: IAuthorizationGate,
        source: IAssetSource,
        decoder: IPreviewDecoder,
        event_bus: Optional[EventBus] = None,
        dispatcher: Optional[Dispatcher] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self._gate = gate
        self._source = source
        self._decoder = decoder
        self._event_bus = event_bus
        self._dispatcher = dispatcher
        self._errors = error_handler
        self._logger = logging.getLogger(__name__)

    def execute(self, request: StartReviewRequest) -> StartReviewResponse:
        access = self._gate.request_access()
        if access is AccessStatus.DENIED:
            error = AuthorizationDeniedError("Access to the photo library was denied")
            if self._errors is not None:
                self._errors.handle(error, ErrorSeverity.CRITICAL)
            else:
                self._logger.error(f"{error}")
            return StartReviewResponse(success=False, error=str(error), access=access)

        options = request.options
        source = self._source.fetch_sorted(ascending=options.start_from_last, limit=options.limit)
        loader = BatchLoader(
            source,
            self._decoder,
            batch_size=options.batch_size,
            target_size=options.preview_size,
            dispatcher=self._dispatcher,
            event_bus=self._event_bus,
        )
        buckets, routing = build_layout(options.mode, options.group_labels)
        classifier = SwipeClassifier(
            horizontal_threshold=options.horizontal_threshold,
            vertical_threshold=options.vertical_threshold,
            invert_horizontal=options.invert_horizontal,
        )
        session = ReviewSession(
            loader,
            buckets,
            routing,
            classifier,
            lookahead_margin=options.lookahead_margin,
            history_limit=options.undo_depth,
            event_bus=self._event_bus,
        )
        session.start()
        self._logger.info(
            f"Started {options.mode.value} review over {source.count()} assets ({access.value} access)"
        )
        return StartReviewResponse(access=access, session=session)
