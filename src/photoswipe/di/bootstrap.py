from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .container import Container
from ..application.services.dispatch import Dispatcher, QueueDispatcher
from ..application.use_cases import (
    CommitBucketsUseCase,
    DeleteAssetsUseCase,
    RemoveMembersUseCase,
    StartReviewUseCase,
)
from ..domain.repositories import (
    IAssetSource,
    IAuthorizationGate,
    ICollectionStore,
    IPreviewDecoder,
)
from ..errors.handler import ErrorHandler
from ..events.bus import EventBus
from ..infrastructure import (
    FilesystemAuthorizationGate,
    FolderAssetSource,
    JsonCollectionStore,
    PillowPreviewDecoder,
)
from ..settings import SettingsManager
from ..utils.logging import get_logger


def bootstrap(
    container: Container,
    library_root: Path,
    *,
    settings_path: Optional[Path] = None,
    dispatcher: Optional[Dispatcher] = None,
) -> None:
    """Register the folder-native services for *library_root*."""

    root = Path(library_root)
    container.register_instance(Path, root)
    container.register_instance(Dispatcher, dispatcher or QueueDispatcher())
    container.register_factory(logging.Logger, get_logger)
    container.register_singleton(EventBus)
    container.register_factory(
        ErrorHandler,
        lambda: ErrorHandler(container.resolve(logging.Logger), container.resolve(EventBus)),
    )

    container.register_factory(IAuthorizationGate, lambda: FilesystemAuthorizationGate(root))
    container.register_factory(IAssetSource, lambda: FolderAssetSource(root))
    container.register_factory(IPreviewDecoder, PillowPreviewDecoder)
    container.register_factory(ICollectionStore, lambda: JsonCollectionStore(root))

    def _settings() -> SettingsManager:
        manager = SettingsManager(settings_path)
        manager.load()
        return manager

    container.register_factory(SettingsManager, _settings)

    container.register_factory(
        StartReviewUseCase,
        lambda: StartReviewUseCase(
            container.resolve(IAuthorizationGate),
            container.resolve(IAssetSource),
            container.resolve(IPreviewDecoder),
            event_bus=container.resolve(EventBus),
            dispatcher=container.resolve(Dispatcher),
            error_handler=container.resolve(ErrorHandler),
        ),
        singleton=False,
    )
    container.register_factory(
        CommitBucketsUseCase,
        lambda: CommitBucketsUseCase(
            container.resolve(ICollectionStore),
            event_bus=container.resolve(EventBus),
            error_handler=container.resolve(ErrorHandler),
        ),
        singleton=False,
    )
    container.register_factory(
        RemoveMembersUseCase,
        lambda: RemoveMembersUseCase(container.resolve(ICollectionStore)),
        singleton=False,
    )
    container.register_factory(
        DeleteAssetsUseCase,
        lambda: DeleteAssetsUseCase(container.resolve(ICollectionStore)),
        singleton=False,
    )
