import sys
from concurrent.futures import Future
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from photoswipe.domain.models import (  # noqa: E402
    AccessStatus,
    AssetHandle,
    CollectionHandle,
    CollectionKind,
    PreviewImage,
    PreviewMode,
)
from photoswipe.domain.repositories import (  # noqa: E402
    IAuthorizationGate,
    ICollectionStore,
    IPreviewDecoder,
)
from photoswipe.errors import CollectionMutationError  # noqa: E402


class ManualDecoder(IPreviewDecoder):
    """Decoder whose futures stay pending until the test completes them."""

    def __init__(self) -> None:
        self.requests: List[Tuple[AssetHandle, Future]] = []

    def request_preview(self, asset, target_size, mode=PreviewMode.FIT):
        future: Future = Future()
        self.requests.append((asset, future))
        return future

    def pending(self) -> List[Tuple[AssetHandle, Future]]:
        return [(asset, future) for asset, future in self.requests if not future.done()]

    def complete(self, asset_id: str, image: object = "bitmap") -> None:
        for asset, future in reversed(self.requests):
            if asset.id == asset_id and not future.done():
                future.set_result(PreviewImage(asset_id, image))
                return
        raise AssertionError(f"No pending request for {asset_id}")

    def fail(self, asset_id: str, error: Optional[Exception] = None) -> None:
        for asset, future in reversed(self.requests):
            if asset.id == asset_id and not future.done():
                if error is None:
                    future.set_result(None)
                else:
                    future.set_exception(error)
                return
        raise AssertionError(f"No pending request for {asset_id}")

    def complete_all(self) -> None:
        for asset, future in self.pending():
            future.set_result(PreviewImage(asset.id, "bitmap"))


class InstantDecoder(IPreviewDecoder):
    """Decoder that returns already-completed futures."""

    def __init__(self, failing: Sequence[str] = ()) -> None:
        self.failing = set(failing)
        self.requested: List[str] = []

    def request_preview(self, asset, target_size, mode=PreviewMode.FIT):
        self.requested.append(asset.id)
        future: Future = Future()
        future.set_result(None if asset.id in self.failing else PreviewImage(asset.id, "bitmap"))
        return future


def _done(value=None, error: Optional[Exception] = None) -> Future:
    future: Future = Future()
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(value)
    return future


class MemoryCollectionStore(ICollectionStore):
    """In-memory store recording every mutation in ``calls``."""

    def __init__(
        self,
        titles: Sequence[str] = (),
        *,
        fail_create: Sequence[str] = (),
        fail_add: Sequence[str] = (),
        fail_delete: bool = False,
    ) -> None:
        self.collections: Dict[str, CollectionHandle] = {}
        self.members: Dict[str, List[AssetHandle]] = {}
        self.deleted: List[str] = []
        self.calls: List[tuple] = []
        self.fail_create = set(fail_create)
        self.fail_add = set(fail_add)
        self.fail_delete = fail_delete
        for title in titles:
            self._create(title)

    def _create(self, title: str, kind: CollectionKind = CollectionKind.ALBUM, parent_id=None):
        handle = CollectionHandle(
            id=f"c{len(self.collections) + 1}", title=title, kind=kind, parent_id=parent_id
        )
        self.collections[handle.id] = handle
        self.members[handle.id] = []
        return handle

    def add_folder(self, title: str) -> CollectionHandle:
        return self._create(title, CollectionKind.FOLDER)

    def list_collections(self, kind=None):
        result = []
        for handle in self.collections.values():
            if kind is not None and handle.kind is not kind:
                continue
            result.append(
                CollectionHandle(
                    id=handle.id,
                    title=handle.title,
                    kind=handle.kind,
                    count=len(self.members[handle.id]),
                    parent_id=handle.parent_id,
                )
            )
        return result

    def list_members(self, collection):
        return list(self.members.get(collection.id, []))

    def create_collection(self, title):
        self.calls.append(("create", title))
        if title in self.fail_create:
            return _done(error=CollectionMutationError(f"cannot create {title}"))
        return _done(self._create(title))

    def add_members(self, collection, assets):
        self.calls.append(("add", collection.id, [asset.id for asset in assets]))
        if collection.title in self.fail_add:
            return _done(error=OSError(f"cannot add to {collection.title}"))
        existing = self.members[collection.id]
        existing.extend(asset for asset in assets if asset not in existing)
        return _done()

    def remove_members(self, collection, assets):
        self.calls.append(("remove", collection.id, [asset.id for asset in assets]))
        ids = {asset.id for asset in assets}
        self.members[collection.id] = [a for a in self.members[collection.id] if a.id not in ids]
        return _done()

    def delete_assets(self, assets):
        self.calls.append(("delete", [asset.id for asset in assets]))
        if self.fail_delete:
            return _done(error=CollectionMutationError("delete refused"))
        self.deleted.extend(asset.id for asset in assets)
        return _done()


class StubGate(IAuthorizationGate):
    def __init__(self, status: AccessStatus = AccessStatus.GRANTED) -> None:
        self.status = status
        self.calls = 0

    def request_access(self) -> AccessStatus:
        self.calls += 1
        return self.status


@pytest.fixture
def manual_decoder() -> ManualDecoder:
    return ManualDecoder()


@pytest.fixture
def instant_decoder() -> InstantDecoder:
    return InstantDecoder()


@pytest.fixture
def memory_store() -> MemoryCollectionStore:
    return MemoryCollectionStore()


@pytest.fixture(scope="session")
def qapp():
    """Provide a ``QCoreApplication`` for tests that need Qt signals."""

    QtCore = pytest.importorskip(
        "PySide6.QtCore",
        reason="PySide6 is required for Qt tests",
        exc_type=ImportError,
    )
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app
