"""Collections persisted as a JSON manifest inside the library work directory."""

from __future__ import annotations

import logging
import shutil
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from jsonschema import Draft202012Validator

from ..config import COLLECTIONS_FILE_NAME, RECENTLY_DELETED_DIR_NAME, WORK_DIR_NAME
from ..domain.models import AssetHandle, CollectionHandle, CollectionKind
from ..domain.repositories import ICollectionStore
from ..errors import CollectionMutationError, ManifestInvalidError
from ..utils.jsonio import read_json, write_json

LOGGER = logging.getLogger(__name__)

MANIFEST_SCHEMA: Dict[str, Any] = {
    "$id": "photoswipe/collections.schema.json",
    "type": "object",
    "required": ["schema", "collections"],
    "properties": {
        "schema": {"const": "photoswipe/collections@1"},
        "collections": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "title", "kind"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "title": {"type": "string", "minLength": 1},
                    "kind": {"enum": [kind.value for kind in CollectionKind]},
                    "parent_id": {"type": ["string", "null"]},
                    "members": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
    },
}

_VALIDATOR = Draft202012Validator(MANIFEST_SCHEMA)


def _empty_manifest() -> Dict[str, Any]:
    return {"schema": "photoswipe/collections@1", "collections": []}


class JsonCollectionStore(ICollectionStore):
    """Folder-native collection store.

    Albums and folders live in ``<root>/.photoswipe/collections.json``; album
    membership is a list of asset ids (paths relative to the root).  Deleting
    assets moves their files into ``<root>/.Trash`` and drops them from every
    album.  Mutations run one at a time on a private worker thread.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._path = self._root / WORK_DIR_NAME / COLLECTIONS_FILE_NAME
        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="CollectionStore")

    @property
    def manifest_path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_collections(self, kind: Optional[CollectionKind] = None) -> List[CollectionHandle]:
        with self._lock:
            entries = self._load()["collections"]
        handles = [self._handle(entry) for entry in entries]
        if kind is not None:
            handles = [handle for handle in handles if handle.kind is kind]
        return handles

    def list_members(self, collection: CollectionHandle) -> List[AssetHandle]:
        with self._lock:
            entry = self._find(self._load(), collection.id)
        if entry is None:
            return []
        return [
            AssetHandle(id=asset_id, position=i, path=self._root / asset_id)
            for i, asset_id in enumerate(entry.get("members", []))
        ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_collection(self, title: str, parent_id: Optional[str] = None) -> "Future[CollectionHandle]":
        return self._submit(self._create, title, CollectionKind.ALBUM, parent_id)

    def create_folder(self, title: str, parent_id: Optional[str] = None) -> "Future[CollectionHandle]":
        return self._submit(self._create, title, CollectionKind.FOLDER, parent_id)

    def add_members(self, collection: CollectionHandle, assets: Sequence[AssetHandle]) -> "Future[None]":
        return self._submit(self._add, collection.id, [asset.id for asset in assets])

    def remove_members(self, collection: CollectionHandle, assets: Sequence[AssetHandle]) -> "Future[None]":
        return self._submit(self._remove, collection.id, [asset.id for asset in assets])

    def delete_assets(self, assets: Sequence[AssetHandle]) -> "Future[None]":
        return self._submit(self._delete, [asset.id for asset in assets])

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Worker-side implementations
    # ------------------------------------------------------------------
    def _submit(self, func: Callable[..., Any], *args: Any) -> Future:
        def _run() -> Any:
            try:
                return func(*args)
            except CollectionMutationError:
                raise
            except (OSError, ManifestInvalidError) as exc:
                raise CollectionMutationError(str(exc)) from exc

        return self._executor.submit(_run)

    def _create(self, title: str, kind: CollectionKind, parent_id: Optional[str]) -> CollectionHandle:
        title = title.strip()
        if not title:
            raise CollectionMutationError("Collection titles must not be blank")
        with self._lock:
            manifest = self._load()
            if parent_id is not None:
                parent = self._find(manifest, parent_id)
                if parent is None or parent["kind"] != CollectionKind.FOLDER.value:
                    raise CollectionMutationError(f"Parent folder not found: {parent_id}")
            entry = {
                "id": str(uuid.uuid4()),
                "title": title,
                "kind": kind.value,
                "parent_id": parent_id,
                "members": [],
            }
            manifest["collections"].append(entry)
            self._save(manifest)
        LOGGER.info("Created %s '%s'", kind.value, title)
        return self._handle(entry)

    def _add(self, collection_id: str, asset_ids: List[str]) -> None:
        with self._lock:
            manifest = self._load()
            entry = self._require_album(manifest, collection_id)
            members = entry.setdefault("members", [])
            known = set(members)
            for asset_id in asset_ids:
                if asset_id not in known:
                    members.append(asset_id)
                    known.add(asset_id)
            self._save(manifest)

    def _remove(self, collection_id: str, asset_ids: List[str]) -> None:
        with self._lock:
            manifest = self._load()
            entry = self._require_album(manifest, collection_id)
            doomed = set(asset_ids)
            entry["members"] = [m for m in entry.get("members", []) if m not in doomed]
            self._save(manifest)

    def _delete(self, asset_ids: List[str]) -> None:
        trash = self._root / RECENTLY_DELETED_DIR_NAME
        failures: List[str] = []
        deleted: set[str] = set()
        for asset_id in asset_ids:
            source = self._root / asset_id
            if not source.exists():
                # Already gone: treat as deleted so a retry converges.
                deleted.add(asset_id)
                continue
            target = _unique_target(trash / asset_id)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(source), str(target))
            except OSError as exc:
                LOGGER.error("Failed to move %s to trash: %s", asset_id, exc)
                failures.append(asset_id)
                continue
            deleted.add(asset_id)

        if deleted:
            with self._lock:
                manifest = self._load()
                for entry in manifest["collections"]:
                    if "members" in entry:
                        entry["members"] = [m for m in entry["members"] if m not in deleted]
                self._save(manifest)
        if failures:
            raise CollectionMutationError(f"Could not delete {len(failures)} assets: {', '.join(failures)}")

    # ------------------------------------------------------------------
    # Manifest helpers
    # ------------------------------------------------------------------
    def _load(self) -> Dict[str, Any]:
        if not self._path.exists():
            return _empty_manifest()
        try:
            payload = read_json(self._path)
        except ValueError as exc:
            raise ManifestInvalidError(f"{self._path}: {exc}") from exc
        errors = sorted(_VALIDATOR.iter_errors(payload), key=lambda e: list(e.path))
        if errors:
            raise ManifestInvalidError(f"{self._path}: {errors[0].message}")
        return payload

    def _save(self, manifest: Dict[str, Any]) -> None:
        write_json(self._path, manifest)

    @staticmethod
    def _find(manifest: Dict[str, Any], collection_id: str) -> Optional[Dict[str, Any]]:
        for entry in manifest["collections"]:
            if entry["id"] == collection_id:
                return entry
        return None

    def _require_album(self, manifest: Dict[str, Any], collection_id: str) -> Dict[str, Any]:
        entry = self._find(manifest, collection_id)
        if entry is None:
            raise CollectionMutationError(f"Collection not found: {collection_id}")
        if entry["kind"] != CollectionKind.ALBUM.value:
            raise CollectionMutationError(f"Only albums hold assets: {entry['title']}")
        return entry

    @staticmethod
    def _handle(entry: Dict[str, Any]) -> CollectionHandle:
        return CollectionHandle(
            id=entry["id"],
            title=entry["title"],
            kind=CollectionKind(entry["kind"]),
            count=len(entry.get("members", [])),
            parent_id=entry.get("parent_id"),
        )


def _unique_target(target: Path) -> Path:
    if not target.exists():
        return target
    stem, suffix = target.stem, target.suffix
    counter = 1
    while True:
        candidate = target.with_name(f"{stem} ({counter}){suffix}")
        if not candidate.exists():
            return candidate
        counter += 1
