"""Read-side helpers for browsing collections."""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from photoswipe.domain.models import CollectionHandle, CollectionKind
from photoswipe.domain.repositories import ICollectionStore


def sort_collections(collections: Iterable[CollectionHandle]) -> List[CollectionHandle]:
    """Folders before albums, each group ordered by title."""

    return sorted(
        collections,
        key=lambda c: (c.kind is not CollectionKind.FOLDER, c.title),
    )


def build_overview(store: ICollectionStore, parent_id: Optional[str] = None) -> List[CollectionHandle]:
    """List the children of *parent_id* (the root when ``None``) for display.

    Empty albums are hidden; folders are always shown.
    """

    children = [
        collection
        for collection in store.list_collections()
        if collection.parent_id == parent_id
        and (collection.kind is CollectionKind.FOLDER or collection.count > 0)
    ]
    return sort_collections(children)


def suggest_titles(query: str, collections: Iterable[CollectionHandle]) -> List[str]:
    """Album titles containing *query*, case-insensitively, for label completion."""

    needle = query.strip().casefold()
    if not needle:
        return []
    seen: Set[str] = set()
    suggestions: List[str] = []
    for collection in sort_collections(collections):
        if collection.kind is not CollectionKind.ALBUM:
            continue
        if needle in collection.title.casefold() and collection.title not in seen:
            seen.add(collection.title)
            suggestions.append(collection.title)
    return suggestions


def collected_asset_ids(store: ICollectionStore) -> Set[str]:
    """Ids of every asset that already belongs to at least one album."""

    ids: Set[str] = set()
    for album in store.list_collections(kind=CollectionKind.ALBUM):
        ids.update(asset.id for asset in store.list_members(album))
    return ids


def album_titles_for(store: ICollectionStore, asset_id: str) -> List[str]:
    """Titles of the albums that already contain *asset_id*."""

    titles = []
    for album in sort_collections(store.list_collections(kind=CollectionKind.ALBUM)):
        if any(member.id == asset_id for member in store.list_members(album)):
            titles.append(album.title)
    return titles
