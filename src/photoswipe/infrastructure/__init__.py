from .authorization import FilesystemAuthorizationGate
from .json_collection_store import JsonCollectionStore
from .pillow_decoder import PillowPreviewDecoder, decode_preview
from .sources import FolderAssetSource, StaticAssetSource

__all__ = [
    "FilesystemAuthorizationGate",
    "FolderAssetSource",
    "JsonCollectionStore",
    "PillowPreviewDecoder",
    "StaticAssetSource",
    "decode_preview",
]
