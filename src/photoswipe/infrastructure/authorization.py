"""Filesystem permission check standing in for a photo-library prompt."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..domain.models import AccessStatus
from ..domain.repositories import IAuthorizationGate

LOGGER = logging.getLogger(__name__)


class FilesystemAuthorizationGate(IAuthorizationGate):
    """Grant full access to a writable root and limited access to a read-only one."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def request_access(self) -> AccessStatus:
        root = self._root
        if not root.is_dir() or not os.access(root, os.R_OK | os.X_OK):
            LOGGER.warning("Library %s is not readable", root)
            return AccessStatus.DENIED
        if os.access(root, os.W_OK):
            return AccessStatus.GRANTED
        LOGGER.info("Library %s is read-only; commits will fail", root)
        return AccessStatus.LIMITED
