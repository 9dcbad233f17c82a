# ============================================================================
# SCRATCH STORAGE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Infrastructure - Local filesystem collaborator
# PURPOSE: Write/read/delete a marker file for the storage check
# CREATED: 19 OCT 2026
# ============================================================================
"""
Scratch Storage

Local filesystem area the storage check writes its marker file into.
Operations are blocking; callers on the event loop should run them in a
worker thread.
"""

import logging
import os

from core.errors import DependencyUnavailable

logger = logging.getLogger(__name__)


class LocalScratchStorage:
    """Read/write access to files under a single base directory."""

    def __init__(self, base_path: str):
        self.base_path = os.path.abspath(base_path)

    @property
    def path(self) -> str:
        return self.base_path

    def _resolve(self, name: str) -> str:
        return os.path.join(self.base_path, name)

    def write(self, name: str, content: str) -> None:
        try:
            os.makedirs(self.base_path, exist_ok=True)
            with open(self._resolve(name), "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise DependencyUnavailable("storage", f"Write failed: {e}") from e

    def read(self, name: str) -> str:
        try:
            with open(self._resolve(name), "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise DependencyUnavailable("storage", f"Read failed: {e}") from e

    def delete(self, name: str) -> None:
        try:
            os.remove(self._resolve(name))
        except OSError as e:
            raise DependencyUnavailable("storage", f"Delete failed: {e}") from e


__all__ = [
    "LocalScratchStorage",
]
