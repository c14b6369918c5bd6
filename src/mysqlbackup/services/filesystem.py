"""Filesystem helpers for MySQLBackup."""

import logging
import os
import sys
from datetime import datetime, timezone
from typing import List, NamedTuple


class FileEntry(NamedTuple):
    path: str
    name: str
    modified_at: datetime
    size_bytes: int


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def set_permissions(self, path: str, mode: int):
        if sys.platform == "win32":
            return

        try:
            os.chmod(path, mode)
        except OSError as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def ensure_dir(self, path: str, mode: int):
        if os.path.isdir(path):
            return
        os.makedirs(path, mode=mode, exist_ok=True)
        self.set_permissions(path, mode)
        self.logger.debug("Created directory: %s", path)

    def list_files(self, directory: str) -> List[FileEntry]:
        """Regular files directly under ``directory``; missing directory lists nothing."""
        if not os.path.isdir(directory):
            return []

        entries: List[FileEntry] = []
        with os.scandir(directory) as iterator:
            for entry in iterator:
                try:
                    if not entry.is_file(follow_symlinks=False):
                        continue
                    stat = entry.stat(follow_symlinks=False)
                except FileNotFoundError:
                    continue
                entries.append(
                    FileEntry(
                        path=entry.path,
                        name=entry.name,
                        modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                        size_bytes=stat.st_size,
                    )
                )
        return entries

    def remove_file(self, path: str):
        os.remove(path)
        self.logger.debug("Removed file: %s", path)

    def discard(self, path: str):
        """Best-effort removal of partial output."""
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            self.logger.warning("Could not remove %s: %s", path, exc)
