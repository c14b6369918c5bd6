"""Gzip compression of dump files."""

import gzip
import os
import shutil

from mysqlbackup.constants import COMPRESSED_EXTENSION, GZIP_LEVEL, PARTIAL_SUFFIX
from mysqlbackup.errors import CompressionError
from mysqlbackup.errors_catalog import actionable_error


class CompressionService:
    """Replaces a finished dump file with its ``.gz`` counterpart."""

    CHUNK_SIZE = 1024 * 1024

    def __init__(self, logger, filesystem_service, level: int = GZIP_LEVEL):
        self.logger = logger
        self.filesystem_service = filesystem_service
        self.level = level

    def compress(self, path: str, enabled: bool = True) -> str:
        if not enabled:
            return path

        compressed_path = f"{path}{COMPRESSED_EXTENSION}"
        partial_path = f"{compressed_path}{PARTIAL_SUFFIX}"

        try:
            with open(path, "rb") as src, gzip.open(
                partial_path, "wb", compresslevel=self.level
            ) as dst:
                shutil.copyfileobj(src, dst, self.CHUNK_SIZE)
            os.replace(partial_path, compressed_path)
        except OSError as exc:
            self.filesystem_service.discard(partial_path)
            raise CompressionError(
                actionable_error("compression_failed", path=path, reason=str(exc))
            ) from exc

        try:
            self.filesystem_service.remove_file(path)
        except OSError as exc:
            self.logger.warning("Could not remove uncompressed dump %s: %s", path, exc)

        self.logger.info("Backup compressed: %s", compressed_path)
        return compressed_path
