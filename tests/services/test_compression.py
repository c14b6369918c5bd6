import gzip
import os

import pytest

from mysqlbackup.errors import CompressionError
from mysqlbackup.services.compression import CompressionService
from mysqlbackup.services.filesystem import FileSystemService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


def _service():
    return CompressionService(logger=DummyLogger(), filesystem_service=FileSystemService(logger=DummyLogger()))


def test_compress_replaces_dump_with_gzip_file(tmp_path):
    dump = tmp_path / "shop_2024-06-15_08-30-05.sql"
    dump.write_text("INSERT INTO t VALUES (1);\n" * 100, encoding="utf-8")

    result = _service().compress(str(dump))

    assert result == f"{dump}.gz"
    assert not dump.exists()
    with gzip.open(result, "rt", encoding="utf-8") as file_obj:
        assert file_obj.read() == "INSERT INTO t VALUES (1);\n" * 100


def test_compress_disabled_returns_dump_path(tmp_path):
    dump = tmp_path / "shop_2024-06-15_08-30-05.sql"
    dump.write_text("SELECT 1;", encoding="utf-8")

    assert _service().compress(str(dump), enabled=False) == str(dump)
    assert dump.exists()
    assert not os.path.exists(f"{dump}.gz")


def test_compress_failure_leaves_no_compressed_file(tmp_path):
    dump = tmp_path / "shop_2024-06-15_08-30-05.sql"

    with pytest.raises(CompressionError, match="Could not compress"):
        _service().compress(str(dump))

    assert os.listdir(tmp_path) == []


def test_compress_write_error_discards_partial_output(tmp_path, monkeypatch):
    dump = tmp_path / "shop_2024-06-15_08-30-05.sql"
    dump.write_text("SELECT 1;", encoding="utf-8")

    def failing_copy(*_args, **_kwargs):
        raise OSError("No space left on device")

    monkeypatch.setattr("mysqlbackup.services.compression.shutil.copyfileobj", failing_copy)

    with pytest.raises(CompressionError, match="No space left"):
        _service().compress(str(dump))

    assert sorted(os.listdir(tmp_path)) == [dump.name]
