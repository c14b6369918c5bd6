from datetime import datetime

import pytest

from mysqlbackup.models import CleanupResult, RunResult, RunStatus
from mysqlbackup.services.report import ReportService, format_bytes


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None

    def exception(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


class RecordingNotifier:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def notify(self, summary, body):
        self.calls.append((summary, body))
        if self.error:
            raise self.error
        return True


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1024 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5 MB"),
        (int(2.25 * 1024 ** 3), "2.25 GB"),
    ],
)
def test_format_bytes(size, expected):
    assert format_bytes(size) == expected


def _result():
    return RunResult(
        requested_databases=("shop", "blog", "crm"),
        created_artifacts=("/b/shop.sql.gz", "/b/blog.sql.gz"),
        status=RunStatus.PARTIAL,
        cleanup=CleanupResult(deleted_count=2, freed_bytes=2048, deleted_paths=("/b/a", "/b/b")),
        failures=(("crm", "mysqldump failed"),),
    )


def test_render_text_lists_counts_and_details():
    service = ReportService(logger=DummyLogger(), console=DummyConsole())
    summary = service.build_summary(_result(), finished_at=datetime(2024, 6, 15, 9, 0, 0))

    body = service.render_text(summary)

    assert "Status: PARTIAL" in body
    assert "Date: 2024-06-15 09:00:00" in body
    assert "Databases: 3" in body
    assert "Backups created: 2" in body
    assert "Backups deleted: 2" in body
    assert "Space freed: 2 KB" in body
    assert "- /b/shop.sql.gz" in body
    assert "- FAILED crm: mysqldump failed" in body


def test_render_text_omits_cleanup_when_not_run():
    service = ReportService(logger=DummyLogger(), console=DummyConsole())
    result = RunResult(requested_databases=(), created_artifacts=(), status=RunStatus.FAILED, error="boom")

    body = service.render_text(service.build_summary(result))

    assert "Backups deleted" not in body
    assert "Error: boom" in body


def test_report_hands_summary_to_notifier():
    notifier = RecordingNotifier()
    service = ReportService(logger=DummyLogger(), console=DummyConsole(), notification_service=notifier)

    summary = service.report(_result())

    assert summary["status"] == "PARTIAL"
    assert summary["created"] == 2
    assert summary["freed_bytes"] == 2048
    assert notifier.calls[0][0] is summary
    assert "Status: PARTIAL" in notifier.calls[0][1]


def test_report_swallows_notifier_failures():
    notifier = RecordingNotifier(error=RuntimeError("smtp down"))
    service = ReportService(logger=DummyLogger(), console=DummyConsole(), notification_service=notifier)

    summary = service.report(_result())

    assert summary["status"] == "PARTIAL"
    assert len(notifier.calls) == 1
