"""Run summary presentation for MySQLBackup."""

from datetime import datetime
from typing import Any, Dict, Optional

from rich.table import Table

from mysqlbackup.models import RunResult, RunStatus

_STATUS_STYLES = {
    RunStatus.SUCCESS: "bold green",
    RunStatus.PARTIAL: "bold yellow",
    RunStatus.FAILED: "bold red",
}


def format_bytes(size: float, precision: int = 2) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    index = 0
    while size > 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{round(size, precision):g} {units[index]}"


class ReportService:
    """Formats the RunResult and forwards it to the notifier."""

    def __init__(self, logger, console, notification_service=None):
        self.logger = logger
        self.console = console
        self.notification_service = notification_service

    def build_summary(self, result: RunResult, finished_at: Optional[datetime] = None) -> Dict[str, Any]:
        cleanup = result.cleanup
        return {
            "status": result.status.value,
            "date": (finished_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S"),
            "databases": list(result.requested_databases),
            "artifacts": list(result.created_artifacts),
            "created": result.created_count,
            "failures": [{"database": db, "error": message} for db, message in result.failures],
            "cleanup_ran": cleanup is not None,
            "deleted": cleanup.deleted_count if cleanup else 0,
            "freed_bytes": cleanup.freed_bytes if cleanup else 0,
            "error": result.error,
        }

    def render_text(self, summary: Dict[str, Any]) -> str:
        lines = [
            "MySQL backup result",
            "",
            f"Status: {summary['status']}",
            f"Date: {summary['date']}",
            f"Databases: {len(summary['databases'])}",
            f"Backups created: {summary['created']}",
        ]
        if summary["cleanup_ran"]:
            lines.append(f"Backups deleted: {summary['deleted']}")
            lines.append(f"Space freed: {format_bytes(summary['freed_bytes'])}")
        if summary["error"]:
            lines.append(f"Error: {summary['error']}")

        lines.append("")
        lines.append("Details:")
        for artifact in summary["artifacts"]:
            lines.append(f"- {artifact}")
        for failure in summary["failures"]:
            lines.append(f"- FAILED {failure['database']}: {failure['error']}")
        return "\n".join(lines) + "\n"

    def _render_table(self, summary: Dict[str, Any]) -> Table:
        table = Table(title="Backup summary", show_header=False)
        table.add_column("Field", style="dim")
        table.add_column("Value")
        table.add_row("Status", summary["status"])
        table.add_row("Databases", str(len(summary["databases"])))
        table.add_row("Backups created", str(summary["created"]))
        if summary["cleanup_ran"]:
            table.add_row("Backups deleted", str(summary["deleted"]))
            table.add_row("Space freed", format_bytes(summary["freed_bytes"]))
        return table

    def report(self, result: RunResult, finished_at: Optional[datetime] = None) -> Dict[str, Any]:
        summary = self.build_summary(result, finished_at)

        style = _STATUS_STYLES[result.status]
        self.console.print(self._render_table(summary))
        self.console.print(f"[{style}]Backup {result.status.value}[/{style}]")

        self.logger.info("Backups created: %s", summary["created"])
        if summary["cleanup_ran"]:
            self.logger.info("Backups deleted: %s", summary["deleted"])
            self.logger.info("Space freed: %s", format_bytes(summary["freed_bytes"]))
        for failure in summary["failures"]:
            self.logger.warning("Failed: %s: %s", failure["database"], failure["error"])

        if self.notification_service is not None:
            try:
                self.notification_service.notify(summary, self.render_text(summary))
            except Exception:
                self.logger.exception("Notification failed")

        return summary
