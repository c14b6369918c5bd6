import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console

from .constants import COMPRESSED_EXTENSION
from .errors import BackupError, CompressionError, DumpError
from .errors_catalog import actionable_error
from .models import BackupConfig, CleanupResult, RunResult, RunStatus
from .services.command_runner import CommandRunner
from .services.compression import CompressionService
from .services.database import DatabaseService
from .services.dump import DumpService
from .services.filesystem import FileSystemService
from .services.manifest import ManifestService
from .services.notification import NotificationService
from .services.report import ReportService, format_bytes
from .services.retention import RetentionService

console = Console()
logger = logging.getLogger("mysqlbackup")


class MySQLBackup:
    """Runs one backup pass: enumerate, dump and compress, enforce retention, report."""

    def __init__(
        self,
        config: BackupConfig,
        database_service: Optional[DatabaseService] = None,
        dump_service: Optional[DumpService] = None,
        compression_service: Optional[CompressionService] = None,
        retention_service: Optional[RetentionService] = None,
        report_service: Optional[ReportService] = None,
    ):
        self.config = config
        self.run_id = uuid.uuid4().hex[:10]

        self.filesystem_service = FileSystemService(logger=logger)
        self.command_runner = CommandRunner(logger=logger, default_timeout=config.dump_timeout)
        self.manifest_service = ManifestService(manifest_file=config.manifest_file, logger=logger)

        self.database_service = database_service or DatabaseService(logger=logger)
        self.dump_service = dump_service or DumpService(
            logger=logger,
            filesystem_service=self.filesystem_service,
            run_cmd=self._run_cmd,
            connection=config.connection,
            backup_dir=config.backup_dir,
            mysqldump_path=config.mysqldump_path,
            dump_options=config.dump_options,
            timeout=config.dump_timeout,
        )
        self.compression_service = compression_service or CompressionService(
            logger=logger,
            filesystem_service=self.filesystem_service,
        )
        self.retention_service = retention_service or RetentionService(
            logger=logger,
            filesystem_service=self.filesystem_service,
        )
        self.report_service = report_service or ReportService(
            logger=logger,
            console=console,
            notification_service=NotificationService(config.notification, logger=logger),
        )

    def _run_cmd(self, cmd: List[str], **kwargs):
        return self.command_runner.run(cmd, **kwargs)

    def _build_manifest_metadata(self) -> Dict[str, Any]:
        return {
            "host": self.config.connection.host,
            "port": self.config.connection.port,
            "backup_dir": self.config.backup_dir,
            "compress": self.config.compress,
            "keep_days": self.config.retention.keep_days,
            "max_backups": self.config.retention.max_backups,
            "dry_run": self.config.dry_run,
        }

    def resolve_databases(self) -> List[str]:
        return self.database_service.resolve_databases(
            self.config.connection,
            self.config.databases,
            self.config.exclude_databases,
        )

    def backup_database(self, database: str) -> str:
        dump_path = self.dump_service.dump(database)
        return self.compression_service.compress(dump_path, self.config.compress)

    def enforce_retention(self, dry_run: bool = False) -> Optional[CleanupResult]:
        self.manifest_service.step_started("retention")
        try:
            cleanup = self.retention_service.enforce(
                self.config.backup_dir,
                self.config.retention,
                dry_run=dry_run,
            )
        except OSError as exc:
            logger.error("Retention cleanup failed: %s", exc)
            self.manifest_service.step_finished("retention", "failed", error=str(exc))
            return None

        self.manifest_service.step_finished("retention", "success")
        self.manifest_service.set_cleanup(cleanup.deleted_count, cleanup.freed_bytes)
        return cleanup

    def _backup_all(self, databases: List[str]) -> Tuple[List[str], List[Tuple[str, str]]]:
        created: List[str] = []
        failures: List[Tuple[str, str]] = []

        for database in databases:
            step_name = f"backup:{database}"
            self.manifest_service.step_started(step_name)
            try:
                artifact = self.backup_database(database)
            except (DumpError, CompressionError) as exc:
                logger.error("Backup of %s failed: %s", database, exc)
                failures.append((database, str(exc)))
                self.manifest_service.step_finished(step_name, "failed", error=str(exc))
                continue

            created.append(artifact)
            self.manifest_service.add_artifact(database, artifact)
            self.manifest_service.step_finished(step_name, "success", details={"artifact": artifact})

        return created, failures

    def _log_plan(self, databases: List[str]):
        for database in databases:
            path = self.dump_service.build_artifact_path(database)
            if self.config.compress:
                path = f"{path}{COMPRESSED_EXTENSION}"
            console.print(f"[blue]Would back up {database} to {path}[/blue]")
            logger.info("Dry run: would back up %s to %s", database, path)

    def execute(self) -> RunResult:
        requested: List[str] = []
        created: List[str] = []
        failures: List[Tuple[str, str]] = []
        cleanup: Optional[CleanupResult] = None
        error: Optional[str] = None
        fatal = False

        try:
            logger.info("=== Starting MySQL backup (run %s) ===", self.run_id)
            self.manifest_service.start_run(self.run_id, self._build_manifest_metadata())

            requested = self.resolve_databases()
            self.manifest_service.set_databases(requested)

            if requested:
                logger.info("Databases found: %s", len(requested))
            else:
                error = actionable_error("no_databases")
                logger.error(error)

            if self.config.dry_run:
                self._log_plan(requested)
                cleanup = self.enforce_retention(dry_run=True)
            else:
                created, failures = self._backup_all(requested)
                if created or self.config.cleanup_on_failure:
                    cleanup = self.enforce_retention()
                else:
                    logger.warning("No backups were created; skipping retention cleanup.")

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            error = "Operation cancelled by user."
            fatal = True
        except BackupError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            error = str(exc)
            fatal = True
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            error = str(exc)
            fatal = True

        status = RunStatus.FAILED if fatal else RunResult.classify(requested, created)
        return RunResult(
            requested_databases=tuple(requested),
            created_artifacts=tuple(created),
            status=status,
            cleanup=cleanup,
            failures=tuple(failures),
            error=error,
        )

    def run(self) -> int:
        result = self.execute()

        if self.config.dry_run:
            self.manifest_service.finalize("dry_run", error=result.error)
            logger.info("=== Dry run completed ===")
            return 0 if result.requested_databases and result.error is None else 1

        self.manifest_service.finalize(result.status.value.lower(), error=result.error)
        try:
            self.report_service.report(result)
        except Exception:
            logger.exception("Could not report backup result")

        logger.info("=== Backup completed: %s ===", result.status.value)
        return 0 if result.status is RunStatus.SUCCESS else 1

    def cleanup_only(self) -> int:
        """Applies the retention policy without taking new backups."""
        logger.info("=== Starting retention cleanup (run %s) ===", self.run_id)
        self.manifest_service.start_run(self.run_id, self._build_manifest_metadata())

        cleanup = self.enforce_retention(dry_run=self.config.dry_run)
        if cleanup is None:
            self.manifest_service.finalize("failed", error="Retention cleanup failed.")
            return 1

        self.manifest_service.finalize("success")
        console.print(
            f"[green]Backups deleted: {cleanup.deleted_count}, "
            f"space freed: {format_bytes(cleanup.freed_bytes)}[/green]"
        )
        logger.info("=== Retention cleanup completed ===")
        return 0
