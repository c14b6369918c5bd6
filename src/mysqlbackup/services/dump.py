"""mysqldump execution service for MySQLBackup."""

import os
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from mysqlbackup.constants import DIR_MODE, DUMP_EXTENSION, PARTIAL_SUFFIX, TIMESTAMP_FORMAT
from mysqlbackup.errors import BackupError, DumpError
from mysqlbackup.errors_catalog import actionable_error
from mysqlbackup.models import ConnectionSettings
from mysqlbackup.services.command_runner import CommandNotFoundError


class DumpService:
    """Produces one ``{database}_{timestamp}.sql`` file per call."""

    def __init__(
        self,
        logger,
        filesystem_service,
        run_cmd: Callable,
        connection: ConnectionSettings,
        backup_dir: str,
        mysqldump_path: str = "mysqldump",
        dump_options: Sequence[str] = (),
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.logger = logger
        self.filesystem_service = filesystem_service
        self.run_cmd = run_cmd
        self.connection = connection
        self.backup_dir = backup_dir
        self.mysqldump_path = mysqldump_path
        self.dump_options = list(dump_options)
        self.timeout = timeout
        self.clock = clock

    def build_artifact_path(self, database: str, now: Optional[datetime] = None) -> str:
        timestamp = (now or self.clock()).strftime(TIMESTAMP_FORMAT)
        return os.path.join(self.backup_dir, f"{database}_{timestamp}{DUMP_EXTENSION}")

    def build_command(self, database: str, destination: str) -> List[str]:
        return [
            self.mysqldump_path,
            "--host",
            self.connection.host,
            "--port",
            str(self.connection.port),
            "--user",
            self.connection.user,
            *self.dump_options,
            "--result-file",
            destination,
            database,
        ]

    def dump(self, database: str) -> str:
        try:
            self.filesystem_service.ensure_dir(self.backup_dir, DIR_MODE)
        except OSError as exc:
            raise DumpError(
                f"Could not create backup directory {self.backup_dir}: {exc}", database=database
            ) from exc

        final_path = self.build_artifact_path(database)
        partial_path = f"{final_path}{PARTIAL_SUFFIX}"
        cmd = self.build_command(database, partial_path)

        self.logger.info("Dumping database %s...", database)
        try:
            result = self.run_cmd(
                cmd,
                check=False,
                capture_output=True,
                timeout=self.timeout,
                env={"MYSQL_PWD": self.connection.password},
                merge_stderr=True,
            )
        except CommandNotFoundError as exc:
            self.filesystem_service.discard(partial_path)
            raise DumpError(
                actionable_error("dump_tool_missing", command=exc.command),
                database=database,
            ) from exc
        except BackupError as exc:
            self.filesystem_service.discard(partial_path)
            raise DumpError(str(exc), database=database) from exc

        output = (result.stdout or "").strip()
        if result.returncode != 0:
            self.filesystem_service.discard(partial_path)
            if output:
                self.logger.error("mysqldump output for %s:\n%s", database, output)
            raise DumpError(
                actionable_error(
                    "dump_failed",
                    database=database,
                    returncode=str(result.returncode),
                ),
                database=database,
                output=output,
            )

        try:
            os.replace(partial_path, final_path)
        except OSError as exc:
            self.filesystem_service.discard(partial_path)
            raise DumpError(
                f"Could not finalize dump file {final_path}: {exc}", database=database
            ) from exc

        self.logger.info("Backup created: %s", final_path)
        return final_path
