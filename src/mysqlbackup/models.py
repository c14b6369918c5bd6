"""Shared domain models for MySQLBackup."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence, Tuple


class RunStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ConnectionSettings:
    """Credentials and address of the MySQL server."""

    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = field(default="", repr=False)
    connect_timeout: int = 10


@dataclass(frozen=True)
class RetentionPolicy:
    """An artifact survives only if it is young enough AND among the newest."""

    keep_days: int = 7
    max_backups: int = 10

    def __post_init__(self):
        for name in ("keep_days", "max_backups"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")


@dataclass(frozen=True)
class NotificationSettings:
    enabled: bool = False
    email_to: Tuple[str, ...] = ()
    email_from: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = field(default=None, repr=False)
    smtp_starttls: bool = True
    subject_prefix: str = "[MySQL Backup]"
    webhook_url: Optional[str] = None
    timeout: float = 15.0


@dataclass(frozen=True)
class BackupConfig:
    """Immutable run configuration handed to the orchestrator."""

    connection: ConnectionSettings = field(default_factory=ConnectionSettings)
    retention: RetentionPolicy = field(default_factory=RetentionPolicy)
    notification: NotificationSettings = field(default_factory=NotificationSettings)
    databases: Tuple[str, ...] = ()
    exclude_databases: Tuple[str, ...] = ()
    backup_dir: str = "./backups"
    compress: bool = True
    mysqldump_path: str = "mysqldump"
    dump_options: Tuple[str, ...] = ()
    dump_timeout: Optional[float] = None
    cleanup_on_failure: bool = False
    manifest_file: Optional[str] = None
    dry_run: bool = False


@dataclass(frozen=True)
class BackupArtifact:
    """One backup file found on disk."""

    path: str
    database: str
    modified_at: datetime
    size_bytes: int


@dataclass(frozen=True)
class CleanupResult:
    deleted_count: int = 0
    freed_bytes: int = 0
    deleted_paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RunResult:
    """Outcome of one orchestration pass."""

    requested_databases: Tuple[str, ...]
    created_artifacts: Tuple[str, ...]
    status: RunStatus
    cleanup: Optional[CleanupResult] = None
    failures: Tuple[Tuple[str, str], ...] = ()
    error: Optional[str] = None

    @property
    def created_count(self) -> int:
        return len(self.created_artifacts)

    @staticmethod
    def classify(requested: Sequence[str], created: Sequence[str]) -> RunStatus:
        if not requested or not created:
            return RunStatus.FAILED
        if len(created) == len(requested):
            return RunStatus.SUCCESS
        return RunStatus.PARTIAL
