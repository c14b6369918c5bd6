"""
MySQLBackup - unattended mysqldump backups with retention
"""

__version__ = "0.1.0"

from .core import MySQLBackup
from .errors import BackupError
from .models import BackupConfig, RetentionPolicy, RunResult, RunStatus

__all__ = ["MySQLBackup", "BackupError", "BackupConfig", "RetentionPolicy", "RunResult", "RunStatus"]
