"""Domain errors for MySQLBackup."""


class BackupError(RuntimeError):
    """Raised when a backup operation cannot continue safely."""


class ConfigError(BackupError):
    """Raised when configuration values are missing or invalid."""


class DatabaseConnectionError(BackupError):
    """Raised when the MySQL server cannot be reached."""


class QueryError(BackupError):
    """Raised when the database enumeration query fails."""


class DumpError(BackupError):
    """Raised when mysqldump fails for a single database."""

    def __init__(self, message: str, database: str = "", output: str = ""):
        super().__init__(message)
        self.database = database
        self.output = output


class CompressionError(BackupError):
    """Raised when a dump file cannot be compressed."""
