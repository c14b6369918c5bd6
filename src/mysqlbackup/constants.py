"""Shared constants for MySQLBackup."""

DIR_MODE = 0o755

SYSTEM_SCHEMAS = frozenset({"information_schema", "performance_schema", "mysql", "sys"})

DUMP_EXTENSION = ".sql"
COMPRESSED_EXTENSION = ".gz"
PARTIAL_SUFFIX = ".partial"

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
ARTIFACT_NAME_PATTERN = (
    r"^(?P<database>.+)_(?P<timestamp>\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2})\.sql(?:\.gz)?$"
)

GZIP_LEVEL = 9
SECONDS_PER_DAY = 24 * 60 * 60

DEFAULT_CONFIG_FILE = ".mysqlbackup.yml"
