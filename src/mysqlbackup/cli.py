import logging
import os

import click
from rich.logging import RichHandler

from .constants import DEFAULT_CONFIG_FILE
from .core import MySQLBackup
from .errors import BackupError
from .models import BackupConfig, ConnectionSettings, NotificationSettings, RetentionPolicy
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


def _resolve_list(cli_values, config, key):
    if cli_values:
        return tuple(cli_values)
    return tuple(str(item) for item in config.get(key) or ())


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


def build_config(options, config_values) -> BackupConfig:
    """Merges CLI options over config file values over defaults."""

    def pick(key, default=None):
        return _resolve_option(options.get(key), config_values, key, default)

    try:
        connection = ConnectionSettings(
            host=str(pick("host", "localhost")),
            port=int(pick("port", 3306)),
            user=str(pick("user", "root")),
            password=str(pick("password", "") or ""),
            connect_timeout=int(pick("connect_timeout", 10)),
        )
        retention = RetentionPolicy(
            keep_days=int(pick("keep_days", 7)),
            max_backups=int(pick("max_backups", 10)),
        )
        notification = NotificationSettings(
            enabled=bool(pick("notify", False)),
            email_to=_resolve_list(options.get("email_to"), config_values, "email_to"),
            email_from=pick("email_from"),
            smtp_host=pick("smtp_host"),
            smtp_port=int(pick("smtp_port", 587)),
            smtp_user=pick("smtp_user"),
            smtp_password=pick("smtp_password"),
            smtp_starttls=bool(pick("smtp_starttls", True)),
            subject_prefix=str(pick("subject_prefix", "[MySQL Backup]")),
            webhook_url=pick("webhook_url"),
        )
        dump_timeout = pick("dump_timeout")
        return BackupConfig(
            connection=connection,
            retention=retention,
            notification=notification,
            databases=_resolve_list(options.get("databases"), config_values, "databases"),
            exclude_databases=_resolve_list(
                options.get("exclude_databases"), config_values, "exclude_databases"
            ),
            backup_dir=str(pick("backup_dir", "./backups")),
            compress=bool(pick("compress", True)),
            mysqldump_path=str(pick("mysqldump_path", "mysqldump")),
            dump_options=_resolve_list(options.get("dump_options"), config_values, "dump_options"),
            dump_timeout=float(dump_timeout) if dump_timeout is not None else None,
            cleanup_on_failure=bool(pick("cleanup_on_failure", False)),
            manifest_file=pick("manifest_file"),
            dry_run=bool(pick("dry_run", False)),
        )
    except (TypeError, ValueError) as exc:
        raise click.ClickException(f"Invalid configuration value: {exc}") from exc


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--host", required=False, help="MySQL server host (default: localhost)")
@click.option("--port", required=False, type=int, help="MySQL server port (default: 3306)")
@click.option("--user", required=False, help="MySQL user (default: root)")
@click.option(
    "--password",
    required=False,
    envvar="MYSQLBACKUP_PASSWORD",
    help="MySQL password. Also read from MYSQLBACKUP_PASSWORD.",
)
@click.option(
    "--database",
    "databases",
    multiple=True,
    help="Database to back up. Repeat for several; omit to back up every non-system database.",
)
@click.option(
    "--exclude-database",
    "exclude_databases",
    multiple=True,
    help="Database to skip during discovery. Repeatable.",
)
@click.option("--backup-dir", required=False, type=click.Path(), help="Backup directory (default: ./backups)")
@click.option("--compress/--no-compress", default=None, help="Gzip dump files (default: on)")
@click.option("--keep-days", required=False, type=int, help="Delete backups older than N days (default: 7)")
@click.option("--max-backups", required=False, type=int, help="Keep at most N backups (default: 10)")
@click.option("--mysqldump-path", required=False, help="mysqldump executable (default: mysqldump)")
@click.option(
    "--dump-option",
    "dump_options",
    multiple=True,
    help="Extra argument passed to mysqldump, e.g. --dump-option=--single-transaction. Repeatable.",
)
@click.option("--dump-timeout", required=False, type=float, help="Timeout for each mysqldump in seconds.")
@click.option(
    "--cleanup-on-failure",
    is_flag=True,
    default=None,
    help="Apply the retention policy even when no backup was created.",
)
@click.option("--cleanup-only", is_flag=True, default=False, help="Only apply the retention policy.")
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Show what would be backed up and deleted without changing anything.",
)
@click.option("--manifest-file", required=False, type=click.Path(), help="Write a JSON run manifest here.")
@click.option("--notify", is_flag=True, default=None, help="Send the run summary by email and/or webhook.")
@click.option("--email-to", "email_to", multiple=True, help="Notification recipient. Repeatable.")
@click.option("--email-from", required=False, help="Notification sender address.")
@click.option("--smtp-host", required=False, help="SMTP server host.")
@click.option("--smtp-port", required=False, type=int, help="SMTP server port (default: 587)")
@click.option("--smtp-user", required=False, help="SMTP login user.")
@click.option(
    "--smtp-password",
    required=False,
    envvar="MYSQLBACKUP_SMTP_PASSWORD",
    help="SMTP password. Also read from MYSQLBACKUP_SMTP_PASSWORD.",
)
@click.option("--webhook-url", required=False, help="URL receiving the run summary as JSON.")
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(config, cleanup_only, verbose, log_file, **options):
    """Back up MySQL databases with mysqldump and prune old backups."""
    logger = logging.getLogger("mysqlbackup")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except BackupError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    backup_config = build_config(options, config_values)
    backup = MySQLBackup(backup_config)

    if cleanup_only:
        raise SystemExit(backup.cleanup_only())
    raise SystemExit(backup.run())


if __name__ == "__main__":
    main()
