"""Configuration loader for MySQLBackup."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from mysqlbackup.errors import ConfigError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "host",
        "port",
        "user",
        "password",
        "connect_timeout",
        "databases",
        "exclude_databases",
        "backup_dir",
        "compress",
        "keep_days",
        "max_backups",
        "mysqldump_path",
        "dump_options",
        "dump_timeout",
        "cleanup_on_failure",
        "manifest_file",
        "dry_run",
        "verbose",
        "log_file",
        "notify",
        "email_to",
        "email_from",
        "smtp_host",
        "smtp_port",
        "smtp_user",
        "smtp_password",
        "smtp_starttls",
        "subject_prefix",
        "webhook_url",
    }

    LIST_KEYS = {"databases", "exclude_databases", "dump_options", "email_to"}
    BOOL_KEYS = {"compress", "cleanup_on_failure", "dry_run", "verbose", "notify", "smtp_starttls"}
    INT_KEYS = {"port", "connect_timeout", "keep_days", "max_backups", "smtp_port"}
    NUMBER_KEYS = {"dump_timeout"}

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ConfigError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise ConfigError(f"Unknown configuration keys: {unknown_list}")

        for key in self.LIST_KEYS & set(parsed.keys()):
            value = parsed[key]
            if isinstance(value, str):
                parsed[key] = [value]
            elif value is None:
                parsed[key] = []
            elif not isinstance(value, list):
                raise ConfigError(f"Configuration key '{key}' must be a list.")

        for key, value in parsed.items():
            if value is None:
                continue
            if key in self.BOOL_KEYS and not isinstance(value, bool):
                raise ConfigError(f"Configuration key '{key}' must be true or false, got {value!r}.")
            if key in self.INT_KEYS and (isinstance(value, bool) or not isinstance(value, int)):
                raise ConfigError(f"Configuration key '{key}' must be an integer, got {value!r}.")
            if key in self.NUMBER_KEYS and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise ConfigError(f"Configuration key '{key}' must be a number, got {value!r}.")

        return parsed
