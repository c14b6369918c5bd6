"""Actionable error catalog for MySQLBackup."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "connection_failed": {
        "what": "Could not connect to MySQL at {host}:{port}: {reason}",
        "next": "Check host, port, user and password, and that the server accepts remote connections.",
    },
    "enumeration_failed": {
        "what": "Could not list databases: {reason}",
        "next": "Grant SHOW DATABASES to the backup user or configure `databases` explicitly.",
    },
    "no_databases": {
        "what": "No databases found to back up.",
        "next": "Configure `databases` explicitly or review `exclude_databases`.",
    },
    "dump_tool_missing": {
        "what": "Dump command not found: {command}",
        "next": "Install the MySQL client tools or point `--mysqldump-path` at mysqldump.",
    },
    "dump_failed": {
        "what": "mysqldump failed for database `{database}` (exit code {returncode}).",
        "next": "Inspect the captured output in the log and verify the user's privileges on the database.",
    },
    "compression_failed": {
        "what": "Could not compress {path}: {reason}",
        "next": "Check free disk space and write permissions on the backup directory.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
