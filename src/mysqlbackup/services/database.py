"""Database enumeration service for MySQLBackup."""

from typing import Iterable, List, Sequence

import pymysql

from mysqlbackup.constants import SYSTEM_SCHEMAS
from mysqlbackup.errors import DatabaseConnectionError, QueryError
from mysqlbackup.errors_catalog import actionable_error
from mysqlbackup.models import ConnectionSettings


class DatabaseService:
    """Connects to MySQL and resolves the databases to back up."""

    def __init__(self, logger, driver=pymysql):
        self.logger = logger
        self.driver = driver

    def connect(self, settings: ConnectionSettings):
        self.logger.debug("Connecting to MySQL at %s:%s as %s", settings.host, settings.port, settings.user)
        try:
            return self.driver.connect(
                host=settings.host,
                port=settings.port,
                user=settings.user,
                password=settings.password,
                connect_timeout=settings.connect_timeout,
                charset="utf8mb4",
            )
        except self.driver.MySQLError as exc:
            raise DatabaseConnectionError(
                actionable_error(
                    "connection_failed",
                    host=settings.host,
                    port=str(settings.port),
                    reason=str(exc),
                )
            ) from exc

    def list_databases(self, connection) -> List[str]:
        try:
            with connection.cursor() as cursor:
                cursor.execute("SHOW DATABASES")
                rows = cursor.fetchall()
        except self.driver.MySQLError as exc:
            raise QueryError(actionable_error("enumeration_failed", reason=str(exc))) from exc

        return [row[0] for row in rows]

    def resolve_databases(
        self,
        settings: ConnectionSettings,
        configured: Sequence[str],
        excluded: Iterable[str] = (),
    ) -> List[str]:
        """Returns the configured databases, or every non-system database on the server.

        The server is contacted in both cases so an unreachable server fails the
        run before any dump is attempted.
        """
        connection = self.connect(settings)
        try:
            if configured:
                return list(dict.fromkeys(configured))

            skip = set(SYSTEM_SCHEMAS) | set(excluded)
            discovered = self.list_databases(connection)
        finally:
            try:
                connection.close()
            except self.driver.MySQLError as exc:
                self.logger.debug("Ignoring error while closing connection: %s", exc)

        databases = [name for name in discovered if name not in skip]
        self.logger.debug(
            "Discovered %s database(s), %s after exclusions", len(discovered), len(databases)
        )
        return databases
