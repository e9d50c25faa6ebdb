"""Server-level database operations behind a small client protocol.

Only what the db steps need: reachability, create, list by LIKE pattern,
and drop. Clients are short-lived; callers close them when done.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.pool import NullPool

MYSQL_DATABASE_EXISTS = 1007
PGSQL_DUPLICATE_DATABASE = "42P04"
CONNECT_TIMEOUT_SECONDS = 5


class DatabaseError(Exception):
    pass


class DatabaseConnectionError(DatabaseError):
    pass


class DatabaseExistsError(DatabaseError):
    pass


@dataclass
class DatabaseOptions:
    host: str = "127.0.0.1"
    port: str = ""
    username: str = ""
    password: str = ""


class DatabaseClient(Protocol):
    def ping(self) -> None: ...

    def create_database(self, name: str) -> None: ...

    def list_databases(self, pattern: str) -> list[str]: ...

    def drop_database(self, name: str) -> None: ...

    def close(self) -> None: ...


DatabaseClientFactory = Callable[[str, DatabaseOptions], DatabaseClient]


def is_database_exists_error(error: BaseException) -> bool:
    if isinstance(error, DatabaseExistsError):
        return True
    orig: Any = error.orig if isinstance(error, DBAPIError) else error
    if getattr(orig, "sqlstate", None) == PGSQL_DUPLICATE_DATABASE:
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DATABASE_EXISTS:
        return True
    message = str(error).lower()
    return "database exists" in message or ("database" in message and "already exists" in message)


class SqlAlchemyDatabaseClient:
    """DatabaseClient for MySQL/MariaDB (PyMySQL) and PostgreSQL (psycopg)."""

    _LIST_QUERIES = {
        "mysql": "SELECT schema_name FROM information_schema.schemata WHERE schema_name LIKE :pattern ORDER BY schema_name",
        "pgsql": "SELECT datname FROM pg_database WHERE datname LIKE :pattern AND NOT datistemplate ORDER BY datname",
    }

    def __init__(self, engine_name: str, options: DatabaseOptions) -> None:
        if engine_name not in self._LIST_QUERIES:
            raise DatabaseError(f"unsupported database engine: {engine_name}")
        self._engine_name = engine_name
        self._engine: Engine = create_engine(
            self._build_url(engine_name, options),
            poolclass=NullPool,
            connect_args={"connect_timeout": CONNECT_TIMEOUT_SECONDS},
            isolation_level="AUTOCOMMIT",
        )

    @staticmethod
    def _build_url(engine_name: str, options: DatabaseOptions) -> URL:
        port = int(options.port) if options.port else None
        if engine_name == "mysql":
            return URL.create(
                "mysql+pymysql",
                username=options.username or None,
                password=options.password or None,
                host=options.host,
                port=port,
            )
        return URL.create(
            "postgresql+psycopg",
            username=options.username or None,
            password=options.password or None,
            host=options.host,
            port=port,
            database="postgres",
        )

    def _quote(self, name: str) -> str:
        return self._engine.dialect.identifier_preparer.quote_identifier(name)

    def ping(self) -> None:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(f"cannot connect to {self._engine_name} server: {e}") from e

    def create_database(self, name: str) -> None:
        try:
            with self._engine.connect() as conn:
                conn.execute(text(f"CREATE DATABASE {self._quote(name)}"))
        except SQLAlchemyError as e:
            if is_database_exists_error(e):
                raise DatabaseExistsError(f"database {name!r} already exists") from e
            raise DatabaseError(f"creating database {name!r}: {e}") from e

    def list_databases(self, pattern: str) -> list[str]:
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(text(self._LIST_QUERIES[self._engine_name]), {"pattern": pattern})
                return [row[0] for row in rows]
        except SQLAlchemyError as e:
            raise DatabaseError(f"listing databases: {e}") from e

    def drop_database(self, name: str) -> None:
        try:
            with self._engine.connect() as conn:
                conn.execute(text(f"DROP DATABASE {self._quote(name)}"))
        except SQLAlchemyError as e:
            raise DatabaseError(f"dropping database {name!r}: {e}") from e

    def close(self) -> None:
        self._engine.dispose()


def default_client_factory(engine_name: str, options: DatabaseOptions) -> DatabaseClient:
    return SqlAlchemyDatabaseClient(engine_name, options)
