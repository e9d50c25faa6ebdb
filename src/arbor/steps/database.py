from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from arbor.config.local_state import LocalStateError, read_local_state, write_local_state
from arbor.database.client import (
    DatabaseClient,
    DatabaseClientFactory,
    DatabaseError,
    DatabaseOptions,
    default_client_factory,
    is_database_exists_error,
)
from arbor.envfile import read_env_file
from arbor.interviewer.models import AnswerValue, Question, QuestionType
from arbor.naming import words
from arbor.steps.base import BaseStep, StepError

if TYPE_CHECKING:
    from arbor.interviewer.base import Interviewer
    from arbor.models.context import ScaffoldContext, StepOptions

logger = logging.getLogger(__name__)

MAX_CREATE_ATTEMPTS = 5
DEFAULT_SQLITE_DATABASE = "database/database.sqlite"

ENGINE_ALIASES = {
    "mysql": "mysql",
    "mariadb": "mysql",
    "pgsql": "pgsql",
    "postgres": "pgsql",
    "postgresql": "pgsql",
    "sqlite": "sqlite",
}

ENGINE_DEFAULTS = {
    "mysql": DatabaseOptions(username="root", port="3306"),
    "pgsql": DatabaseOptions(username="postgres", port="5432"),
}


def arg_value(args: list[str], flag: str) -> str:
    """Return the value following the last occurrence of ``flag`` in ``args``."""
    value = ""
    for i, arg in enumerate(args[:-1]):
        if arg == flag:
            value = args[i + 1]
    return value


def connection_options(engine: str, args: list[str]) -> DatabaseOptions:
    defaults = ENGINE_DEFAULTS.get(engine, DatabaseOptions())
    return DatabaseOptions(
        host=arg_value(args, "--host") or "127.0.0.1",
        port=arg_value(args, "--port") or defaults.port,
        username=arg_value(args, "--username") or defaults.username,
        password=arg_value(args, "--password"),
    )


@dataclass(kw_only=True)
class _DatabaseStep(BaseStep):
    args: list[str] = field(default_factory=list)
    type: str = ""
    client_factory: DatabaseClientFactory = default_client_factory

    def detect_engine(self, context: ScaffoldContext) -> str:
        """Return ``mysql``, ``pgsql``, ``sqlite``, or ``""`` when nothing usable is configured."""
        if self.type:
            return self.type if self.type in ("mysql", "pgsql", "sqlite") else ""
        connection = read_env_file(context.worktree_path).get("DB_CONNECTION", "")
        return ENGINE_ALIASES.get(connection.lower(), "")

    def open_client(self, engine: str) -> DatabaseClient:
        return self.client_factory(engine, connection_options(engine, self.args))


@dataclass(kw_only=True)
class DbCreateStep(_DatabaseStep):
    name: str = "db.create"

    def run(self, context: ScaffoldContext, options: StepOptions) -> None:
        engine = self.detect_engine(context)
        if not engine:
            logger.debug("No database engine configured (type or DB_CONNECTION); skipping")
            return

        logger.debug("Creating database (%s)", engine)
        if engine == "sqlite":
            self._create_sqlite(context)
            return
        self._create_with_retry(context, engine)

    def _create_sqlite(self, context: ScaffoldContext) -> None:
        filename = (
            arg_value(self.args, "--database")
            or read_env_file(context.worktree_path).get("DB_DATABASE", "")
            or DEFAULT_SQLITE_DATABASE
        )
        db_path = context.resolve(filename)
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            if not db_path.exists():
                db_path.touch()
                logger.debug("Created SQLite database: %s", db_path)
        except OSError as e:
            raise StepError(f"creating SQLite database {db_path}: {e}") from e

    def prefix(self, context: ScaffoldContext) -> str:
        return (
            arg_value(self.args, "--prefix")
            or context.site_name
            or read_env_file(context.worktree_path).get("APP_NAME", "")
            or "app"
        )

    def _create_with_retry(self, context: ScaffoldContext, engine: str) -> None:
        prefix = self.prefix(context)
        try:
            client = self.open_client(engine)
        except DatabaseError as e:
            raise StepError(f"creating database client: {e}") from e

        try:
            try:
                client.ping()
            except DatabaseError as e:
                logger.warning("Could not connect to %s server, skipping database creation: %s", engine, e)
                return

            last_error: Exception | None = None
            for attempt in range(1, MAX_CREATE_ATTEMPTS + 1):
                suffix = context.get_db_suffix()
                if suffix:
                    db_name = words.database_name(prefix, suffix)
                else:
                    db_name = words.generate_database_name(prefix)
                    suffix = words.extract_suffix(db_name)
                    context.set_db_suffix(suffix)

                logger.debug(
                    "Generated database name: %s (attempt %d/%d)", db_name, attempt, MAX_CREATE_ATTEMPTS
                )
                try:
                    client.create_database(db_name)
                except Exception as e:
                    if not is_database_exists_error(e):
                        raise StepError(f"failed to create database: {e}") from e
                    logger.debug("Database %s already exists, retrying", db_name)
                    context.set_db_suffix("")
                    last_error = e
                    continue

                logger.debug("Database %s created", db_name)
                self._persist_suffix(context, suffix)
                return

            raise StepError(
                f"failed to create database after {MAX_CREATE_ATTEMPTS} attempts: {last_error}"
            ) from last_error
        finally:
            client.close()

    @staticmethod
    def _persist_suffix(context: ScaffoldContext, suffix: str) -> None:
        try:
            state = read_local_state(context.worktree_path)
            state.db_suffix = suffix
            write_local_state(context.worktree_path, state)
        except LocalStateError as e:
            logger.warning("failed to persist db_suffix: %s", e)


@dataclass(kw_only=True)
class DbDestroyStep(_DatabaseStep):
    """Drop every database whose name ends in ``_<suffix>``; individual failures are logged."""

    name: str = "db.destroy"
    interviewer: Interviewer | None = None

    def run(self, context: ScaffoldContext, options: StepOptions) -> None:
        suffix = context.get_db_suffix() or self._suffix_from_local_state(context)
        if not suffix:
            logger.debug("No database suffix found, skipping cleanup")
            return
        context.set_db_suffix(suffix)

        engine = self.detect_engine(context)
        if not engine or engine == "sqlite":
            logger.debug("Nothing to drop for engine %r", engine)
            return

        try:
            client = self.open_client(engine)
        except DatabaseError as e:
            logger.warning("Could not create %s client: %s", engine, e)
            return

        try:
            self._destroy(client, engine, suffix, options)
        finally:
            client.close()

    @staticmethod
    def _suffix_from_local_state(context: ScaffoldContext) -> str:
        try:
            return read_local_state(context.worktree_path).db_suffix
        except LocalStateError as e:
            logger.warning("Could not read local state: %s", e)
            return ""

    def _destroy(self, client: DatabaseClient, engine: str, suffix: str, options: StepOptions) -> None:
        try:
            client.ping()
        except DatabaseError as e:
            logger.warning("Could not connect to %s server, skipping database cleanup: %s", engine, e)
            return

        try:
            databases = client.list_databases(f"%_{suffix}")
        except DatabaseError as e:
            logger.warning("Failed to list databases: %s", e)
            return

        if not databases:
            logger.debug("No databases matching suffix %s", suffix)
            return

        if not self._confirm(suffix, databases, options):
            logger.info("Database drop declined for suffix %s", suffix)
            return

        for db_name in databases:
            try:
                client.drop_database(db_name)
            except Exception as e:
                logger.warning("Failed to drop database %s: %s", db_name, e)
                continue
            logger.debug("Dropped database: %s", db_name)

    def _confirm(self, suffix: str, databases: list[str], options: StepOptions) -> bool:
        if self.interviewer is None or not options.prompt_mode.allow():
            return True
        listing = "\n".join(f"  - {name}" for name in databases)
        answer = self.interviewer.ask(
            Question(
                text=f"Drop {len(databases)} database(s) with suffix '{suffix}'?\n{listing}",
                type=QuestionType.CONFIRMATION,
                stage=self.name,
            )
        )
        return answer.value == AnswerValue.YES
