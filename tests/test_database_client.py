import pytest
from sqlalchemy.exc import OperationalError

from arbor.database.client import (
    DatabaseError,
    DatabaseExistsError,
    DatabaseOptions,
    SqlAlchemyDatabaseClient,
    is_database_exists_error,
)
from arbor.steps.database import arg_value, connection_options


class TestUrl:
    def test_mysql(self):
        url = SqlAlchemyDatabaseClient._build_url(
            "mysql", DatabaseOptions(host="db", port="3307", username="root", password="s3cret")
        )
        assert url.drivername == "mysql+pymysql"
        assert (url.host, url.port, url.username, url.password) == ("db", 3307, "root", "s3cret")
        assert url.database is None

    def test_pgsql_connects_to_maintenance_db(self):
        url = SqlAlchemyDatabaseClient._build_url("pgsql", DatabaseOptions(username="postgres"))
        assert url.drivername == "postgresql+psycopg"
        assert url.database == "postgres"
        assert url.port is None
        assert url.password is None

    def test_unsupported_engine(self):
        with pytest.raises(DatabaseError, match="unsupported"):
            SqlAlchemyDatabaseClient("sqlite", DatabaseOptions())


class TestExistsDetection:
    def test_own_error(self):
        assert is_database_exists_error(DatabaseExistsError("x"))

    def test_mysql_code(self):
        orig = Exception(1007, "Can't create database 'app_x'; database exists")
        assert is_database_exists_error(OperationalError("CREATE DATABASE", {}, orig))

    def test_pgsql_message(self):
        assert is_database_exists_error(Exception('database "app_x" already exists'))

    def test_other_errors(self):
        assert not is_database_exists_error(Exception("access denied"))


class TestConnectionOptions:
    def test_engine_defaults(self):
        assert connection_options("mysql", []) == DatabaseOptions(
            host="127.0.0.1", port="3306", username="root", password=""
        )
        assert connection_options("pgsql", []).username == "postgres"

    def test_args_override(self):
        args = ["--host", "db", "--port", "6000", "--username", "u", "--password", "p"]
        assert connection_options("pgsql", args) == DatabaseOptions(host="db", port="6000", username="u", password="p")

    def test_arg_value(self):
        assert arg_value(["--prefix", "a", "--prefix", "b"], "--prefix") == "b"
        assert arg_value(["--prefix"], "--prefix") == ""
        assert arg_value([], "--prefix") == ""
