"""Connection settings for pgbgwriter.

settings come from a small yaml file and can be overridden per item key
(parameter 0 is a connection string, parameter 1 a database name). anything
left unset falls through to libpq, which reads the usual PG* environment
variables and ~/.pgpass on its own.
"""

from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import BaseModel


class ConnectionSettings(BaseModel):
    """How to reach the PostgreSQL server."""

    dsn: str = ""  # libpq connection string or URI, may be empty
    host: str | None = None
    port: int | None = None
    database: str | None = None
    user: str | None = None
    password: str | None = None
    connect_timeout: int = 10  # seconds
    statement_timeout: int = 30000  # milliseconds, 0 disables
    detect_version: bool = True  # ask the server for server_version_num before resolving

    def with_overrides(self, dsn: str | None = None, database: str | None = None) -> Self:
        """Copy with the non-empty overrides applied."""
        update: dict[str, Any] = {}
        if dsn:
            update["dsn"] = dsn
        if database:
            update["database"] = database
        return self.model_copy(update=update)

    def connect_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for psycopg2.connect.

        keyword values win over the same setting inside the dsn. None values
        are dropped by psycopg2 so unset fields don't clobber the dsn.
        """
        kwargs: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.user,
            "password": self.password,
            "connect_timeout": self.connect_timeout,
        }
        if self.statement_timeout:
            kwargs["options"] = f"-c statement_timeout={self.statement_timeout}"
        return kwargs


def load_settings(path: str | Path) -> ConnectionSettings:
    """Load settings from a yaml file. an empty file gives the defaults."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return ConnectionSettings()
    return ConnectionSettings.model_validate(data)
