from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PostgresConfig:
    """Connection configuration for the analysis store.

    `database_url` comes from DATABASE_URL and may embed credentials.
    Do not log it.
    """

    database_url: str

    def __repr__(self) -> str:
        return "PostgresConfig(database_url=<redacted>)"
