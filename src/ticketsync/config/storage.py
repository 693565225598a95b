"""Location of the ticketsync database and other local files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DATABASE_FILENAME: Final[str] = "ticketsync.db"


def data_dir(*, create: bool = True) -> Path:
    """Return ``TICKETSYNC_DATA_DIR``, or ``$XDG_DATA_HOME/ticketsync`` when it is unset."""

    configured = os.getenv("TICKETSYNC_DATA_DIR")
    if configured:
        path = Path(configured)
    else:
        xdg_home = os.getenv("XDG_DATA_HOME")
        path = (Path(xdg_home) if xdg_home else Path.home() / ".local" / "share") / "ticketsync"
    path = path.expanduser().resolve()
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_database_config() -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in :func:`data_dir`."""

    uri = os.getenv("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{data_dir() / DATABASE_FILENAME}")
