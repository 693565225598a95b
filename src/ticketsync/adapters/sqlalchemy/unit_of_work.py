"""Engine lifecycle and the unit of work used by the SQL record store."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ticketsync.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from ticketsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyContactRepository,
    SqlAlchemyListingRepository,
    SqlAlchemyPolicyRepository,
    SqlAlchemyTourRepository,
    SqlAlchemyVendorRepository,
    SqlAlchemyVendorTourLinkRepository,
)
from ticketsync.config.storage import get_database_config
from ticketsync.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the SQL adapter is used before :func:`startup` or started twice."""


@dataclass(slots=True)
class _EngineState:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None


_STATE = _EngineState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to an engine, map the domain classes and create missing tables."""

    if _STATE.engine is not None and not force:
        raise StartupError("SQL adapter already started; pass force=True to rebind it")

    bound = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    create_all_tables(bound)

    _STATE.engine = bound
    _STATE.sessions = sessionmaker(bind=bound, expire_on_commit=False)
    log.info("SQL adapter bound to %s", bound.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it (tests call this between cases)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.sessions = None


class SqlAlchemyCatalogUnitOfWork:
    """One session, and the catalog repositories bound to it, per ``with`` block."""

    def __init__(self) -> None:
        if _STATE.sessions is None:
            raise StartupError(
                "SQL adapter not started; call ticketsync.adapters.sqlalchemy.startup() first"
            )
        self._sessions = _STATE.sessions
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> SqlAlchemyCatalogUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = CatalogRepositories(
            listings=SqlAlchemyListingRepository(self._session),
            vendors=SqlAlchemyVendorRepository(self._session),
            tours=SqlAlchemyTourRepository(self._session),
            contacts=SqlAlchemyContactRepository(self._session),
            policies=SqlAlchemyPolicyRepository(self._session),
            links=SqlAlchemyVendorTourLinkRepository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        if exc_type is not None:
            session.rollback()
        session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from ticketsync.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
