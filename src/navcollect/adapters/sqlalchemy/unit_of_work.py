"""SQLAlchemy unit of work writing the output container atomically."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from navcollect.domain.errors import OutputWriteError
from navcollect.domain.ports import OutputRepositories

from .mappings import create_all_tables
from .repositories import SqlAlchemyOverrideRepository

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the unit of work is used outside its ``with`` block."""


def open_engine(path: Path) -> Engine:
    return create_engine(f"sqlite+pysqlite:///{path}", future=True)


class SqlAlchemyOutputUnitOfWork:
    """Stage writes in a sibling file and move it over ``path`` on commit.

    The destination is only replaced once the transaction has committed, so a
    failed run never leaves a partially written container behind.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.staging_path = path.with_name(f".{path.name}.partial")
        self._engine: Engine | None = None
        self._session: Session | None = None
        self._repositories: OutputRepositories | None = None
        self._committed = False

    def __enter__(self) -> SqlAlchemyOutputUnitOfWork:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.staging_path.unlink(missing_ok=True)
            self._engine = open_engine(self.staging_path)
            create_all_tables(self._engine)
            self._session = sessionmaker(bind=self._engine)()
        except (OSError, SQLAlchemyError) as exc:
            self._close()
            self._discard_staging()
            raise OutputWriteError(self.path, str(exc)) from exc
        self._repositories = OutputRepositories(
            overrides=SqlAlchemyOverrideRepository(self._session)
        )
        self._committed = False
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self._close()
        if not self._committed:
            self._discard_staging()
        return False  # don't swallow exceptions

    @property
    def repositories(self) -> OutputRepositories:
        if self._repositories is None or self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    def commit(self) -> None:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        try:
            self._session.commit()
            self._close()
            os.replace(self.staging_path, self.path)
        except (OSError, SQLAlchemyError) as exc:
            self.rollback()
            raise OutputWriteError(self.path, str(exc)) from exc
        self._committed = True
        log.info("Output written to: %s", self.path)

    def rollback(self) -> None:
        if self._session is not None:
            self._session.rollback()

    def _close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
        self._repositories = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def _discard_staging(self) -> None:
        try:
            self.staging_path.unlink(missing_ok=True)
        except OSError as exc:
            log.warning("Could not remove staging file %s: %s", self.staging_path, exc)
