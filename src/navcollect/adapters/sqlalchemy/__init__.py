"""SQLAlchemy adapter for the output override container."""

from __future__ import annotations

from .mappings import collected_override_table, create_all_tables, metadata
from .repositories import SqlAlchemyOverrideRepository
from .unit_of_work import SqlAlchemyOutputUnitOfWork, StartupError, open_engine

__all__ = [
    "SqlAlchemyOutputUnitOfWork",
    "SqlAlchemyOverrideRepository",
    "StartupError",
    "collected_override_table",
    "create_all_tables",
    "metadata",
    "open_engine",
]
