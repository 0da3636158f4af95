"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError

from navcollect.domain.errors import OutputWriteError
from navcollect.domain.model import CollectedOverride, EntityKey, SourceId

from .mappings import collected_override_table

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyOverrideRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, override: CollectedOverride) -> None:
        stmt = insert(collected_override_table).values(
            form_key=str(override.key),
            origin=override.key.origin.name,
            local_id=override.key.local_id,
            source=override.source.name,
            data=override.value,
        )
        try:
            self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise OutputWriteError(None, f"cannot store navmesh {override.key}: {exc}") from exc

    def all(self) -> list[CollectedOverride]:
        table = collected_override_table
        stmt = select(table).order_by(table.c.origin, table.c.local_id)
        return [
            CollectedOverride(
                key=EntityKey(origin=SourceId(row.origin), local_id=row.local_id),
                source=SourceId(row.source),
                value=row.data,
            )
            for row in self.session.execute(stmt)
        ]
