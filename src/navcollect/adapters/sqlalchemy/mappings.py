"""Table metadata for the output override container."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, Integer, MetaData, String, Table

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "pk": "pk_%(table_name)s",
    }
)

collected_override_table = Table(
    "collected_override",
    metadata,
    Column("form_key", String(300), primary_key=True),
    Column("origin", String(260), nullable=False, index=True),
    Column("local_id", Integer, nullable=False),
    Column("source", String(260), nullable=False),
    Column("data", JSON, nullable=False),
)


def create_all_tables(engine: Engine) -> None:
    metadata.create_all(engine)
