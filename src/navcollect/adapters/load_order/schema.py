"""Pydantic models describing a load-order dump of navmesh records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from navcollect.domain.model import ContainmentKind, EntityKey, SourceId


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class DumpBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OverridePayload(DumpBaseModel):
    source: str
    # null marks a record whose navmesh data could not be read
    data: Any = None

    @field_validator("source")
    @classmethod
    def _validate_source(cls, value: str) -> str:
        SourceId.parse(value)
        return value.strip()


class NavmeshPayload(DumpBaseModel):
    form_key: str = Field(alias="formKey")
    containment: ContainmentKind = ContainmentKind.UNCLASSIFIED
    worldspace: str | None = None
    overrides: list[OverridePayload] = Field(default_factory=list)

    _normalize_worldspace = field_validator("worldspace", mode="before")(_blank_to_none)

    @field_validator("containment", mode="before")
    @classmethod
    def _default_containment(cls, value: object) -> object:
        if value is None:
            return ContainmentKind.UNCLASSIFIED
        if isinstance(value, str):
            return value.strip().lower() or ContainmentKind.UNCLASSIFIED
        return value

    @field_validator("form_key", "worldspace")
    @classmethod
    def _validate_key(cls, value: str | None) -> str | None:
        if value is not None:
            EntityKey.parse(value)
        return value


class LoadOrderDump(DumpBaseModel):
    load_order: list[str] = Field(alias="loadOrder")
    navmeshes: list[NavmeshPayload] = Field(default_factory=list)

    @field_validator("load_order")
    @classmethod
    def _validate_load_order(cls, value: list[str]) -> list[str]:
        seen: set[SourceId] = set()
        for name in value:
            source = SourceId.parse(name)
            if source in seen:
                raise ValueError(f"Plugin listed twice in load order: {name}")
            seen.add(source)
        return value
