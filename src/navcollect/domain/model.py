"""Core value types describing layered navmesh records.

The model is passive: it knows nothing about plugin parsing or
link resolution. Adapters materialise these values for one collection run and
the classifier only ever reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

from .errors import InvalidChainError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

PLUGIN_EXTENSIONS: Final[frozenset[str]] = frozenset({".esm", ".esp", ".esl"})


@dataclass(frozen=True, slots=True)
class SourceId:
    """A plugin in the load order. Names compare case-insensitively."""

    name: str = field(compare=False)
    folded: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "folded", self.name.casefold())

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_file_name(cls, value: str) -> SourceId | None:
        """Return a source for ``value`` or ``None`` when it is not a plugin file name."""

        name = value.strip()
        stem, dot, extension = name.rpartition(".")
        if not dot or not stem.strip() or f".{extension.casefold()}" not in PLUGIN_EXTENSIONS:
            return None
        return cls(name)

    @classmethod
    def parse(cls, value: str) -> SourceId:
        source = cls.from_file_name(value)
        if source is None:
            raise ValueError(f"Invalid plugin file name: {value!r}")
        return source


@dataclass(frozen=True, slots=True)
class EntityKey:
    """Stable identity of one record across every plugin (origin plugin + local id)."""

    origin: SourceId
    local_id: int

    def __post_init__(self) -> None:
        if not 0 <= self.local_id <= 0xFFFFFF:
            raise ValueError(f"Local id out of range: {self.local_id}")

    def __str__(self) -> str:
        return f"{self.local_id:06X}:{self.origin}"

    @classmethod
    def parse(cls, value: str) -> EntityKey:
        """Parse the ``"000D62:Skyrim.esm"`` form."""

        local_part, sep, origin_part = value.strip().partition(":")
        if not sep:
            raise ValueError(f"Invalid entity key: {value!r}")
        try:
            local_id = int(local_part, 16)
        except ValueError as exc:
            raise ValueError(f"Invalid entity key: {value!r}") from exc
        return cls(origin=SourceId.parse(origin_part), local_id=local_id)


class ContainmentKind(StrEnum):
    """Where a navmesh lives structurally."""

    INTERIOR = "interior"
    EXTERIOR = "exterior"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True, slots=True)
class OverrideEntry:
    """One plugin's version of a record. ``value`` is compared with ``==`` only."""

    source: SourceId
    value: Any


@dataclass(frozen=True, slots=True)
class OverrideChain:
    """Every version of one record, ordered from lowest to highest priority."""

    key: EntityKey
    entries: tuple[OverrideEntry, ...]

    def __post_init__(self) -> None:
        if not self.entries:
            raise InvalidChainError(f"Override chain for {self.key} is empty", key=self.key)
        seen: set[SourceId] = set()
        for entry in self.entries:
            if entry.source in seen:
                raise InvalidChainError(
                    f"Override chain for {self.key} lists {entry.source} more than once",
                    key=self.key,
                )
            seen.add(entry.source)

    @classmethod
    def of(cls, key: EntityKey, entries: Iterable[tuple[SourceId, Any]]) -> OverrideChain:
        return cls(key=key, entries=tuple(OverrideEntry(source, value) for source, value in entries))

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def winner(self) -> OverrideEntry:
        return self.entries[-1]

    @property
    def parent(self) -> SourceId | None:
        """Source of the entry directly below the winner; ``None`` for single-entry chains."""

        if len(self.entries) < 2:
            return None
        return self.entries[-2].source

    @property
    def sources(self) -> tuple[SourceId, ...]:
        return tuple(entry.source for entry in self.entries)

    @property
    def values(self) -> tuple[Any, ...]:
        return tuple(entry.value for entry in self.entries)

    def distinct_entries(self) -> tuple[OverrideEntry, ...]:
        """Entries deduplicated by value; the first occurrence of each value is kept."""

        return tuple(_distinct_by_value(self.entries))


def _distinct_by_value(entries: Sequence[OverrideEntry]) -> list[OverrideEntry]:
    # values may be unhashable payloads, so membership is a linear equality scan
    distinct: list[OverrideEntry] = []
    for entry in entries:
        if not any(kept.value == entry.value for kept in distinct):
            distinct.append(entry)
    return distinct


@dataclass(frozen=True, slots=True)
class Candidate:
    """A winning record offered for collection by the record source."""

    key: EntityKey
    winning_value: Any
    containment: ContainmentKind = ContainmentKind.UNCLASSIFIED
    worldspace: EntityKey | None = None


@dataclass(frozen=True, slots=True)
class CollectedOverride:
    """A record selected for the output container."""

    key: EntityKey
    source: SourceId
    value: Any
