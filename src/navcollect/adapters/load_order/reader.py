"""Serve candidates and override chains from a parsed load-order dump."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from navcollect.domain.errors import ChainResolutionError, ConfigurationError
from navcollect.domain.model import Candidate, EntityKey, OverrideChain, OverrideEntry, SourceId

from .schema import LoadOrderDump

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from .schema import NavmeshPayload, OverridePayload

log = logging.getLogger(__name__)


class JsonLoadOrder:
    """In-memory record source built from a :class:`LoadOrderDump`.

    Overrides from plugins missing from the load order are treated as
    disabled and ignored.
    """

    def __init__(self, dump: LoadOrderDump) -> None:
        self._priority: dict[SourceId, int] = {
            SourceId.parse(name): index for index, name in enumerate(dump.load_order)
        }
        self._records: dict[EntityKey, NavmeshPayload] = {}
        for record in dump.navmeshes:
            key = EntityKey.parse(record.form_key)
            if key in self._records:
                raise ValueError(f"Navmesh {key} appears more than once in the dump")
            self._records[key] = record

    @property
    def load_order(self) -> tuple[SourceId, ...]:
        return tuple(sorted(self._priority, key=self._priority.__getitem__))

    def candidates(self) -> Iterator[Candidate]:
        """Yield each winning record once, highest-priority plugins first."""

        ranked: list[tuple[int, EntityKey, OverridePayload, NavmeshPayload]] = []
        for key, record in self._records.items():
            active = self._active_overrides(record)
            if not active:
                log.debug("Navmesh %s has no override from an enabled plugin", key)
                continue
            winner = active[-1]
            ranked.append((self._rank(winner), key, winner, record))

        ranked.sort(key=lambda item: item[0], reverse=True)
        for _rank, key, winner, record in ranked:
            yield Candidate(
                key=key,
                winning_value=winner.data,
                containment=record.containment,
                worldspace=EntityKey.parse(record.worldspace) if record.worldspace else None,
            )

    def resolve_chain(self, key: EntityKey) -> OverrideChain:
        record = self._records.get(key)
        if record is None:
            raise ChainResolutionError(f"Unknown navmesh {key}", key=key)
        active = self._active_overrides(record)
        if not active:
            raise ChainResolutionError(f"Navmesh {key} has no enabled overrides", key=key)

        entries: list[OverrideEntry] = []
        for override in active:
            if override.data is None:
                raise ChainResolutionError(
                    f"Navmesh {key} has no data in {override.source}", key=key
                )
            entries.append(OverrideEntry(SourceId.parse(override.source), override.data))
        chain = OverrideChain(key=key, entries=tuple(entries))
        if key.origin not in chain.sources:
            log.debug("Navmesh %s has no entry from its origin plugin %s", key, key.origin)
        return chain

    def _active_overrides(self, record: NavmeshPayload) -> list[OverridePayload]:
        active = [
            override
            for override in record.overrides
            if SourceId.parse(override.source) in self._priority
        ]
        return sorted(active, key=self._rank)

    def _rank(self, override: OverridePayload) -> int:
        return self._priority[SourceId.parse(override.source)]


def read_load_order(path: Path) -> JsonLoadOrder:
    """Load and validate a JSON load-order dump."""

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read load order dump {path}: {exc}") from exc
    try:
        return JsonLoadOrder(LoadOrderDump.model_validate_json(raw))
    except (ValidationError, ValueError) as exc:
        raise ConfigurationError(f"Invalid load order dump {path}: {exc}") from exc
