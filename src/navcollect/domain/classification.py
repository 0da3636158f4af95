"""Decide whether a winning navmesh override belongs in the output.

Gates are evaluated in a fixed order and the first one that rejects the chain
wins. Each gate is an independent necessary condition, so the order only
matters for which reason gets reported.

1. base override   - the entry below the winner comes from a base plugin
2. containment     - interior/exterior cells switched off
3. modded          - the record originates outside the base plugins
4. single          - only one plugin touches the record; a single-plugin
                     record is settled by this gate and skips the rest
5. identical       - every plugin carries the same data
6. no conflict     - later plugins never revert to an earlier value
7. base conflict   - exactly one non-base variant remains
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

from .model import ContainmentKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Set

    from .model import OverrideChain, SourceId
    from .policy import Policy


class Exclusion(StrEnum):
    """Gate that rejected a chain."""

    BASE_OVERRIDE = "base_override"
    INTERIOR = "interior"
    EXTERIOR = "exterior"
    MODDED = "modded"
    SINGLE = "single"
    IDENTICAL = "identical"
    NO_CONFLICT = "no_conflict"
    BASE_CONFLICT = "base_conflict"


def is_non_conflicting(values: Iterable[Any]) -> bool:
    """Return whether ``values`` move from one value to a second and never back.

    Any two-element sequence counts as non-conflicting, whether or not its
    values differ.
    """

    items = list(values)
    if not items:
        return False
    if len(items) == 2:
        return True

    distinct: list[Any] = []
    for item in items:
        if not any(item == seen for seen in distinct):
            distinct.append(item)
    if len(distinct) != 2:
        return False

    first, second = distinct
    found_second = False
    for item in items:
        if item == second:
            found_second = True
        elif found_second and item == first:
            return False
    return True


def is_base_only_conflict(chain: OverrideChain, base_sources: Set[SourceId]) -> bool:
    """Return whether exactly one distinct variant comes from outside ``base_sources``."""

    distinct = chain.distinct_entries()
    from_base = sum(1 for entry in distinct if entry.source in base_sources)
    return len(distinct) - from_base == 1


def exclusion_for(  # noqa: PLR0911
    chain: OverrideChain,
    *,
    containment: ContainmentKind,
    is_winner_from_base_source: bool,
    policy: Policy,
    base_sources: Set[SourceId],
) -> Exclusion | None:
    """Return the first gate rejecting ``chain`` or ``None`` when it should be collected."""

    parent = chain.parent
    if not policy.include_base_overrides and parent is not None and parent in base_sources:
        return Exclusion.BASE_OVERRIDE

    if not policy.interior_cells and containment is ContainmentKind.INTERIOR:
        return Exclusion.INTERIOR
    if not policy.exterior_cells and containment is ContainmentKind.EXTERIOR:
        return Exclusion.EXTERIOR

    if not policy.modded_cells and not is_winner_from_base_source:
        return Exclusion.MODDED

    if len(chain) == 1:
        # single-plugin records are decided here alone
        return None if policy.include_singles else Exclusion.SINGLE

    if not policy.include_identicals and len(chain.distinct_entries()) == 1:
        return Exclusion.IDENTICAL

    if not policy.include_no_conflicts and is_non_conflicting(chain.values):
        return Exclusion.NO_CONFLICT

    if not policy.include_base_conflicts and is_base_only_conflict(chain, base_sources):
        return Exclusion.BASE_CONFLICT

    return None


def classify(
    chain: OverrideChain,
    *,
    containment: ContainmentKind,
    is_winner_from_base_source: bool,
    policy: Policy,
    base_sources: Set[SourceId],
) -> bool:
    """Return ``True`` when the winning entry of ``chain`` should be collected."""

    return (
        exclusion_for(
            chain,
            containment=containment,
            is_winner_from_base_source=is_winner_from_base_source,
            policy=policy,
            base_sources=base_sources,
        )
        is None
    )
