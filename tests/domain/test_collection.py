from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from navcollect.domain.classification import Exclusion
from navcollect.domain.collection import collect
from navcollect.domain.errors import ConfigurationError
from navcollect.domain.model import Candidate, ContainmentKind, OverrideChain
from navcollect.domain.policy import Policy

from tests.support.records import (
    MOD_A,
    MOD_B,
    MOD_C,
    SKYRIM,
    UPDATE,
    FakeRecordSource,
    make_chain,
    make_key,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from navcollect.domain.model import EntityKey, SourceId


def _source() -> FakeRecordSource:
    return FakeRecordSource(
        [
            # conflicting mods: collected
            make_chain((SKYRIM, "A"), (MOD_A, "B"), (MOD_B, "C"), key=make_key(0x1)),
            # single base record: excluded as single
            make_chain((SKYRIM, "X"), key=make_key(0x2)),
            # identical overrides
            make_chain((MOD_A, "A"), (MOD_B, "A"), key=make_key(0x3, MOD_A)),
            # A -> B -> A in mods: collected
            make_chain((MOD_A, "A"), (MOD_B, "B"), (MOD_C, "A"), key=make_key(0x4, MOD_A)),
            # one mod edit over two base variants
            make_chain((SKYRIM, "A"), (MOD_C, "C"), (UPDATE, "B"), key=make_key(0x5)),
        ]
    )


def test_collect_accumulates_included_candidates(base_sources: frozenset[SourceId]) -> None:
    result = collect(
        _source().candidates(),
        resolve_chain=_source().resolve_chain,
        policy=Policy(),
        base_sources=base_sources,
    )

    assert [override.key for override in result.collected] == [make_key(0x1), make_key(0x4, MOD_A)]
    assert result.count == 2
    assert result.examined == 5
    assert result.errors == []
    assert result.exclusions == {
        Exclusion.SINGLE: 1,
        Exclusion.IDENTICAL: 1,
        Exclusion.BASE_CONFLICT: 1,
    }


def test_collected_override_carries_winning_source_and_value(
    base_sources: frozenset[SourceId],
) -> None:
    source = _source()

    result = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=Policy(),
        base_sources=base_sources,
    )

    first = result.collected[0]
    assert first.source == MOD_B
    assert first.value == "C"


def test_collect_with_permissive_policy_includes_everything(
    base_sources: frozenset[SourceId], permissive_policy: Policy
) -> None:
    source = _source()

    result = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=permissive_policy,
        base_sources=base_sources,
    )

    assert result.count == 5
    assert not result.exclusions


def test_collect_records_resolution_failures_and_continues(
    base_sources: frozenset[SourceId],
) -> None:
    source = _source()
    missing = make_key(0x99, MOD_A)
    source.add_unresolvable(missing)

    result = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=Policy(),
        base_sources=base_sources,
    )

    assert result.count == 2
    assert [failure.key for failure in result.errors] == [missing]
    assert "Unknown navmesh" in result.errors[0].reason


def test_collect_records_malformed_chains(base_sources: frozenset[SourceId]) -> None:
    good = make_chain((MOD_A, "A"), (MOD_B, "B"), (MOD_C, "A"), key=make_key(0x4, MOD_A))
    broken = make_key(0x5, MOD_A)

    def resolve(key: EntityKey) -> OverrideChain:
        if key == broken:
            return OverrideChain(key=key, entries=())
        return good

    candidates = [
        Candidate(key=broken, winning_value="?"),
        Candidate(key=good.key, winning_value="A", containment=ContainmentKind.INTERIOR),
    ]

    result = collect(
        candidates,
        resolve_chain=resolve,
        policy=Policy(),
        base_sources=base_sources,
    )

    assert [override.key for override in result.collected] == [good.key]
    assert [failure.key for failure in result.errors] == [broken]


def test_collect_propagates_resolver_bugs(base_sources: frozenset[SourceId]) -> None:
    def resolve(key: EntityKey) -> OverrideChain:
        raise KeyError(key)

    with pytest.raises(KeyError):
        collect(
            [Candidate(key=make_key(), winning_value="A")],
            resolve_chain=resolve,
            policy=Policy(),
            base_sources=base_sources,
        )


class _Uncomparable:
    """Payload whose comparison always fails."""

    def __eq__(self, other: object) -> bool:
        raise TypeError("payloads cannot be compared")

    __hash__ = None  # type: ignore[assignment]


@pytest.mark.parametrize("max_workers", [None, 4])
def test_collect_records_classification_failures_and_keeps_partial_results(
    base_sources: frozenset[SourceId], max_workers: int | None
) -> None:
    good = make_chain((SKYRIM, "A"), (MOD_A, "B"), (MOD_B, "C"), key=make_key(0x1))
    broken = make_chain(
        (MOD_A, _Uncomparable()),
        (MOD_B, _Uncomparable()),
        (MOD_C, _Uncomparable()),
        key=make_key(0x2, MOD_A),
    )
    later = make_chain((MOD_A, "A"), (MOD_B, "B"), (MOD_C, "A"), key=make_key(0x3, MOD_A))
    source = FakeRecordSource([good, broken, later])

    result = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=Policy(),
        base_sources=base_sources,
        max_workers=max_workers,
    )

    assert [override.key for override in result.collected] == [good.key, later.key]
    assert [failure.key for failure in result.errors] == [broken.key]
    assert "payloads cannot be compared" in result.errors[0].reason
    assert result.examined == 3


def test_collect_rejects_policy_without_containment_before_consuming(
    base_sources: frozenset[SourceId],
) -> None:
    consumed: list[Candidate] = []

    def candidates() -> Iterator[Candidate]:
        for candidate in _source().candidates():
            consumed.append(candidate)
            yield candidate

    with pytest.raises(ConfigurationError):
        collect(
            candidates(),
            resolve_chain=_source().resolve_chain,
            policy=Policy(interior_cells=False, exterior_cells=False),
            base_sources=base_sources,
        )

    assert consumed == []


def test_collect_is_idempotent(base_sources: frozenset[SourceId]) -> None:
    source = _source()

    first = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=Policy(),
        base_sources=base_sources,
    )
    second = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=Policy(),
        base_sources=base_sources,
    )

    assert first.keys() == second.keys()
    assert first.count == second.count


def test_collect_on_thread_pool_matches_sequential_run(
    base_sources: frozenset[SourceId],
) -> None:
    chains = [
        make_chain(
            (SKYRIM, "A"),
            (MOD_A, "B" if index % 3 else "A"),
            (MOD_B, "C" if index % 2 else "A"),
            key=make_key(index),
        )
        for index in range(1, 200)
    ]
    source = FakeRecordSource(chains)
    source.add_unresolvable(make_key(0x999, MOD_C))

    sequential = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=Policy(),
        base_sources=base_sources,
    )
    parallel = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=Policy(),
        base_sources=base_sources,
        max_workers=4,
    )

    assert parallel.keys() == sequential.keys()
    assert parallel.count == sequential.count
    assert parallel.exclusions == sequential.exclusions
    assert [f.key for f in parallel.errors] == [f.key for f in sequential.errors]


def test_fixed_point_single_base_record_is_excluded_only_as_single() -> None:
    base = make_chain((SKYRIM, "X"), key=make_key(0x10))
    source = FakeRecordSource([base])

    result = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=Policy(),
        base_sources=frozenset({SKYRIM}),
    )

    assert result.count == 0
    assert result.exclusions == {Exclusion.SINGLE: 1}


def test_worldspace_selection_does_not_filter(base_sources: frozenset[SourceId]) -> None:
    source = _source()
    policy = Policy(selected_worldspaces=frozenset({make_key(0x3C)}))

    result = collect(
        source.candidates(),
        resolve_chain=source.resolve_chain,
        policy=policy,
        base_sources=base_sources,
    )

    assert result.count == 2
