"""Collector loop: classify every candidate and accumulate the included ones."""

from __future__ import annotations

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, TypeAlias

from .classification import Exclusion, exclusion_for
from .errors import ChainResolutionError
from .model import CollectedOverride

if TYPE_CHECKING:
    from collections.abc import Iterable, Set

    from .model import Candidate, EntityKey, SourceId
    from .policy import Policy
    from .ports import ChainResolver

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CandidateFailure:
    """A candidate skipped because its override chain could not be produced or classified."""

    key: EntityKey
    reason: str


@dataclass(slots=True)
class CollectionResult:
    """Outcome of one pass over the candidate records."""

    collected: list[CollectedOverride] = field(default_factory=list[CollectedOverride])
    errors: list[CandidateFailure] = field(default_factory=list[CandidateFailure])
    exclusions: Counter[Exclusion] = field(default_factory=Counter[Exclusion])
    examined: int = 0

    @property
    def count(self) -> int:
        return len(self.collected)

    def keys(self) -> frozenset[EntityKey]:
        return frozenset(override.key for override in self.collected)


_Outcome: TypeAlias = CollectedOverride | Exclusion | CandidateFailure


def collect(
    candidates: Iterable[Candidate],
    *,
    resolve_chain: ChainResolver,
    policy: Policy,
    base_sources: Set[SourceId],
    max_workers: int | None = None,
) -> CollectionResult:
    """Classify ``candidates`` once each and return the included overrides.

    The policy is validated before the first candidate is consumed. A
    candidate whose chain cannot be resolved or classified is recorded in
    ``CollectionResult.errors`` and the loop carries on.
    """

    policy.validate()
    sources = frozenset(base_sources)

    def evaluate(candidate: Candidate) -> _Outcome:
        return _evaluate(
            candidate,
            resolve_chain=resolve_chain,
            policy=policy,
            base_sources=sources,
        )

    result = CollectionResult()
    if max_workers is None or max_workers <= 1:
        outcomes: Iterable[tuple[Candidate, _Outcome]] = (
            (candidate, evaluate(candidate)) for candidate in candidates
        )
        _accumulate(result, outcomes)
    else:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="classify") as pool:
            pending = [(candidate, pool.submit(evaluate, candidate)) for candidate in candidates]
            _accumulate(result, ((candidate, future.result()) for candidate, future in pending))
    return result


def _evaluate(
    candidate: Candidate,
    *,
    resolve_chain: ChainResolver,
    policy: Policy,
    base_sources: frozenset[SourceId],
) -> _Outcome:
    try:
        chain = resolve_chain(candidate.key)
    except ChainResolutionError as exc:
        return CandidateFailure(key=candidate.key, reason=str(exc))

    try:
        exclusion = exclusion_for(
            chain,
            containment=candidate.containment,
            is_winner_from_base_source=candidate.key.origin in base_sources,
            policy=policy,
            base_sources=base_sources,
        )
    except Exception as exc:  # noqa: BLE001
        return CandidateFailure(key=candidate.key, reason=f"Classification failed: {exc!r}")
    if exclusion is not None:
        return exclusion
    return CollectedOverride(
        key=candidate.key,
        source=chain.winner.source,
        value=candidate.winning_value,
    )


def _accumulate(
    result: CollectionResult,
    outcomes: Iterable[tuple[Candidate, _Outcome]],
) -> None:
    seen: set[EntityKey] = set()
    for candidate, outcome in outcomes:
        result.examined += 1
        if isinstance(outcome, CandidateFailure):
            log.warning("Skipping navmesh %s: %s", outcome.key, outcome.reason)
            result.errors.append(outcome)
        elif isinstance(outcome, Exclusion):
            log.debug("Excluded navmesh %s (%s)", candidate.key, outcome)
            result.exclusions[outcome] += 1
        elif outcome.key not in seen:
            seen.add(outcome.key)
            result.collected.append(outcome)
