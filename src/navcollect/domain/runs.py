"""Run-level orchestration: one guarded collection feeding one output container."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .collection import CollectionResult, collect
from .errors import ConcurrentRunRejectedError, OutputWriteError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Set

    from .model import SourceId
    from .policy import Policy
    from .ports import OutputUnitOfWork, RecordSource

log = getLogger(__name__)


class RunState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"


class RunGuard:
    """Admit at most one collection run at a time without queueing."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = RunState.IDLE

    @property
    def state(self) -> RunState:
        return self._state

    def acquire(self) -> None:
        with self._lock:
            if self._state is RunState.RUNNING:
                raise ConcurrentRunRejectedError("A collection run is already in progress")
            self._state = RunState.RUNNING

    def release(self) -> None:
        with self._lock:
            self._state = RunState.IDLE

    @contextmanager
    def running(self) -> Iterator[None]:
        self.acquire()
        try:
            yield
        finally:
            self.release()


@dataclass(slots=True)
class CollectionRunResult:
    """Summary of a completed run."""

    collection: CollectionResult
    stored: int

    @property
    def count(self) -> int:
        return self.collection.count


def run_collection(
    *,
    source: RecordSource,
    unit_of_work_factory: Callable[[], OutputUnitOfWork],
    policy: Policy,
    base_sources: Set[SourceId],
    guard: RunGuard,
    max_workers: int | None = None,
) -> CollectionRunResult:
    """Collect navmesh overrides from ``source`` and persist them in one transaction.

    Nothing is written until every candidate has been classified; a failure
    while persisting leaves the previous output untouched.
    """

    with guard.running():
        policy.validate()
        result = collect(
            source.candidates(),
            resolve_chain=source.resolve_chain,
            policy=policy,
            base_sources=base_sources,
            max_workers=max_workers,
        )
        log.info(
            "Classified %s navmeshes: collected=%s, failed=%s",
            result.examined,
            result.count,
            len(result.errors),
        )

        try:
            with unit_of_work_factory() as uow:
                for override in result.collected:
                    uow.repositories.overrides.add(override)
                uow.commit()
        except OutputWriteError:
            raise
        except OSError as exc:
            raise OutputWriteError(None, str(exc)) from exc

        return CollectionRunResult(collection=result, stored=result.count)
