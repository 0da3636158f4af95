"""Ports to the record-resolution and output collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType

    from .model import Candidate, CollectedOverride, EntityKey, OverrideChain


@runtime_checkable
class ChainResolver(Protocol):
    """Callable returning every version of a record, lowest to highest priority."""

    def __call__(self, key: EntityKey) -> OverrideChain: ...


@runtime_checkable
class RecordSource(Protocol):
    """Deduplicated winning navmesh records and their override chains."""

    def candidates(self) -> Iterable[Candidate]: ...

    def resolve_chain(self, key: EntityKey) -> OverrideChain: ...


@runtime_checkable
class OverrideRepository(Protocol):
    """Write side of the output override container."""

    def add(self, override: CollectedOverride) -> None: ...


@dataclass(slots=True)
class OutputRepositories:
    """Repositories available inside an output unit of work."""

    overrides: OverrideRepository


@runtime_checkable
class OutputUnitOfWork(Protocol):
    """Transactional boundary around the output container."""

    @property
    def repositories(self) -> OutputRepositories: ...

    def __enter__(self) -> OutputUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
