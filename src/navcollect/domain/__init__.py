"""Pure collection logic: model, policy, classifier, collector and run guard."""

from __future__ import annotations

from .classification import Exclusion, classify, exclusion_for, is_non_conflicting
from .collection import CandidateFailure, CollectionResult, collect
from .errors import (
    ChainResolutionError,
    ConcurrentRunRejectedError,
    ConfigurationError,
    InvalidChainError,
    OutputWriteError,
)
from .model import (
    Candidate,
    CollectedOverride,
    ContainmentKind,
    EntityKey,
    OverrideChain,
    OverrideEntry,
    SourceId,
)
from .policy import Policy
from .runs import CollectionRunResult, RunGuard, RunState, run_collection

__all__ = [
    "Candidate",
    "CandidateFailure",
    "ChainResolutionError",
    "CollectedOverride",
    "CollectionResult",
    "CollectionRunResult",
    "ConcurrentRunRejectedError",
    "ConfigurationError",
    "ContainmentKind",
    "EntityKey",
    "Exclusion",
    "InvalidChainError",
    "OutputWriteError",
    "OverrideChain",
    "OverrideEntry",
    "Policy",
    "RunGuard",
    "RunState",
    "SourceId",
    "classify",
    "collect",
    "exclusion_for",
    "is_non_conflicting",
    "run_collection",
]
