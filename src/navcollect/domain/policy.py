"""Inclusion policy snapshot shared by every classification in a run."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ConfigurationError
from .model import EntityKey


@dataclass(frozen=True, slots=True, kw_only=True)
class Policy:
    """Immutable copy of the user's collection settings.

    ``selected_worldspaces`` is carried for completeness but never consulted by
    the classifier.
    """

    interior_cells: bool = True
    exterior_cells: bool = True
    modded_cells: bool = True
    include_singles: bool = False
    include_identicals: bool = False
    include_no_conflicts: bool = False
    include_base_conflicts: bool = False
    include_base_overrides: bool = False
    selected_worldspaces: frozenset[EntityKey] = field(default_factory=frozenset[EntityKey])

    def validate(self) -> None:
        if not self.interior_cells and not self.exterior_cells:
            raise ConfigurationError(
                "Either interior cells or exterior cells must be enabled; "
                "no navmesh can be collected otherwise"
            )
