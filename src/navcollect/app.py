"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from navcollect.adapters.load_order import read_load_order
from navcollect.adapters.sqlalchemy import (
    SqlAlchemyOutputUnitOfWork,
    SqlAlchemyOverrideRepository,
    open_engine,
)
from navcollect.config import (
    ConfigurationError,
    get_storage_config,
    load_settings,
    optional_env_path,
    require_env_vars,
    resolve_base_sources,
)
from navcollect.domain.runs import CollectionRunResult, RunGuard, run_collection

if TYPE_CHECKING:
    from navcollect.domain.model import CollectedOverride
    from navcollect.domain.policy import Policy


log = getLogger(__name__)

RUN_GUARD = RunGuard()


def resolve_load_order_path(load_order_path: Path | None) -> Path:
    """Return ``load_order_path`` or the one configured in ``NAVCOLLECT_LOAD_ORDER``."""

    if load_order_path is not None:
        return load_order_path
    values = require_env_vars(("NAVCOLLECT_LOAD_ORDER",))
    return Path(values["NAVCOLLECT_LOAD_ORDER"].strip()).expanduser()


def collect_navmeshes(
    *,
    load_order_path: Path | None = None,
    settings_path: Path | None = None,
    output_path: Path | None = None,
    creation_club_path: Path | None = None,
    max_workers: int | None = None,
    guard: RunGuard | None = None,
) -> CollectionRunResult:
    """Collect winning navmesh overrides from a load-order dump into the output container."""

    storage = get_storage_config()
    effective_settings = settings_path or storage.settings_path()
    effective_output = output_path or storage.output_path()
    effective_ccc = creation_club_path or optional_env_path("NAVCOLLECT_CREATION_CLUB_LISTINGS")

    policy = load_settings(effective_settings).to_policy()
    policy.validate()
    _warn_inert_filters(policy)

    base_sources = resolve_base_sources(effective_ccc)
    source = read_load_order(resolve_load_order_path(load_order_path))
    log.info(
        "Starting navmesh collection: plugins=%s, base plugins=%s, output=%s",
        len(source.load_order),
        len(base_sources),
        effective_output,
    )

    result = run_collection(
        source=source,
        unit_of_work_factory=lambda: SqlAlchemyOutputUnitOfWork(effective_output),
        policy=policy,
        base_sources=base_sources,
        guard=guard or RUN_GUARD,
        max_workers=max_workers,
    )

    for override in result.collection.collected:
        log.info("Collecting navmesh %s from override in %s", override.key, override.source)
    for failure in result.collection.errors:
        log.warning("Failed navmesh %s: %s", failure.key, failure.reason)
    log.info(
        "Collection complete! Collected %s navmeshes (%s examined, %s failed).",
        result.count,
        result.collection.examined,
        len(result.collection.errors),
    )
    return result


def read_collected_overrides(output_path: Path) -> list[CollectedOverride]:
    """Return the overrides stored in an existing output container."""

    if not output_path.is_file():
        raise ConfigurationError(f"No output container at {output_path}")
    engine = open_engine(output_path)
    try:
        with Session(engine) as session:
            return SqlAlchemyOverrideRepository(session).all()
    finally:
        engine.dispose()


def _warn_inert_filters(policy: Policy) -> None:
    if policy.selected_worldspaces:
        log.warning(
            "Worldspace selection (%s worldspaces) is not applied; all worldspaces are collected",
            len(policy.selected_worldspaces),
        )
