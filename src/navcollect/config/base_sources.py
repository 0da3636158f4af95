"""First-party plugin set treated as the privileged base sources."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from navcollect.domain.model import SourceId

if TYPE_CHECKING:
    from pathlib import Path

log = logging.getLogger(__name__)

BETHESDA_PLUGINS: Final[tuple[SourceId, ...]] = (
    SourceId("Skyrim.esm"),
    SourceId("Update.esm"),
    SourceId("Dawnguard.esm"),
    SourceId("Dragonborn.esm"),
    SourceId("HearthFires.esm"),
)


def read_creation_club_listings(path: Path | None) -> frozenset[SourceId]:
    """Parse a Creation Club listings file (one plugin name per line).

    Blank lines and names that are not plugin files are skipped. A missing or
    unreadable file yields an empty set.
    """

    if path is None or not path.is_file():
        return frozenset()
    try:
        lines = path.read_text(encoding="utf-8-sig").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("Could not read Creation Club listings %s: %s", path, exc)
        return frozenset()

    plugins: set[SourceId] = set()
    for line in lines:
        if not line.strip():
            continue
        source = SourceId.from_file_name(line)
        if source is None:
            log.debug("Ignoring listing entry %r", line)
            continue
        plugins.add(source)
    return frozenset(plugins)


def resolve_base_sources(creation_club_path: Path | None = None) -> frozenset[SourceId]:
    """Return the Bethesda masters plus any listed Creation Club plugins."""

    creation_club = read_creation_club_listings(creation_club_path)
    if creation_club:
        log.info("Treating %s Creation Club plugins as base plugins", len(creation_club))
    return frozenset(BETHESDA_PLUGINS) | creation_club
