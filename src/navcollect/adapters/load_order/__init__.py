"""Record-resolution adapter over JSON load-order dumps."""

from __future__ import annotations

from .reader import JsonLoadOrder, read_load_order
from .schema import LoadOrderDump, NavmeshPayload, OverridePayload

__all__ = [
    "JsonLoadOrder",
    "LoadOrderDump",
    "NavmeshPayload",
    "OverridePayload",
    "read_load_order",
]
