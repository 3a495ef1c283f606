"""Sizes and colors referenced by variants.

Their CRUD lives elsewhere; this domain only reads their labels.
"""

from __future__ import annotations

from dataclasses import dataclass

UNKNOWN_LABEL = "Unknown"


@dataclass(frozen=True)
class Size:
    id: str
    label: str


@dataclass(frozen=True)
class Color:
    id: str
    name: str
