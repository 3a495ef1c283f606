"""Read-only sizes and colors from ``sizes.json`` / ``colors.json``."""

from __future__ import annotations

from boutique.domain.model.catalog import Color, Size
from boutique.domain.repository.catalog_repository import CatalogRepository
from boutique.infrastructure.persistence.json_store import JsonFile


class JsonCatalogRepository(CatalogRepository):

    def __init__(self, sizes: JsonFile, colors: JsonFile) -> None:
        self._sizes = sizes
        self._colors = colors

    def get_size(self, size_id: str) -> Size | None:
        for raw in self._sizes.read():
            if raw["id"] == size_id:
                return Size(id=raw["id"], label=raw["label"])
        return None

    def get_color(self, color_id: str) -> Color | None:
        for raw in self._colors.read():
            if raw["id"] == color_id:
                return Color(id=raw["id"], name=raw["name"])
        return None
