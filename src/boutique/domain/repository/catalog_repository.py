"""Read-only access to the sizes and colors variants refer to."""

from __future__ import annotations

from abc import ABC, abstractmethod

from boutique.domain.model.catalog import Color, Size


class CatalogRepository(ABC):

    @abstractmethod
    def get_size(self, size_id: str) -> Size | None:
        """Return a size, or None if it was deleted or never existed."""

    @abstractmethod
    def get_color(self, color_id: str) -> Color | None:
        """Return a color, or None if it was deleted or never existed."""
