# refurb_exporter/models/tile.py

"""Refurbished product tile model for inter-module data flow."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RefurbTile:
    """One refurbished inventory line item from the bootstrap payload."""

    part_number: str
    dimensions: dict[str, str] = field(default_factory=dict)
    raw_amount: str | None = None

    @classmethod
    def from_dict(cls, tile: dict[str, Any]) -> "RefurbTile":
        """Build a tile from a raw ``tiles[]`` entry.

        Missing ``filters``/``dimensions`` yield an empty mapping and a
        missing price record yields ``raw_amount=None``.
        """
        filters = tile.get("filters") or {}
        raw_dims: dict[str, Any] = filters.get("dimensions") or {}
        dimensions = {
            str(key): "" if value is None else str(value)
            for key, value in raw_dims.items()
        }

        price = tile.get("price") or {}
        current = price.get("currentPrice") or {}
        amount = current.get("raw_amount")

        return cls(
            part_number=str(tile.get("partNumber") or ""),
            dimensions=dimensions,
            raw_amount=None if amount is None else str(amount),
        )
