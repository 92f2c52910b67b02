# refurb_exporter/services/synthesizer.py

"""Turn a refurbished-store payload into gauge observations.

Label names are not known up front: they are the dimension keys found
on the payload's tiles. The first payload with tiles fixes the gauge's
schema for the life of the process. Later payloads are mapped onto that
schema: unknown dimension keys are dropped and missing ones are written
as empty strings.
"""

import logging
import math
import re
from typing import Any

from prometheus_client import CollectorRegistry, generate_latest

from refurb_exporter.metrics.refurb_gauge import RefurbGauge, sanitize_label
from refurb_exporter.metrics.registry import build_registry
from refurb_exporter.models.observation import Observation
from refurb_exporter.models.tile import RefurbTile

logger = logging.getLogger("refurb_exporter.synthesizer")

# Leading decimal number, e.g. "499.00" or "1299.5 EUR"
_AMOUNT_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_amount(raw: str | None) -> float:
    """Parse the leading decimal number of a price string.

    Missing or unparseable amounts return ``NaN`` and log a warning; the
    observation is still written so the tile stays visible.
    """
    if raw is None:
        logger.warning("Tile has no current price amount, using NaN")
        return math.nan
    match = _AMOUNT_RE.match(raw)
    if not match:
        logger.warning("Unparseable price amount %r, using NaN", raw)
        return math.nan
    return float(match.group(0))


def discover_labels(tiles: list[RefurbTile]) -> set[str]:
    """Union of every dimension key seen across ``tiles``."""
    labels: set[str] = set()
    for tile in tiles:
        labels.update(tile.dimensions)
    return labels


class MetricSynthesizer:
    """Populates the shared refurbished gauge from extracted payloads."""

    def __init__(self, gauge: RefurbGauge | None = None) -> None:
        self.gauge = gauge or RefurbGauge(build_registry())

    @property
    def registry(self) -> CollectorRegistry:
        return self.gauge.registry

    def _observation(
        self,
        tile: RefurbTile,
        dimension_labels: tuple[str, ...],
        country: str,
        device: str,
    ) -> Observation:
        values = {
            sanitize_label(key): value
            for key, value in tile.dimensions.items()
        }
        dropped = set(values) - set(dimension_labels)
        if dropped:
            logger.debug(
                "Dropping dimensions %s of %s not in gauge schema",
                sorted(dropped),
                tile.part_number,
            )

        labels = {name: values.get(name, "") for name in dimension_labels}
        labels.update(
            partNumber=tile.part_number,
            device=device,
            country=country,
        )
        return Observation(labels=labels, value=parse_amount(tile.raw_amount))

    def synthesize(
        self,
        payload: dict[str, Any] | None,
        country: str,
        device: str,
    ) -> bool:
        """Reset the gauge and write one observation per payload tile.

        Returns:
            ``False`` when the payload is absent or has no tiles (the gauge
            is left untouched), ``True`` once every tile is written.
        """
        if not payload:
            logger.info("No data received")
            return False

        raw_tiles = payload.get("tiles")
        if not isinstance(raw_tiles, list) or not raw_tiles:
            logger.info("Payload has no tiles")
            return False

        tiles = [RefurbTile.from_dict(tile) for tile in raw_tiles]
        logger.info("Getting labels from %d tiles", len(tiles))
        labels = discover_labels(tiles)
        logger.info("Labels: %s", sorted(labels))

        with self.gauge.lock:
            self.gauge.ensure_created(labels)
            dimension_labels = self.gauge.dimension_labels
            observations = [
                self._observation(tile, dimension_labels, country, device)
                for tile in tiles
            ]
            self.gauge.reset_and_populate(observations)
        return True

    def render(
        self,
        payload: dict[str, Any] | None,
        country: str,
        device: str,
    ) -> bytes | None:
        """Synthesize and serialize the registry as one locked step.

        Returns:
            The exposition text, or ``None`` if synthesis failed.
        """
        with self.gauge.lock:
            if not self.synthesize(payload, country, device):
                return None
            return generate_latest(self.registry)
