# refurb_exporter/metrics/refurb_gauge.py

"""Owner of the process-wide refurbished price gauge.

The gauge's label schema is decided once, from the first payload that
carries tiles, and is never rebuilt afterwards. All writes go through
:class:`RefurbGauge` so creation, reset and repopulation share one lock.
"""

import logging
import re
import threading
from collections.abc import Iterable

from prometheus_client import CollectorRegistry, Gauge

from refurb_exporter.config.settings import Settings
from refurb_exporter.models.observation import Observation

logger = logging.getLogger("refurb_exporter.metrics")

_INVALID_LABEL_CHARS = re.compile(r"[^a-zA-Z0-9_]")


def sanitize_label(key: str) -> str:
    """Turn an arbitrary dimension key into a valid Prometheus label name.

    Invalid characters become ``_`` and leading underscores are dropped
    (``__`` is reserved); names that would start with a digit get ``d_``.
    """
    name = _INVALID_LABEL_CHARS.sub("_", key).lstrip("_")
    if not name or name[0].isdigit():
        name = f"d_{name}"
    return name


class RefurbGauge:
    """Lazily created gauge with a fixed-at-creation label schema."""

    def __init__(
        self,
        registry: CollectorRegistry,
        name: str = Settings.METRIC_NAME,
        documentation: str = Settings.METRIC_HELP,
        fixed_labels: Iterable[str] = tuple(Settings.FIXED_LABELS),
    ) -> None:
        self.registry = registry
        self.name = name
        self.documentation = documentation
        self.fixed_labels: tuple[str, ...] = tuple(fixed_labels)
        # Names no dimension may take: ours plus the registry-wide app label
        self.reserved_labels = {*self.fixed_labels, Settings.APP_LABEL_NAME}
        self.lock = threading.RLock()
        self._gauge: Gauge | None = None
        self._label_names: tuple[str, ...] = ()

    @property
    def created(self) -> bool:
        return self._gauge is not None

    @property
    def label_names(self) -> tuple[str, ...]:
        """Label schema of the gauge, empty before creation."""
        return self._label_names

    @property
    def dimension_labels(self) -> tuple[str, ...]:
        return tuple(
            name for name in self.label_names
            if name not in self.reserved_labels
        )

    def ensure_created(self, dimension_keys: Iterable[str]) -> tuple[str, ...]:
        """Create the gauge on first use; later schemas are ignored.

        Returns:
            The label schema actually in force.
        """
        with self.lock:
            if self._gauge is not None:
                return self.label_names

            dimensions = sorted(
                {sanitize_label(key) for key in dimension_keys}
                - self.reserved_labels
            )
            label_names = (*dimensions, *self.fixed_labels)
            self._gauge = Gauge(
                self.name,
                self.documentation,
                labelnames=label_names,
                registry=self.registry,
            )
            self._label_names = label_names
            logger.info(
                "Created gauge %s with labels %s", self.name, label_names
            )
            return self._label_names

    def reset_and_populate(self, observations: Iterable[Observation]) -> int:
        """Replace every observation on the gauge with ``observations``.

        Returns:
            Number of observations written.
        """
        with self.lock:
            if self._gauge is None:
                raise RuntimeError(
                    f"Gauge {self.name} has not been created yet"
                )
            self._gauge.clear()
            count = 0
            for obs in observations:
                self._gauge.labels(**obs.labels).set(obs.value)
                count += 1
            return count

    def observations(self) -> list[Observation]:
        """Snapshot of the current observations, without the app label."""
        with self.lock:
            if self._gauge is None:
                return []
            return [
                Observation(labels=dict(sample.labels), value=sample.value)
                for metric in self._gauge.collect()
                for sample in metric.samples
            ]
