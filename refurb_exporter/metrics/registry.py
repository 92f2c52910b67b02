# refurb_exporter/metrics/registry.py

"""Prometheus registry carrying the exporter's fixed ``app`` label."""

import copy
from collections.abc import Iterable

from prometheus_client import (
    CollectorRegistry,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
)
from prometheus_client.metrics_core import Metric

from refurb_exporter.config.settings import Settings


class AppLabelRegistry(CollectorRegistry):
    """Registry that stamps ``app="<label>"`` onto every sample it yields.

    The fixed label overrides any same-named label a collector sets.
    """

    def __init__(self, app_label: str = Settings.APP_LABEL) -> None:
        super().__init__(auto_describe=True)
        self.app_label = app_label

    def collect(self) -> Iterable[Metric]:
        for metric in super().collect():
            labelled = copy.copy(metric)
            labelled.samples = [
                sample._replace(
                    labels={
                        **sample.labels,
                        Settings.APP_LABEL_NAME: self.app_label,
                    }
                )
                for sample in metric.samples
            ]
            yield labelled


def build_registry(app_label: str = Settings.APP_LABEL) -> AppLabelRegistry:
    """Create a registry with the default process/runtime collectors."""
    registry = AppLabelRegistry(app_label)
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    return registry
