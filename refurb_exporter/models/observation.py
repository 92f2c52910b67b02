# refurb_exporter/models/observation.py

"""Single gauge observation produced from one tile."""

from dataclasses import dataclass


@dataclass
class Observation:
    """Label values and numeric value for one gauge child."""

    labels: dict[str, str]
    value: float
