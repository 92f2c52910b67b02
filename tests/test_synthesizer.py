# tests/test_synthesizer.py

"""Tests for payload-to-gauge synthesis."""

import math
import unittest
from typing import Any
from unittest.mock import patch

from prometheus_client import CollectorRegistry

from refurb_exporter.metrics.refurb_gauge import RefurbGauge
from refurb_exporter.models.tile import RefurbTile
from refurb_exporter.services.synthesizer import (
    MetricSynthesizer,
    discover_labels,
    parse_amount,
)


def _tile(
    part: str, amount: Any = "499.00", **dimensions: str,
) -> dict[str, Any]:
    """Raw bootstrap tile with the given dimensions."""
    return {
        "filters": {"dimensions": dimensions},
        "partNumber": part,
        "price": {"currentPrice": {"raw_amount": amount}},
    }


class TestParseAmount(unittest.TestCase):
    """Price text to float conversion."""

    def test_plain_decimal(self) -> None:
        self.assertEqual(parse_amount("499.00"), 499.0)

    def test_integer_text(self) -> None:
        self.assertEqual(parse_amount("1299"), 1299.0)

    def test_trailing_text_ignored(self) -> None:
        """Only the leading number counts."""
        self.assertEqual(parse_amount(" 849.50 EUR"), 849.5)

    def test_unparseable_is_nan(self) -> None:
        """Text without a leading number becomes NaN and is logged."""
        with self.assertLogs("refurb_exporter.synthesizer", "WARNING"):
            self.assertTrue(math.isnan(parse_amount("n/a")))

    def test_missing_is_nan(self) -> None:
        with self.assertLogs("refurb_exporter.synthesizer", "WARNING"):
            self.assertTrue(math.isnan(parse_amount(None)))


class TestDiscoverLabels(unittest.TestCase):
    """Union of dimension keys across tiles."""

    def test_union_across_tiles(self) -> None:
        tiles = [
            RefurbTile("A", {"color": "black", "size": "13"}),
            RefurbTile("B", {"color": "silver", "chip": "m2"}),
            RefurbTile("C", {}),
        ]
        self.assertEqual(discover_labels(tiles), {"color", "size", "chip"})

    def test_no_tiles(self) -> None:
        self.assertEqual(discover_labels([]), set())


class TestMetricSynthesizer(unittest.TestCase):
    """Schema discovery, creation-once and reset behaviour."""

    def setUp(self) -> None:
        self.gauge = RefurbGauge(CollectorRegistry())
        self.synth = MetricSynthesizer(self.gauge)

    def _parts(self) -> set[str]:
        return {o.labels["partNumber"] for o in self.gauge.observations()}

    def test_single_tile_scenario(self) -> None:
        """One tile yields one observation with the expected labels."""
        payload = {"tiles": [_tile("MX1", "499.00", color="black")]}

        self.assertTrue(self.synth.synthesize(payload, "at", "mac"))

        observations = self.gauge.observations()
        self.assertEqual(len(observations), 1)
        self.assertEqual(
            observations[0].labels,
            {
                "color": "black",
                "partNumber": "MX1",
                "country": "at",
                "device": "mac",
            },
        )
        self.assertEqual(observations[0].value, 499.0)

    def test_absent_payload(self) -> None:
        """None returns False without running label discovery."""
        with patch(
            "refurb_exporter.services.synthesizer.discover_labels"
        ) as mock_discover:
            self.assertFalse(self.synth.synthesize(None, "at", "mac"))
            mock_discover.assert_not_called()
        self.assertFalse(self.gauge.created)

    def test_missing_tiles_key(self) -> None:
        """A payload without tiles returns False."""
        self.assertFalse(self.synth.synthesize({"other": 1}, "at", "mac"))
        self.assertFalse(self.gauge.created)

    def test_empty_tiles_before_creation(self) -> None:
        """Empty tiles never trigger gauge creation."""
        self.assertFalse(self.synth.synthesize({"tiles": []}, "at", "mac"))
        self.assertFalse(self.gauge.created)

    def test_empty_tiles_leave_gauge_untouched(self) -> None:
        """Empty tiles after a good call keep the previous observations."""
        self.synth.synthesize(
            {"tiles": [_tile("MX1", color="black")]}, "at", "mac"
        )

        self.assertFalse(self.synth.synthesize({"tiles": []}, "at", "mac"))

        self.assertEqual(self._parts(), {"MX1"})

    def test_reset_between_calls(self) -> None:
        """The second payload fully replaces the first."""
        self.synth.synthesize(
            {"tiles": [
                _tile("MX1", color="black"),
                _tile("MX2", color="silver"),
            ]},
            "at",
            "mac",
        )
        self.synth.synthesize(
            {"tiles": [_tile("MX3", "699.00", color="gold")]}, "de", "mac"
        )

        observations = self.gauge.observations()
        self.assertEqual(self._parts(), {"MX3"})
        self.assertEqual(observations[0].labels["country"], "de")
        self.assertEqual(observations[0].value, 699.0)

    def test_schema_survives_new_keys(self) -> None:
        """Later payloads map onto the first schema without crashing."""
        self.synth.synthesize(
            {"tiles": [_tile("MX1", color="black")]}, "at", "mac"
        )
        schema = self.gauge.label_names

        ok = self.synth.synthesize(
            {"tiles": [_tile("IP1", "399.00", storage="256gb", chip="a15")]},
            "at",
            "ipad",
        )

        self.assertTrue(ok)
        self.assertEqual(self.gauge.label_names, schema)
        observations = self.gauge.observations()
        self.assertEqual(len(observations), 1)
        labels = observations[0].labels
        self.assertEqual(labels["color"], "")
        self.assertNotIn("storage", labels)
        self.assertNotIn("chip", labels)
        self.assertEqual(labels["device"], "ipad")

    def test_schema_is_union_of_first_payload(self) -> None:
        """All keys of the creating payload become labels."""
        self.synth.synthesize(
            {"tiles": [
                _tile("A", color="black"),
                _tile("B", storage="1tb"),
            ]},
            "at",
            "mac",
        )
        self.assertEqual(self.gauge.dimension_labels, ("color", "storage"))
        by_part = {
            o.labels["partNumber"]: o.labels
            for o in self.gauge.observations()
        }
        self.assertEqual(by_part["A"]["storage"], "")
        self.assertEqual(by_part["B"]["color"], "")

    def test_unparseable_price_kept_as_nan(self) -> None:
        """A bad amount still produces an observation, valued NaN."""
        self.synth.synthesize(
            {"tiles": [_tile("MX1", "call us", color="black")]}, "at", "mac"
        )
        observations = self.gauge.observations()
        self.assertEqual(len(observations), 1)
        self.assertTrue(math.isnan(observations[0].value))

    def test_dimension_named_like_fixed_label(self) -> None:
        """Requested identifiers win over a same-named dimension."""
        self.synth.synthesize(
            {"tiles": [_tile("MX1", country="us", color="black")]},
            "at",
            "mac",
        )
        labels = self.gauge.observations()[0].labels
        self.assertEqual(labels["country"], "at")

    def test_dimension_named_app_dropped(self) -> None:
        """A tile's app dimension cannot replace the exporter's app label."""
        synth = MetricSynthesizer()
        body = synth.render(
            {"tiles": [_tile("P", "1.0", app="x")]}, "at", "mac"
        )
        assert body is not None
        text = body.decode("utf-8")
        self.assertIn(
            'apple_refurbished{app="apple-refurbished",country="at",'
            'device="mac",partNumber="P"} 1.0',
            text,
        )
        self.assertNotIn('app="x"', text)

    def test_render_returns_exposition(self) -> None:
        """render() serializes the freshly synthesized gauge."""
        body = self.synth.render(
            {"tiles": [_tile("MX1", color="black")]}, "at", "mac"
        )
        self.assertIsNotNone(body)
        assert body is not None
        text = body.decode("utf-8")
        self.assertIn("# TYPE apple_refurbished gauge", text)
        self.assertIn('partNumber="MX1"', text)

    def test_render_failure_returns_none(self) -> None:
        self.assertIsNone(self.synth.render(None, "at", "mac"))

    def test_default_gauge_uses_app_registry(self) -> None:
        """Without an injected gauge a labelled registry is built."""
        synth = MetricSynthesizer()
        body = synth.render(
            {"tiles": [_tile("MX1", color="black")]}, "at", "mac"
        )
        assert body is not None
        self.assertIn('app="apple-refurbished"', body.decode("utf-8"))


if __name__ == "__main__":
    unittest.main()
