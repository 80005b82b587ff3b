import os
import pathlib
import tempfile
import unittest
from unittest import mock

from scrubmon.config.channels import ChannelCatalog
from scrubmon.config.retention import RETENTION_PRESETS, resolve_retention
from scrubmon.config.runtime import ScrubMonConfig, config_from_mapping, load_catalog, load_config


class RetentionTest(unittest.TestCase):
    def test_presets_cover_selector_durations(self):
        self.assertEqual(
            [p.duration_ms for p in RETENTION_PRESETS.values()],
            [1_800_000, 3_600_000, 14_400_000, 43_200_000, 86_400_000, 604_800_000],
        )

    def test_resolve_aliases_and_durations(self):
        self.assertEqual(resolve_retention("30min").key, "30m")
        self.assertEqual(resolve_retention("7 days").key, "7d")
        self.assertEqual(resolve_retention(604800000).key, "7d")
        self.assertEqual(resolve_retention("14400000").key, "4h")

    def test_unknown_retention_falls_back_to_default(self):
        with self.assertLogs("scrubmon.config.retention", level="WARNING"):
            self.assertEqual(resolve_retention("3 weeks").key, "30m")


class RuntimeConfigTest(unittest.TestCase):
    def test_defaults(self):
        cfg = ScrubMonConfig()
        self.assertEqual(cfg.retention, "30m")
        self.assertEqual(cfg.api_url, "http://localhost:3011/loop/data/iaq")

    def test_mapping_is_flattened_and_clamped(self):
        cfg = config_from_mapping(
            {
                "monitor": {"retention": "1day", "tick_interval_s": 0.0, "fetch_interval_s": 30},
                "unknown_key": 1,
            }
        )
        self.assertEqual(cfg.retention, "1d")
        self.assertEqual(cfg.tick_interval_s, 0.1)
        self.assertEqual(cfg.fetch_interval_s, 30.0)

    def test_missing_file_returns_defaults(self):
        self.assertEqual(load_config(None), ScrubMonConfig())
        self.assertEqual(load_config("/nonexistent/scrubmon.yaml"), ScrubMonConfig())

    def test_load_yaml_with_env_override_and_channels(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "scrubmon.yaml"
            path.write_text(
                "api_base_url: http://plant:3011\n"
                "retention: 4h\n"
                "channels:\n"
                "  control_aliases: [interlock_4c, '4', ctl]\n"
                "  tiles:\n"
                "    - {key: before_scrub, label: Inlet}\n"
                "    - {key: interlock_4c, label: Interlock, aliases: ['4', ctl]}\n"
                "  series_labels:\n"
                "    co2: {'7': Spare}\n",
                encoding="utf-8",
            )
            with mock.patch.dict(os.environ, {"SCRUBMON_API_URL": "http://override:9000"}):
                cfg = load_config(path)
            catalog = load_catalog(path)

        self.assertEqual(cfg.api_base_url, "http://override:9000")
        self.assertEqual(cfg.retention, "4h")
        self.assertEqual(catalog.control_aliases, frozenset({"interlock_4c", "4", "ctl"}))
        self.assertEqual([t.key for t in catalog.tiles], ["before_scrub", "interlock_4c"])
        self.assertEqual(catalog.control_key, "interlock_4c")
        self.assertEqual(catalog.series_labels["co2"]["7"], "Spare")
        self.assertEqual(catalog.series_labels["co2"]["1"], "CO₂ Calibrate")

    def test_non_mapping_yaml_is_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "bad.yaml"
            path.write_text("- just\n- a list\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(path)


class ChannelCatalogTest(unittest.TestCase):
    def test_color_of_only_knows_the_six_modes(self):
        catalog = ChannelCatalog()
        self.assertIsNotNone(catalog.color_of(0))
        self.assertIsNotNone(catalog.color_of(5))
        self.assertIsNone(catalog.color_of(6))
        self.assertIsNone(catalog.color_of(None))
        self.assertIsNone(catalog.color_of(True))
        self.assertIsNone(catalog.color_of([1]))

    def test_alias_groups(self):
        groups = ChannelCatalog().alias_groups()
        self.assertEqual(groups["interlock_4c"], ("interlock_4c", "4"))
        self.assertEqual(groups["before_scrub"], ("before_scrub",))


if __name__ == "__main__":
    unittest.main()
