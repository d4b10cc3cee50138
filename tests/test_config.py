from __future__ import annotations

import json
import os
import tempfile
import unittest

from color_identifiers.utils.config import (
    ColorIdentifiersSettings,
    load_config,
    load_settings,
    save_config,
    save_settings,
)


class TestConfig(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "settings.json")

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_gives_defaults(self):
        self.assertEqual(load_config(self.path), {})
        self.assertEqual(load_settings(self.path), ColorIdentifiersSettings())

    def test_round_trip(self):
        s = ColorIdentifiersSettings(
            num_colors=24,
            luminance_bounds=(0.4, 0.7),
            saturation_bounds=(0.2, 0.9),
            coloring_method="hash",
            recoloring_delay=1.5,
            refresh_interval=10.0,
            debug=True,
        )
        save_settings(s, self.path)
        self.assertEqual(load_settings(self.path), s)

    def test_bad_values_fall_back_per_field(self):
        save_config(
            {
                "num_colors": "many",
                "luminance_bounds": [0.9, 0.1],
                "saturation_bounds": [0.1],
                "coloring_method": "random",
                "recoloring_delay": -2,
                "refresh_interval": "soon",
            },
            self.path,
        )
        self.assertEqual(load_settings(self.path), ColorIdentifiersSettings())

    def test_bounds_clamped_to_unit_interval(self):
        save_config({"luminance_bounds": [-1, 2]}, self.path)
        self.assertEqual(load_settings(self.path).luminance_bounds, (0.0, 1.0))

    def test_collapsed_saturation_bounds_rejected(self):
        save_config({"saturation_bounds": [0.5, 0.5], "luminance_bounds": [0.6, 0.6]}, self.path)
        s = load_settings(self.path)
        self.assertEqual(s.saturation_bounds, (0.0, 1.0))
        self.assertEqual(s.luminance_bounds, (0.6, 0.6))

    def test_debug_flag_must_be_a_boolean(self):
        for raw, expected in (("false", False), ("true", False), (1, False), (True, True), (False, False)):
            with self.subTest(raw=raw):
                save_config({"debug": raw}, self.path)
                self.assertIs(load_settings(self.path).debug, expected)

    def test_corrupt_json_is_ignored(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        self.assertEqual(load_config(self.path), {})
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("[1, 2, 3]")
        self.assertEqual(load_config(self.path), {})

    def test_save_settings_keeps_other_keys(self):
        save_config({"recent_files": ["a.py"]}, self.path)
        save_settings(ColorIdentifiersSettings(num_colors=5), self.path)
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["recent_files"], ["a.py"])
        self.assertEqual(data["num_colors"], 5)


if __name__ == "__main__":
    unittest.main()
