from __future__ import annotations

import copy
import unittest

from drive_sim.settings import CONFIG_PATH, REPO_ROOT, load_json, read_config, req_float, req_int, resolve_path, validate_config


class SettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cfg = load_json(CONFIG_PATH)

    def test_repo_config_is_valid(self) -> None:
        cfg = read_config()
        self.assertTrue(resolve_path(cfg["vehicle"]["path"]).exists())
        self.assertTrue(resolve_path(cfg["schedule"]["cycle_csv"]).exists())

    def test_missing_key_names_full_path(self) -> None:
        cfg = copy.deepcopy(self.cfg)
        del cfg["acceleration"]["max_time_s"]
        with self.assertRaises(KeyError) as ctx:
            validate_config(cfg)
        self.assertIn("acceleration.max_time_s", str(ctx.exception))

    def test_wrong_types_rejected(self) -> None:
        cases = [
            (["schedule", "interval_s"], "fast"),
            (["acceleration", "merge_short_limits"], 1),
            (["efficiency", "speeds_kph"], []),
            (["output_dir"], ""),
        ]
        for keys, value in cases:
            with self.subTest(key=".".join(keys)):
                cfg = copy.deepcopy(self.cfg)
                node = cfg
                for k in keys[:-1]:
                    node = node[k]
                node[keys[-1]] = value
                with self.assertRaises(ValueError):
                    validate_config(cfg)

    def test_bools_are_not_numbers(self) -> None:
        with self.assertRaises(ValueError):
            req_float({"x": True}, ["x"])
        with self.assertRaises(ValueError):
            req_int({"x": False}, ["x"])

    def test_resolve_path(self) -> None:
        self.assertEqual(resolve_path("vehicles/ev_sedan.json"), REPO_ROOT / "vehicles" / "ev_sedan.json")
        absolute = (REPO_ROOT / "x").resolve()
        self.assertEqual(resolve_path(str(absolute)), absolute)


if __name__ == "__main__":
    unittest.main()
