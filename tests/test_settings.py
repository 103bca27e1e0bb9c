"""Unit tests for core/settings.py."""

import json
import sys
import tempfile
import unittest
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import config
from core.settings import FocusSettings, SettingsManager


class TestFocusSettings(unittest.TestCase):
    """Test dictionary conversion and validation."""

    def test_defaults(self):
        settings = FocusSettings()
        self.assertEqual(settings.work_time, config.DEFAULT_WORK_MINUTES)
        self.assertEqual(settings.break_time, config.DEFAULT_BREAK_MINUTES)

    def test_from_dict(self):
        settings = FocusSettings.from_dict({
            "workTime": 50,
            "breakTime": 10,
            "blockedSites": ["reddit.com", " x.com "],
            "autoCloseTabs": True,
        })
        self.assertEqual(settings.work_time, 50)
        self.assertEqual(settings.break_time, 10)
        self.assertEqual(settings.blocked_sites, ["reddit.com", "x.com"])
        self.assertTrue(settings.auto_close_tabs)

    def test_to_dict_uses_camel_case(self):
        data = FocusSettings(work_time=30, break_time=5, blocked_sites=["a.com"]).to_dict()
        self.assertEqual(data["workTime"], 30)
        self.assertEqual(data["breakTime"], 5)
        self.assertEqual(data["blockedSites"], ["a.com"])
        self.assertIn("autoCloseTabs", data)

    def test_invalid_values_fall_back(self):
        defaults = FocusSettings()
        settings = FocusSettings.from_dict({
            "workTime": "lots",
            "breakTime": -1,
            "blockedSites": "reddit.com",
            "autoCloseTabs": "yes",
        })
        self.assertEqual(settings.work_time, defaults.work_time)
        self.assertEqual(settings.break_time, defaults.break_time)
        self.assertEqual(settings.blocked_sites, defaults.blocked_sites)
        self.assertEqual(settings.auto_close_tabs, defaults.auto_close_tabs)

    def test_bool_is_not_a_duration(self):
        settings = FocusSettings.from_dict({"workTime": True})
        self.assertEqual(settings.work_time, FocusSettings().work_time)


class TestSettingsManager(unittest.TestCase):
    """Test loading and saving the settings file."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self.tmpdir.name) / "nested" / "settings.json"
        self.manager = SettingsManager(self.path)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_missing_file_gives_defaults(self):
        self.assertEqual(self.manager.load(), FocusSettings())

    def test_save_and_load(self):
        saved = FocusSettings(work_time=45, break_time=15, blocked_sites=["news.ycombinator.com"])
        self.assertTrue(self.manager.save(saved))
        self.assertTrue(self.path.exists())
        self.assertEqual(self.manager.load(), saved)

    def test_save_leaves_no_temp_files(self):
        self.manager.save(FocusSettings())
        leftovers = [p.name for p in self.path.parent.iterdir() if p.suffix == ".tmp"]
        self.assertEqual(leftovers, [])

    def test_load_rereads_file(self):
        """Edits made between loads are picked up."""
        self.manager.save(FocusSettings(work_time=25))
        self.path.write_text(json.dumps({"workTime": 60}))
        self.assertEqual(self.manager.load().work_time, 60)

    def test_corrupt_file_gives_defaults(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("{not json")
        self.assertEqual(self.manager.load(), FocusSettings())

    def test_non_object_file_gives_defaults(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("[1, 2, 3]")
        self.assertEqual(self.manager.load(), FocusSettings())

    def test_set_auto_close_tabs(self):
        self.manager.save(FocusSettings(blocked_sites=["reddit.com"]))
        settings = self.manager.set_auto_close_tabs(True)
        self.assertTrue(settings.auto_close_tabs)
        reloaded = self.manager.load()
        self.assertTrue(reloaded.auto_close_tabs)
        self.assertEqual(reloaded.blocked_sites, ["reddit.com"])

    def test_ensure_file(self):
        path = self.manager.ensure_file()
        self.assertEqual(path, self.path)
        self.assertTrue(path.exists())


if __name__ == "__main__":
    unittest.main()
