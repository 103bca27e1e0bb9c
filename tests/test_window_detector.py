"""Unit tests for screen/window_detector.py."""

import subprocess
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from screen.window_detector import WindowDetector, WindowInfo


def completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(["osascript"], returncode, stdout=stdout, stderr=stderr)


class TestWindowDetector(unittest.TestCase):
    """Test AppleScript output handling with osascript mocked out."""

    def setUp(self):
        self.detector = WindowDetector()
        self.detector.platform = "darwin"

    @patch("screen.window_detector.run_osascript")
    def test_parses_app_and_title(self, mock_run):
        mock_run.return_value = completed("Google Chrome|||Reddit - Dive into anything\n")
        info = self.detector.get_active_window()
        self.assertEqual(info, WindowInfo("Google Chrome", "Reddit - Dive into anything"))
        self.assertIsNone(self.detector.last_error)

    @patch("screen.window_detector.run_osascript")
    def test_title_containing_separator(self, mock_run):
        mock_run.return_value = completed("Safari|||a|||b\n")
        info = self.detector.get_active_window()
        self.assertEqual(info.app_name, "Safari")
        self.assertEqual(info.window_title, "a|||b")

    @patch("screen.window_detector.run_osascript")
    def test_app_without_window(self, mock_run):
        mock_run.return_value = completed("Finder|||\n")
        info = self.detector.get_active_window()
        self.assertEqual(info, WindowInfo("Finder", ""))

    @patch("screen.window_detector.run_osascript")
    def test_permission_error(self, mock_run):
        mock_run.return_value = completed(
            stderr="System Events got an error: osascript is not allowed assistive access. (-1719)",
            returncode=1,
        )
        self.assertIsNone(self.detector.get_active_window())
        self.assertIn("permission", self.detector.last_error)

    @patch("screen.window_detector.run_osascript")
    def test_other_script_error(self, mock_run):
        mock_run.return_value = completed(stderr="syntax error", returncode=1)
        self.assertIsNone(self.detector.get_active_window())
        self.assertIn("syntax error", self.detector.last_error)

    @patch("screen.window_detector.run_osascript")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired("osascript", 2)
        self.assertIsNone(self.detector.get_active_window())
        self.assertIn("Timed out", self.detector.last_error)

    @patch("screen.window_detector.run_osascript")
    def test_missing_osascript(self, mock_run):
        mock_run.side_effect = FileNotFoundError("osascript")
        self.assertIsNone(self.detector.get_active_window())
        self.assertIsNotNone(self.detector.last_error)

    @patch("screen.window_detector.run_osascript")
    def test_error_cleared_on_next_success(self, mock_run):
        mock_run.side_effect = [
            completed(stderr="boom", returncode=1),
            completed("Code|||main.py\n"),
        ]
        self.assertIsNone(self.detector.get_active_window())
        self.assertIsNotNone(self.detector.last_error)
        self.assertIsNotNone(self.detector.get_active_window())
        self.assertIsNone(self.detector.last_error)

    @patch("screen.window_detector.run_osascript")
    def test_unsupported_platform(self, mock_run):
        self.detector.platform = "linux"
        self.assertFalse(self.detector.is_supported)
        self.assertIsNone(self.detector.get_active_window())
        self.assertIn("not supported", self.detector.last_error)
        mock_run.assert_not_called()

    def test_permission_instructions(self):
        self.assertIn("Accessibility", self.detector.get_permission_instructions())
        self.detector.platform = "win32"
        self.assertIn("not supported", self.detector.get_permission_instructions())


if __name__ == "__main__":
    unittest.main()
