"""Unit tests for screen/tab_closer.py and screen/applescript.py."""

import subprocess
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from screen.applescript import contains_any, is_permission_error, quote
from screen.tab_closer import TabCloseError, TabCloser, build_close_script


def completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(["osascript"], returncode, stdout=stdout, stderr=stderr)


class FakeOsascript:
    """
    Stand-in for run_osascript.

    `running` lists the browsers that report as running; `results` maps a
    browser name to the CompletedProcess (or exception) its close script
    produces.
    """

    def __init__(self, running, results):
        self.running = set(running)
        self.results = results
        self.close_calls = []

    def __call__(self, script, timeout):
        if "is running" in script:
            is_running = any(f'"{name}"' in script for name in self.running)
            return completed("true\n" if is_running else "false\n")
        for name, result in self.results.items():
            if f'tell application "{name}"' in script:
                self.close_calls.append(name)
                if isinstance(result, Exception):
                    raise result
                return result
        raise AssertionError("unexpected script")


class TestAppleScriptHelpers(unittest.TestCase):

    def test_quote_escapes(self):
        self.assertEqual(quote('say "hi"'), '"say \\"hi\\""')
        self.assertEqual(quote("back\\slash"), '"back\\\\slash"')

    def test_contains_any(self):
        expr = contains_any(["u", "n"], ["x.com"])
        self.assertEqual(expr, '(u contains "x.com") or (n contains "x.com")')

    def test_contains_any_empty(self):
        self.assertEqual(contains_any(["u"], []), "false")

    def test_permission_markers(self):
        self.assertTrue(is_permission_error("Not authorized to send Apple events (-1743)"))
        self.assertTrue(is_permission_error("osascript is not allowed assistive access"))
        self.assertFalse(is_permission_error("syntax error"))
        self.assertFalse(is_permission_error(None))


class TestBuildCloseScript(unittest.TestCase):

    def test_chromium_uses_title(self):
        script = build_close_script("Google Chrome", "chromium", ["reddit.com"])
        self.assertIn('tell application "Google Chrome"', script)
        self.assertIn("set tabTitle to title of t", script)
        self.assertIn('(tabUrl contains "reddit.com")', script)

    def test_safari_uses_name(self):
        script = build_close_script("Safari", "safari", ["reddit.com"])
        self.assertIn("set tabTitle to name of t", script)

    def test_pattern_quotes_escaped(self):
        script = build_close_script("Safari", "safari", ['a"b'])
        self.assertIn('"a\\"b"', script)


class TestTabCloser(unittest.TestCase):

    def setUp(self):
        self.closer = TabCloser({"Google Chrome": "chromium", "Safari": "safari"})
        self.closer.platform = "darwin"

    def test_sums_across_browsers(self):
        fake = FakeOsascript(
            running=["Google Chrome", "Safari"],
            results={"Google Chrome": completed("2\n"), "Safari": completed("1\n")},
        )
        with patch("screen.tab_closer.run_osascript", side_effect=fake):
            self.assertEqual(self.closer.close_tabs(["reddit.com"]), 3)

    def test_skips_browsers_not_running(self):
        fake = FakeOsascript(
            running=["Safari"],
            results={"Google Chrome": completed("5\n"), "Safari": completed("1\n")},
        )
        with patch("screen.tab_closer.run_osascript", side_effect=fake):
            self.assertEqual(self.closer.close_tabs(["reddit.com"]), 1)
        self.assertEqual(fake.close_calls, ["Safari"])

    def test_nothing_running_closes_nothing(self):
        fake = FakeOsascript(running=[], results={})
        with patch("screen.tab_closer.run_osascript", side_effect=fake):
            self.assertEqual(self.closer.close_tabs(["reddit.com"]), 0)

    def test_one_browser_failure_tolerated(self):
        fake = FakeOsascript(
            running=["Google Chrome", "Safari"],
            results={
                "Google Chrome": completed(stderr="Not authorized (-1743)", returncode=1),
                "Safari": completed("4\n"),
            },
        )
        with patch("screen.tab_closer.run_osascript", side_effect=fake):
            self.assertEqual(self.closer.close_tabs(["reddit.com"]), 4)

    def test_all_browsers_fail(self):
        fake = FakeOsascript(
            running=["Google Chrome", "Safari"],
            results={
                "Google Chrome": completed(stderr="boom", returncode=1),
                "Safari": subprocess.TimeoutExpired("osascript", 10),
            },
        )
        with patch("screen.tab_closer.run_osascript", side_effect=fake):
            with self.assertRaises(TabCloseError):
                self.closer.close_tabs(["reddit.com"])

    def test_unexpected_output(self):
        fake = FakeOsascript(
            running=["Safari"],
            results={"Safari": completed("missing value\n")},
        )
        closer = TabCloser({"Safari": "safari"})
        closer.platform = "darwin"
        with patch("screen.tab_closer.run_osascript", side_effect=fake):
            with self.assertRaises(TabCloseError):
                closer.close_tabs(["reddit.com"])

    @patch("screen.tab_closer.run_osascript")
    def test_empty_blocklist(self, mock_run):
        self.assertEqual(self.closer.close_tabs(["", ""]), 0)
        mock_run.assert_not_called()

    @patch("screen.tab_closer.run_osascript")
    def test_unsupported_platform(self, mock_run):
        self.closer.platform = "linux"
        with self.assertRaises(TabCloseError):
            self.closer.close_tabs(["reddit.com"])
        mock_run.assert_not_called()


if __name__ == "__main__":
    unittest.main()
