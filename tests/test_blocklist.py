"""Unit tests for screen/blocklist.py."""

import sys
import unittest
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from screen.blocklist import Blocklist, is_browser, normalize_sites


class TestIsBrowser(unittest.TestCase):
    """Test browser recognition by application name."""

    def test_known_browsers(self):
        for name in ["Google Chrome", "Chrome", "chrome.exe", "Safari", "Firefox",
                     "Microsoft Edge", "Brave Browser", "Opera", "Vivaldi", "Chromium"]:
            self.assertTrue(is_browser(name), name)

    def test_non_browsers(self):
        for name in ["TextEditor", "Terminal", "Code", "Slack", "Finder", "Knowledge", "Pledge", ""]:
            self.assertFalse(is_browser(name), name)

    def test_none(self):
        self.assertFalse(is_browser(None))


class TestNormalizeSites(unittest.TestCase):
    """Test cleaning of raw blocklist input."""

    def test_strips_and_dedupes(self):
        sites = normalize_sites([" reddit.com ", "", "Reddit.com", "youtube.com"])
        self.assertEqual(sites, ["reddit.com", "youtube.com"])

    def test_drops_non_strings(self):
        self.assertEqual(normalize_sites(["x.com", 42, None]), ["x.com"])

    def test_none_input(self):
        self.assertEqual(normalize_sites(None), [])


class TestBlocklist(unittest.TestCase):
    """Test distraction classification."""

    def setUp(self):
        self.blocklist = Blocklist(["example.com", "YouTube"])

    def test_chrome_with_blocked_title(self):
        """A browser window whose title contains a blocked site is distracting."""
        is_distracted, match = self.blocklist.check_distraction("Chrome", "Example.com — Home")
        self.assertTrue(is_distracted)
        self.assertEqual(match, "example.com")

    def test_case_insensitive(self):
        is_distracted, match = self.blocklist.check_distraction("Safari", "cat videos - youtube")
        self.assertTrue(is_distracted)
        self.assertEqual(match, "YouTube")

    def test_chrome_without_match(self):
        is_distracted, match = self.blocklist.check_distraction("Chrome", "Python 3 documentation")
        self.assertFalse(is_distracted)
        self.assertIsNone(match)

    def test_non_browser_never_distracting(self):
        """Non-browser apps are ignored even with a blocked title."""
        is_distracted, match = self.blocklist.check_distraction("TextEditor", "notes on example.com")
        self.assertFalse(is_distracted)
        self.assertIsNone(match)

    def test_empty_title(self):
        self.assertEqual(self.blocklist.check_distraction("Chrome", ""), (False, None))

    def test_empty_blocklist(self):
        blocklist = Blocklist()
        self.assertFalse(blocklist)
        self.assertEqual(len(blocklist), 0)
        self.assertEqual(blocklist.check_distraction("Chrome", "anything"), (False, None))

    def test_first_entry_wins(self):
        blocklist = Blocklist(["youtube", "music"])
        self.assertEqual(blocklist.match_title("YouTube Music"), "youtube")


if __name__ == "__main__":
    unittest.main()
