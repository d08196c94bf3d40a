"""Tests for bootlib/log.py: RunLogger."""

import io
import os
import re
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from bootlib.log import RunLogger, Severity

LINE_RE = re.compile(
    r"^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{2}:\d{2}\] \[(INFO|ERROR)\] (.*)$"
)


class TestRunLogger(unittest.TestCase):
    def test_creates_parent_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "nested" / "logs" / "run.log"
            logger = RunLogger(log_file)
            logger.info("hello")
            logger.close()
            self.assertTrue(log_file.exists())

    def test_line_format(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "run.log"
            logger = RunLogger(log_file)
            logger.info("first")
            logger.error("second")
            logger.close()

            lines = log_file.read_text().splitlines()
            self.assertEqual(len(lines), 2)
            first, second = (LINE_RE.match(line) for line in lines)
            self.assertIsNotNone(first)
            self.assertIsNotNone(second)
            self.assertEqual(first.groups(), ("INFO", "first"))
            self.assertEqual(second.groups(), ("ERROR", "second"))

    def test_appends_across_loggers(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "run.log"
            for message in ("one", "two"):
                logger = RunLogger(log_file)
                logger.info(message)
                logger.close()
            self.assertEqual(len(log_file.read_text().splitlines()), 2)

    def test_entries_keep_emission_order(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = RunLogger(Path(tmpdir) / "run.log")
            logger.info("a")
            logger.error("b")
            logger.info("c")
            logger.close()
            self.assertEqual(logger.messages(), ["a", "b", "c"])
            self.assertEqual(logger.messages(Severity.ERROR), ["b"])

    def test_verbose_mirrors_to_stdout(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            out = io.StringIO()
            logger = RunLogger(Path(tmpdir) / "run.log", verbose=True)
            with redirect_stdout(out):
                logger.info("shown")
            logger.close()
            self.assertEqual(out.getvalue(), "shown\n")

    def test_quiet_unless_console(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            out = io.StringIO()
            logger = RunLogger(Path(tmpdir) / "run.log")
            with redirect_stdout(out):
                logger.info("hidden")
                logger.info("forced", console=True)
            logger.close()
            self.assertEqual(out.getvalue(), "forced\n")

    def test_unwritable_destination_does_not_raise(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "blocker"
            blocker.write_text("not a directory")
            err = io.StringIO()
            with redirect_stderr(err):
                logger = RunLogger(blocker / "logs" / "run.log")
                logger.info("still recorded")
                logger.error("and this")
            logger.close()

            self.assertFalse(logger.persistent)
            self.assertIn("WARNING: cannot write log file", err.getvalue())
            self.assertEqual(logger.messages(), ["still recorded", "and this"])


if __name__ == '__main__':
    unittest.main()
