"""Tests for process_runner module."""

import subprocess
import unittest
from unittest.mock import patch

from helpers.logging import RecordingLogger
from helpers.process_runner import MockProcessRunner
from rakelet.logging import LogLevel
from rakelet.process_runner import (
    CommandOutput,
    PassthroughProcessRunner,
    Shell,
    SilentProcessRunner,
    make_process_runner,
)


class TestMakeProcessRunner(unittest.TestCase):
    def test_all_output_passes_through(self):
        self.assertIsInstance(make_process_runner(CommandOutput.ALL), PassthroughProcessRunner)

    def test_no_output_is_silent(self):
        self.assertIsInstance(make_process_runner(CommandOutput.NONE), SilentProcessRunner)

    def test_invalid_value(self):
        with self.assertRaises(ValueError):
            make_process_runner("loud")


class TestSilentProcessRunner(unittest.TestCase):
    @patch("subprocess.run")
    def test_output_is_discarded(self, mock_run):
        SilentProcessRunner().run("echo hi", shell=True, stdout=None)
        kwargs = mock_run.call_args[1]
        self.assertEqual(kwargs["stdout"], subprocess.DEVNULL)
        self.assertEqual(kwargs["stderr"], subprocess.DEVNULL)


class TestShell(unittest.TestCase):
    def test_string_command_runs_through_shell(self):
        runner = MockProcessRunner()
        sh = Shell(runner, RecordingLogger(), cwd=None)

        sh("cc -c main.c")

        args, kwargs = runner.calls[0]
        self.assertEqual(args[0], "cc -c main.c")
        self.assertTrue(kwargs["shell"])
        self.assertTrue(kwargs["check"])

    def test_sequence_command_runs_directly(self):
        runner = MockProcessRunner()
        sh = Shell(runner, RecordingLogger())

        sh(["cp", "a b.txt", "c.txt"])

        args, kwargs = runner.calls[0]
        self.assertEqual(args[0], ["cp", "a b.txt", "c.txt"])
        self.assertFalse(kwargs["shell"])

    def test_nonzero_exit_raises(self):
        sh = Shell(MockProcessRunner(exit_code=1), RecordingLogger())
        with self.assertRaises(subprocess.CalledProcessError):
            sh("false")

    def test_command_is_echoed(self):
        logger = RecordingLogger()
        Shell(MockProcessRunner(), logger)("make all")
        self.assertEqual(logger.messages(LogLevel.INFO), ["make all"])

    def test_echo_can_be_disabled(self):
        logger = RecordingLogger()
        Shell(MockProcessRunner(), logger, echo=False)("make all")
        self.assertEqual(logger.records, [])

    def test_real_command_failure(self):
        sh = Shell(make_process_runner(CommandOutput.NONE), RecordingLogger())
        with self.assertRaises(subprocess.CalledProcessError) as ctx:
            sh("exit 3")
        self.assertEqual(ctx.exception.returncode, 3)


if __name__ == "__main__":
    unittest.main()
