"""Integration tests for the rakelet command line."""

import os
import textwrap
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from typer.testing import CliRunner

from helpers.io import strip_ansi_codes
from rakelet import __version__
from rakelet.cli import app

RAKEFILE = """
import os
from pathlib import Path

desc("Render the report")
task({"default": ["report.txt"]})

rule({".txt": ".txt.in"}, action=lambda t: sh(f"cp {t.source} {t.name}"))

desc("Remove generated files")
task("clean", action=lambda: sh("rm -f report.txt"))

task("greet", action=lambda: Path("greeting.txt").write_text(os.environ["GREETING"]))
task("broken", action=lambda: sh("exit 7"))
task({"loop_a": "loop_b"})
task({"loop_b": "loop_a"})
"""


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self.env = {"NO_COLOR": "1"}
        self._tmpdir = TemporaryDirectory()
        self.project_root = Path(self._tmpdir.name).resolve()
        self._original_cwd = os.getcwd()
        os.chdir(self.project_root)

    def tearDown(self):
        os.chdir(self._original_cwd)
        self._tmpdir.cleanup()

    def write_rakefile(self, source: str = RAKEFILE) -> None:
        (self.project_root / "rakefile.py").write_text(textwrap.dedent(source))

    def invoke(self, *args: str):
        result = self.runner.invoke(app, list(args), env=self.env)
        return result, strip_ansi_codes(result.output)


class TestBuild(CliTestCase):
    def test_default_task_builds_from_rule(self):
        self.write_rakefile()
        (self.project_root / "report.txt.in").write_text("quarterly numbers\n")

        result, output = self.invoke()

        self.assertEqual(result.exit_code, 0, output)
        self.assertIn("cp report.txt.in report.txt", output)
        self.assertEqual((self.project_root / "report.txt").read_text(), "quarterly numbers\n")

    def test_second_run_is_a_no_op(self):
        self.write_rakefile()
        (self.project_root / "report.txt.in").write_text("numbers\n")

        self.invoke("report.txt")
        result, output = self.invoke("report.txt")

        self.assertEqual(result.exit_code, 0, output)
        self.assertNotIn("cp report.txt.in", output)

    def test_targets_run_in_order(self):
        self.write_rakefile()
        (self.project_root / "report.txt.in").write_text("numbers\n")

        result, output = self.invoke("report.txt", "clean")

        self.assertEqual(result.exit_code, 0, output)
        self.assertLess(output.index("cp report.txt.in"), output.index("rm -f report.txt"))
        self.assertFalse((self.project_root / "report.txt").exists())

    def test_environment_assignment(self):
        self.write_rakefile()
        try:
            result, output = self.invoke("GREETING=hello", "greet")
        finally:
            os.environ.pop("GREETING", None)

        self.assertEqual(result.exit_code, 0, output)
        self.assertEqual((self.project_root / "greeting.txt").read_text(), "hello")

    def test_explicit_rakefile(self):
        build_dir = self.project_root / "build"
        build_dir.mkdir()
        (build_dir / "tasks.py").write_text('task("default", action=lambda: sh("touch built"))\n')

        result, output = self.invoke("--rakefile", "build/tasks.py")

        self.assertEqual(result.exit_code, 0, output)
        self.assertTrue((build_dir / "built").exists())

    def test_rakefile_found_in_parent_directory(self):
        self.write_rakefile()
        (self.project_root / "report.txt.in").write_text("numbers\n")
        nested = self.project_root / "src"
        nested.mkdir()
        os.chdir(nested)

        result, output = self.invoke("report.txt")

        self.assertEqual(result.exit_code, 0, output)
        self.assertTrue((self.project_root / "report.txt").exists())

    def test_nosearch(self):
        self.write_rakefile()
        nested = self.project_root / "src"
        nested.mkdir()
        os.chdir(nested)

        result, output = self.invoke("--nosearch", "clean")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("No build file found", output)


class TestDryRunAndTrace(CliTestCase):
    def test_dry_run_has_no_side_effects(self):
        self.write_rakefile()
        (self.project_root / "report.txt.in").write_text("numbers\n")

        result, output = self.invoke("--dry-run")

        self.assertEqual(result.exit_code, 0, output)
        self.assertIn("Execute (dry run) report.txt", output)
        self.assertFalse((self.project_root / "report.txt").exists())

    def test_trace(self):
        self.write_rakefile()
        (self.project_root / "report.txt.in").write_text("numbers\n")

        result, output = self.invoke("--trace", "report.txt")

        self.assertEqual(result.exit_code, 0, output)
        self.assertIn("** Invoke report.txt.in", output)
        self.assertIn("** Execute report.txt", output)


class TestFailures(CliTestCase):
    def test_unknown_task(self):
        self.write_rakefile()
        result, output = self.invoke("missing_target")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Don't know how to build task 'missing_target'", output)

    def test_failing_command(self):
        self.write_rakefile()
        result, output = self.invoke("broken")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Task 'broken' failed", output)

    def test_cycle(self):
        self.write_rakefile()
        result, output = self.invoke("loop_a")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Dependency cycle detected: loop_a -> loop_b -> loop_a", output)

    def test_no_build_file(self):
        result, output = self.invoke()
        self.assertEqual(result.exit_code, 1)
        self.assertIn("No build file found", output)

    def test_broken_build_file(self):
        self.write_rakefile('task({"a": [], "b": []})\n')
        result, output = self.invoke()
        self.assertEqual(result.exit_code, 1)
        self.assertIn("exactly one task", output)

    def test_invalid_log_level(self):
        self.write_rakefile()
        result, output = self.invoke("--log-level", "loud", "clean")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid log level", output)


class TestInformational(CliTestCase):
    def test_version(self):
        result, output = self.invoke("--version")
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, output)

    def test_tasks_lists_described_tasks_only(self):
        self.write_rakefile()

        result, output = self.invoke("--tasks")

        self.assertEqual(result.exit_code, 0, output)
        self.assertIn("default", output)
        self.assertIn("Render the report", output)
        self.assertIn("Remove generated files", output)
        self.assertNotIn("greet", output)

    def test_quiet_hides_commands(self):
        self.write_rakefile()
        (self.project_root / "report.txt.in").write_text("numbers\n")

        result, output = self.invoke("--quiet", "report.txt")

        self.assertEqual(result.exit_code, 0, output)
        self.assertNotIn("cp report.txt.in", output)
        self.assertTrue((self.project_root / "report.txt").exists())


if __name__ == "__main__":
    unittest.main()
