"""Tests for task module."""

import re
import unittest

from rakelet.task import Rule, Task, TaskKind, normalize_names


class TestNormalizeNames(unittest.TestCase):
    def test_none(self):
        self.assertEqual(normalize_names(None), [])

    def test_single_name(self):
        self.assertEqual(normalize_names("build"), ["build"])

    def test_sequence_is_deduplicated_in_order(self):
        self.assertEqual(normalize_names(["b", "a", "b", "c", "a"]), ["b", "a", "c"])


class TestEnhance(unittest.TestCase):
    def test_new_task_is_plain_and_empty(self):
        task = Task(name="build")
        self.assertEqual(task.kind, TaskKind.PLAIN)
        self.assertEqual(task.prerequisites, [])
        self.assertEqual(task.actions, [])
        self.assertIsNone(task.source)
        self.assertFalse(task.is_file)

    def test_prerequisites_are_union_merged(self):
        """Test that repeated enhance calls never duplicate prerequisites."""
        task = Task(name="app")
        task.enhance(["main.o", "util.o"])
        task.enhance(["util.o", "lib.o"])
        task.enhance("main.o")
        self.assertEqual(task.prerequisites, ["main.o", "util.o", "lib.o"])

    def test_actions_are_appended(self):
        first = lambda: None
        second = lambda: None
        task = Task(name="app")
        task.enhance(action=first)
        task.enhance(action=second)
        self.assertEqual(task.actions, [first, second])

    def test_enhance_returns_task_for_chaining(self):
        task = Task(name="app")
        self.assertIs(task.enhance("a").enhance("b"), task)
        self.assertEqual(task.prerequisites, ["a", "b"])

    def test_file_and_directory_tasks_are_files(self):
        self.assertTrue(Task(name="a.txt", kind=TaskKind.FILE).is_file)
        self.assertTrue(Task(name="out", kind=TaskKind.DIRECTORY).is_file)


class TestRuleMatches(unittest.TestCase):
    def test_string_pattern_is_suffix_match(self):
        rule = Rule(".o", ".c")
        self.assertTrue(rule.matches("main.o"))
        self.assertTrue(rule.matches("build/main.o"))
        self.assertFalse(rule.matches("main.o.bak"))
        self.assertFalse(rule.matches("main.c"))

    def test_regex_pattern_is_searched(self):
        rule = Rule(re.compile(r"^gen/.*\.h$"), ".idl")
        self.assertTrue(rule.matches("gen/api.h"))
        self.assertFalse(rule.matches("src/api.h"))

    def test_predicate_pattern(self):
        rule = Rule(lambda name: name.startswith("docs/"), ".md")
        self.assertTrue(rule.matches("docs/index.html"))
        self.assertFalse(rule.matches("index.html"))

    def test_rules_are_immutable(self):
        rule = Rule(".o", ".c")
        with self.assertRaises(AttributeError):
            rule.pattern = ".a"


if __name__ == "__main__":
    unittest.main()
