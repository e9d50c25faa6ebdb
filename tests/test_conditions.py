import logging
import sys
from pathlib import Path

import pytest

from arbor.conditions.evaluator import AllOf, Always, Not, Primitive, Unknown, evaluate_condition, parse_condition
from arbor.conditions.probes import current_os
from arbor.models.context import ScaffoldContext


class TestParse:
    def test_empty_is_always(self):
        assert parse_condition({}) == Always()
        assert parse_condition(None) == Always()
        assert parse_condition("anything") == Always()

    def test_map_lowers_to_all_of(self):
        tree = parse_condition({"file_exists": "a", "not": {"os": "plan9"}, "future": 1})
        assert tree == AllOf(
            (Primitive("file_exists", "a"), Not(AllOf((Primitive("os", "plan9"),))), Unknown("future"))
        )


class TestFileConditions:
    def test_file_exists_forms(self, context: ScaffoldContext, worktree: Path):
        (worktree / "a.txt").write_text("")
        (worktree / "b.txt").write_text("")
        assert evaluate_condition({"file_exists": "a.txt"}, context)
        assert evaluate_condition({"file_exists": ["a.txt", "b.txt"]}, context)
        assert evaluate_condition({"file_exists": {"file": "a.txt"}}, context)
        assert not evaluate_condition({"file_exists": ["a.txt", "c.txt"]}, context)

    def test_file_contains(self, context: ScaffoldContext, worktree: Path):
        (worktree / "composer.json").write_text('{"require": {"laravel/framework": "^11"}}')
        assert evaluate_condition(
            {"file_contains": {"file": "composer.json", "pattern": "laravel/framework"}}, context
        )
        assert not evaluate_condition(
            {"file_contains": {"file": "composer.json", "pattern": "symfony"}}, context
        )
        assert not evaluate_condition({"file_contains": {"file": "missing", "pattern": "x"}}, context)

    def test_file_has_script(self, context: ScaffoldContext, worktree: Path):
        assert not evaluate_condition({"file_has_script": "build"}, context)
        (worktree / "package.json").write_text('{"scripts": {"build": "vite build"}}')
        assert evaluate_condition({"file_has_script": "build"}, context)
        assert not evaluate_condition({"file_has_script": "test"}, context)

    def test_unreadable_file_is_false(self, context: ScaffoldContext, worktree: Path):
        (worktree / "dir").mkdir()
        assert not evaluate_condition({"file_contains": {"file": "dir", "pattern": "x"}}, context)


class TestHostConditions:
    def test_command_exists(self, context: ScaffoldContext):
        assert evaluate_condition({"command_exists": "sh"}, context)
        assert evaluate_condition({"command_exists": {"command": "sh"}}, context)
        assert not evaluate_condition({"command_exists": ["sh", "no-such-binary-xyz"]}, context)

    def test_os(self, context: ScaffoldContext):
        assert evaluate_condition({"os": current_os().upper()}, context)
        assert evaluate_condition({"os": ["plan9", current_os()]}, context)
        assert not evaluate_condition({"os": "plan9"}, context)

    def test_current_os_linux(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "linux")
        assert current_os() == "linux"

    def test_env_exists(self, context: ScaffoldContext, monkeypatch):
        monkeypatch.setenv("ARBOR_TEST_VAR", "1")
        monkeypatch.delenv("ARBOR_TEST_MISSING", raising=False)
        assert evaluate_condition({"env_exists": "ARBOR_TEST_VAR"}, context)
        assert evaluate_condition({"env_exists": {"env": "ARBOR_TEST_VAR"}}, context)
        assert not evaluate_condition({"env_exists": ["ARBOR_TEST_VAR", "ARBOR_TEST_MISSING"]}, context)
        assert evaluate_condition({"env_not_exists": "ARBOR_TEST_MISSING"}, context)
        assert not evaluate_condition({"env_not_exists": "ARBOR_TEST_VAR"}, context)


class TestEnvFileConditions:
    def test_string_form_uses_dot_env(self, context: ScaffoldContext, worktree: Path):
        (worktree / ".env").write_text("APP_KEY=base64:abc\nEMPTY=\n")
        assert evaluate_condition({"env_file_contains": "APP_KEY"}, context)
        assert not evaluate_condition({"env_file_contains": "EMPTY"}, context)
        assert evaluate_condition({"env_file_missing": "EMPTY"}, context)
        assert evaluate_condition({"env_file_missing": "OTHER"}, context)

    def test_map_form_with_file(self, context: ScaffoldContext, worktree: Path):
        (worktree / ".env.testing").write_text("DB_CONNECTION=sqlite\n")
        assert evaluate_condition(
            {"env_file_contains": {"file": ".env.testing", "key": "DB_CONNECTION"}}, context
        )
        assert not evaluate_condition({"env_file_contains": {"key": "DB_CONNECTION"}}, context)

    def test_missing_file(self, context: ScaffoldContext):
        assert evaluate_condition({"env_file_missing": "APP_KEY"}, context)


class TestContextVar:
    def test_matches_value(self, context: ScaffoldContext):
        context.set_var("Mode", "fresh")
        assert evaluate_condition({"context_var": {"key": "Mode", "value": "fresh"}}, context)
        assert not evaluate_condition({"context_var": {"key": "Mode", "value": "keep"}}, context)

    def test_unset_equals_empty(self, context: ScaffoldContext):
        assert evaluate_condition({"context_var": {"key": "Nope", "value": ""}}, context)


class TestComposition:
    def test_map_is_and(self, context: ScaffoldContext, worktree: Path):
        (worktree / "a").write_text("")
        assert evaluate_condition({"file_exists": "a", "command_exists": "sh"}, context)
        assert not evaluate_condition({"file_exists": "a", "command_exists": "no-such-binary-xyz"}, context)

    def test_list_is_and(self, context: ScaffoldContext, worktree: Path):
        (worktree / "a").write_text("")
        assert evaluate_condition([{"file_exists": "a"}, {"command_exists": "sh"}], context)
        assert not evaluate_condition([{"file_exists": "a"}, {"file_exists": "b"}], context)

    def test_not(self, context: ScaffoldContext, worktree: Path):
        assert evaluate_condition({"not": {"file_exists": ".env"}}, context)
        (worktree / ".env").write_text("")
        assert not evaluate_condition({"not": {"file_exists": ".env"}}, context)

    def test_not_combines_with_siblings(self, context: ScaffoldContext, worktree: Path):
        (worktree / ".env.example").write_text("")
        condition = {"file_exists": ".env.example", "not": {"file_exists": ".env"}}
        assert evaluate_condition(condition, context)
        (worktree / ".env").write_text("")
        assert not evaluate_condition(condition, context)

    def test_nested_not(self, context: ScaffoldContext):
        assert not evaluate_condition({"not": {"not": {"file_exists": "missing"}}}, context)

    def test_unknown_key_is_true_and_logged(self, context: ScaffoldContext, caplog):
        with caplog.at_level(logging.DEBUG, logger="arbor.conditions.evaluator"):
            assert evaluate_condition({"some_future_check": "x"}, context)
        assert "some_future_check" in caplog.text

    def test_probe_exception_is_false(self, context: ScaffoldContext, monkeypatch):
        from arbor.conditions import evaluator

        def boom(ctx, value):
            raise RuntimeError("probe failed")

        monkeypatch.setitem(evaluator.PRIMITIVES, "file_exists", boom)
        assert not evaluate_condition({"file_exists": "x"}, context)

    @pytest.mark.parametrize("condition", [{}, None, [], "yes"])
    def test_empty_or_scalar_is_true(self, context: ScaffoldContext, condition):
        assert evaluate_condition(condition, context)
