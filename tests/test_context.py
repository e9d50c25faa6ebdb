import threading
from pathlib import Path

from arbor.models.context import PromptMode, ScaffoldContext, StepOptions

BUILTINS = {"Path", "RepoPath", "RepoName", "SiteName", "SanitizedSiteName", "Branch", "DbSuffix"}


class TestIdentity:
    def test_derived_paths(self, worktree: Path):
        ctx = ScaffoldContext(worktree)
        assert ctx.worktree_path.is_absolute()
        assert ctx.path == "feature-x"
        assert ctx.repo_path == "myproject"

    def test_relative_path_becomes_absolute(self, worktree: Path, monkeypatch):
        monkeypatch.chdir(worktree.parent)
        ctx = ScaffoldContext("feature-x")
        assert ctx.worktree_path.resolve() == worktree.resolve()

    def test_env_is_a_copy(self, worktree: Path):
        ctx = ScaffoldContext(worktree, env={"A": "1"})
        ctx.env["A"] = "2"
        assert ctx.env == {"A": "1"}


class TestSnapshot:
    def test_contains_builtins_and_vars(self, context: ScaffoldContext):
        context.set_var("Custom", "yes")
        context.set_db_suffix("swift_runner")
        snapshot = context.snapshot_for_template()
        assert BUILTINS <= set(snapshot)
        assert snapshot["Custom"] == "yes"
        assert snapshot["DbSuffix"] == "swift_runner"
        assert snapshot["SiteName"] == "myapp"
        assert snapshot["Path"] == "feature-x"

    def test_sanitized_site_name(self, worktree: Path):
        ctx = ScaffoldContext(worktree, site_name="My-Cool.App")
        assert ctx.snapshot_for_template()["SanitizedSiteName"] == "my_cool_app"

    def test_detached_from_later_mutation(self, context: ScaffoldContext):
        context.set_var("A", "1")
        snapshot = context.snapshot_for_template()
        context.set_var("A", "2")
        context.set_var("B", "3")
        assert snapshot["A"] == "1"
        assert "B" not in snapshot


class TestVars:
    def test_get_default(self, context: ScaffoldContext):
        assert context.get_var("missing") == ""
        assert not context.has_var("missing")

    def test_concurrent_access(self, context: ScaffoldContext):
        def writer(n: int) -> None:
            for i in range(100):
                context.set_var(f"k{n}", str(i))
                context.set_db_suffix(f"s{n}")
                context.snapshot_for_template()

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(context.get_var(f"k{n}") == "99" for n in range(8))
        assert context.get_db_suffix().startswith("s")


class TestPromptMode:
    def test_allow_requires_interactive(self):
        assert PromptMode(interactive=True).allow()
        assert not PromptMode().allow()

    def test_any_override_disables(self):
        assert not PromptMode(interactive=True, no_interactive=True).allow()
        assert not PromptMode(interactive=True, force=True).allow()
        assert not PromptMode(interactive=True, ci=True).allow()

    def test_step_options_default_prompt_mode(self):
        assert StepOptions().prompt_mode == PromptMode()
