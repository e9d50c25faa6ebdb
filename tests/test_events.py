from unittest.mock import MagicMock

from arbor.events.dispatcher import EventDispatcher, NullEmitter
from arbor.events.observer import StdoutObserver
from arbor.events.types import (
    EVENT_TYPE_MAP,
    ScaffoldCompleted,
    ScaffoldStarted,
    StepCompleted,
    StepSkipped,
    StepStarted,
)


class TestDispatcher:
    def test_builds_typed_event(self):
        dispatcher = EventDispatcher()
        observer = MagicMock()
        dispatcher.add_observer(observer)

        dispatcher.emit("StepSkipped", step_name="herd", index=3, reason="gate")

        event = observer.on_event.call_args.args[0]
        assert isinstance(event, StepSkipped)
        assert (event.step_name, event.index, event.reason) == ("herd", 3, "gate")
        assert event.event_type == "StepSkipped"

    def test_unknown_event_ignored(self):
        dispatcher = EventDispatcher()
        observer = MagicMock()
        dispatcher.add_observer(observer)
        dispatcher.emit("Nope", x=1)
        observer.on_event.assert_not_called()

    def test_fans_out(self):
        dispatcher = EventDispatcher()
        first, second = MagicMock(), MagicMock()
        dispatcher.add_observer(first)
        dispatcher.add_observer(second)
        dispatcher.emit("StepStarted", step_name="a")
        assert first.on_event.call_count == second.on_event.call_count == 1

    def test_null_emitter(self):
        NullEmitter().emit("StepStarted", step_name="a")

    def test_type_map_names(self):
        for name, cls in EVENT_TYPE_MAP.items():
            assert cls.model_fields["event_type"].default == name


class TestStdoutObserver:
    def test_lifecycle_output(self, capsys):
        observer = StdoutObserver()
        observer.on_event(ScaffoldStarted(operation="cleanup", worktree_path="/w", preset="laravel", step_count=2))
        observer.on_event(StepStarted(step_name="herd"))
        observer.on_event(StepSkipped(step_name="herd", reason="gate"))
        observer.on_event(StepCompleted(step_name="db.destroy", duration_ms=5))
        observer.on_event(ScaffoldCompleted(operation="cleanup", worktree_path="/w", executed=1, skipped=1))

        out = capsys.readouterr().out
        assert "[Cleanup] Started: /w (preset: laravel), 2 steps" in out
        assert "Started: herd" not in out
        assert "Skipped: herd (gate)" in out
        assert "Completed: db.destroy (5ms)" in out
        assert "[Cleanup] Completed: 1 run, 1 skipped" in out

    def test_verbose_shows_step_start(self, capsys):
        StdoutObserver(verbose=True).on_event(StepStarted(step_name="herd"))
        assert "Started: herd" in capsys.readouterr().out

    def test_dry_run_marker(self, capsys):
        StdoutObserver().on_event(StepCompleted(step_name="a", dry_run=True))
        assert "[dry run]" in capsys.readouterr().out
