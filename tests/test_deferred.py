"""Tests for game.waiting and game.deferred."""

from __future__ import annotations

import pytest

from game.deferred import DeferredAction, DeferredActionQueue
from game.waiting import WaitingRegistry
from inputs.models import SelectOption


def _action(log: list[str], name: str, player_id: str = "blue", result=None, front: bool = False) -> DeferredAction:
    def execute():
        log.append(name)
        return result

    return DeferredAction(player_id=player_id, execute=execute, title=name, front=front)


# ── WaitingRegistry ───────────────────────────────────────────────────────────


class TestWaitingRegistry:
    def test_starts_empty(self) -> None:
        reg = WaitingRegistry("blue")
        assert reg.get_waiting_for() is None
        assert not reg.is_waiting

    def test_set_replaces_without_calling_old_hook(self) -> None:
        called: list[str] = []
        reg = WaitingRegistry("blue")
        first = SelectOption(title="first")
        second = SelectOption(title="second")
        reg.set_waiting_for(first, lambda: called.append("first"))
        reg.set_waiting_for(second)
        assert reg.get_waiting_for() is second
        reg.on_complete()
        assert called == []

    def test_clear(self) -> None:
        reg = WaitingRegistry("blue")
        reg.set_waiting_for(SelectOption(title="x"))
        reg.clear()
        assert not reg.is_waiting


# ── DeferredActionQueue ───────────────────────────────────────────────────────


class TestDeferredActionQueue:
    def test_fifo(self) -> None:
        log: list[str] = []
        queue = DeferredActionQueue()
        for name in "ABC":
            queue.push(_action(log, name))
        while not queue.is_empty():
            queue.run_next()
        assert log == ["A", "B", "C"]

    def test_front_push_while_idle_lands_after_head(self) -> None:
        log: list[str] = []
        queue = DeferredActionQueue()
        queue.push(_action(log, "A"))
        queue.push(_action(log, "B"))
        queue.push(_action(log, "C"), front=True)
        assert queue.titles == ["A", "C", "B"]
        while not queue.is_empty():
            queue.run_next()
        assert log == ["A", "C", "B"]

    def test_front_hint_on_action(self) -> None:
        queue = DeferredActionQueue()
        queue.push(_action([], "A"))
        queue.push(_action([], "B"))
        queue.push(_action([], "C", front=True))
        assert queue.titles == ["A", "C", "B"]

    def test_consecutive_front_pushes_keep_order(self) -> None:
        queue = DeferredActionQueue()
        queue.push(_action([], "A"))
        queue.push(_action([], "B"))
        queue.push(_action([], "C"), front=True)
        queue.push(_action([], "D"), front=True)
        assert queue.titles == ["A", "C", "D", "B"]

    def test_insert_front_goes_before_the_head(self) -> None:
        queue = DeferredActionQueue()
        queue.push(_action([], "A"))
        queue.push(_action([], "B"))
        queue.insert_front([_action([], "X"), _action([], "Y")])
        assert queue.titles == ["X", "Y", "A", "B"]

    def test_front_push_from_running_action_runs_next(self) -> None:
        log: list[str] = []
        queue = DeferredActionQueue()

        def spawn():
            log.append("A")
            queue.push(_action(log, "A1"), front=True)
            queue.push(_action(log, "A2"), front=True)

        queue.push(DeferredAction(player_id="blue", execute=spawn, title="A"))
        queue.push(_action(log, "B"))
        while not queue.is_empty():
            queue.run_next()
        assert log == ["A", "A1", "A2", "B"]

    def test_returned_input_installed_for_player(self) -> None:
        done: list[str] = []
        node = SelectOption(title="Pick")
        registries = {"blue": WaitingRegistry("blue"), "red": WaitingRegistry("red")}
        queue = DeferredActionQueue(registries)
        queue.push(DeferredAction(
            player_id="red",
            execute=lambda: node,
            on_complete=lambda: done.append("red"),
        ))
        assert queue.run_next() is node
        assert registries["red"].get_waiting_for() is node
        assert registries["blue"].get_waiting_for() is None
        registries["red"].on_complete()
        assert done == ["red"]

    def test_exceptions_propagate_and_action_is_consumed(self) -> None:
        def boom():
            raise RuntimeError("boom")

        queue = DeferredActionQueue()
        queue.push(DeferredAction(player_id="blue", execute=boom))
        with pytest.raises(RuntimeError, match="boom"):
            queue.run_next()
        assert queue.is_empty()

    def test_shift_removes_head_without_running(self) -> None:
        log: list[str] = []
        queue = DeferredActionQueue()
        queue.push(_action(log, "A"))
        queue.push(_action(log, "B"))
        shifted = queue.shift()
        assert shifted.title == "A"
        queue.run_next()
        assert log == ["B"]

    def test_empty_queue_errors(self) -> None:
        queue = DeferredActionQueue()
        with pytest.raises(IndexError):
            queue.run_next()
        with pytest.raises(IndexError):
            queue.shift()
        assert queue.peek() is None
        assert len(queue) == 0

    def test_missing_registry(self) -> None:
        queue = DeferredActionQueue({})
        queue.push(DeferredAction(player_id="ghost", execute=lambda: SelectOption(title="x")))
        with pytest.raises(KeyError):
            queue.run_next()
