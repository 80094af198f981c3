"""Deferred action queue — already-decided work that still has to run.

Card effects push ``DeferredAction``s while they resolve ("place an ocean",
"pay 3 M€").  The driver runs them one at a time once no player is waiting
for input.  An action may return a ``PlayerInput``; it is installed in the
acting player's waiting slot and the drain stops until that input resolves.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from game.waiting import WaitingRegistry
from inputs.models import InputBase

logger = logging.getLogger(__name__)


class DeferredAction(BaseModel):
    """A single unit of deferred work for one player."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    player_id: str
    execute: Callable[[], Any]
    on_complete: Callable[[], None] | None = None
    front: bool = False  # splice behind the running action instead of the tail
    title: str = "deferred action"


class DeferredActionQueue:
    """Ordered FIFO of deferred actions with front-splicing.

    ``push(action, front=True)`` places the action right after the action
    that is currently running, or right after the head of the queue when
    nothing is running.  Consecutive front pushes keep their push order.
    """

    def __init__(self, registries: Mapping[str, WaitingRegistry] | None = None) -> None:
        self._actions: list[DeferredAction] = []
        self._registries: Mapping[str, WaitingRegistry] = registries if registries is not None else {}
        self._running: DeferredAction | None = None
        self._front_count = 0

    def push(self, action: DeferredAction, front: bool | None = None) -> None:
        if front is None:
            front = action.front
        if not front:
            self._actions.append(action)
            if self._running is None:
                self._front_count = 0
            return

        if self._running is not None:
            index = self._front_count
        else:
            index = min(1 + self._front_count, len(self._actions))
        self._actions.insert(index, action)
        self._front_count += 1
        logger.debug("Spliced %r at position %d", action.title, index)

    def insert_front(self, actions: Sequence[DeferredAction]) -> None:
        """Put *actions* at the very head of the queue, keeping their order.

        Unlike ``push(front=True)`` this ignores the idle-head rule, so the
        actions run before anything already queued.
        """
        self._actions[0:0] = list(actions)
        logger.debug("Inserted %d action(s) at the head", len(actions))

    def run_next(self) -> InputBase | None:
        """Pop and run the head action.

        Returns the input the action asked for (already installed in the
        player's waiting slot), or None.  Exceptions from the action
        propagate unchanged.
        """
        if not self._actions:
            raise IndexError("run_next() called on an empty deferred action queue")
        action = self._actions.pop(0)
        self._running = action
        self._front_count = 0
        logger.debug("Running deferred action %r for %s", action.title, action.player_id)
        try:
            result = action.execute()
        finally:
            self._running = None
            self._front_count = 0

        if result is None:
            return None
        if not isinstance(result, InputBase):
            raise TypeError(
                f"Deferred action {action.title!r} returned {type(result).__name__}, "
                "expected a PlayerInput or None"
            )
        registry = self._registries.get(action.player_id)
        if registry is None:
            raise KeyError(f"No waiting slot for player {action.player_id!r}")
        registry.set_waiting_for(result, action.on_complete)
        return result

    def shift(self) -> DeferredAction:
        """Remove and return the head action without running it."""
        if not self._actions:
            raise IndexError("shift() called on an empty deferred action queue")
        return self._actions.pop(0)

    def peek(self) -> DeferredAction | None:
        return self._actions[0] if self._actions else None

    def is_empty(self) -> bool:
        return not self._actions

    def clear(self) -> None:
        self._actions.clear()
        self._front_count = 0

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def titles(self) -> list[str]:
        return [a.title for a in self._actions]
