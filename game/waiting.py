"""Per-player waiting slot: the single pending input and its completion hook."""

from __future__ import annotations

import logging
from typing import Callable

from inputs.models import InputBase

logger = logging.getLogger(__name__)


def _noop() -> None:
    return None


class WaitingRegistry:
    """Holds at most one ``(input, on_complete)`` pair for one player.

    ``on_complete`` runs once, when the chain started by the input bottoms
    out.  Setting a new input replaces the slot wholesale; the previous hook
    is dropped without being called.
    """

    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        self._waiting_for: InputBase | None = None
        self._on_complete: Callable[[], None] = _noop

    def set_waiting_for(
        self,
        node: InputBase,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        if self._waiting_for is not None:
            logger.debug(
                "Player %s: replacing %r with %r",
                self.player_id, self._waiting_for.title, node.title,
            )
        self._waiting_for = node
        self._on_complete = on_complete or _noop

    def get_waiting_for(self) -> InputBase | None:
        return self._waiting_for

    @property
    def on_complete(self) -> Callable[[], None]:
        return self._on_complete

    @property
    def is_waiting(self) -> bool:
        return self._waiting_for is not None

    def clear(self) -> None:
        self._waiting_for = None
        self._on_complete = _noop
