"""Exceptions raised by the input-resolution core.

All three are raised synchronously out of ``Game.process`` or
``PlayerState.deserialize`` and are meant to be caught at the outer boundary
(CLI, API layer) and turned into a rejection for the caller.
"""

from __future__ import annotations


class NoPendingDecisionError(RuntimeError):
    """``process`` was called for a player who is not waiting for input."""

    def __init__(self, message: str = "Not waiting for anything") -> None:
        super().__init__(message)


class MalformedPayloadError(ValueError):
    """The submitted payload does not satisfy the pending input.

    The message names the specific check that failed, e.g.
    ``"Player not available"``.
    """


class DeserializationToleranceError(ValueError):
    """A saved record references data that no longer exists (e.g. a card)."""
