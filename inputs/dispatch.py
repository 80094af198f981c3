"""Callback dispatch — applies a parsed answer to its input tree.

``run_callbacks`` walks the input tree alongside the ``Answer`` produced by
``inputs.parser`` and calls each answered node's ``cb``:

- leaves receive their value (amount, player id, card ids, value),
- ``AndOptions`` children run in order, then the container's own ``cb``,
- ``OrOptions`` runs only the chosen child, then its own ``cb(index)``.

Every callback may return a follow-up ``PlayerInput``.  Follow-ups are
collected in call order and handed back to the driver; nothing here installs
or defers them.
"""

from __future__ import annotations

from typing import Any

from inputs.models import (
    AndOptions,
    InputBase,
    OrOptions,
    SelectAmount,
    SelectCard,
    SelectOption,
    SelectPlayer,
    SelectValue,
)
from inputs.parser import (
    AmountAnswer,
    AndAnswer,
    Answer,
    CardAnswer,
    OptionAnswer,
    OrAnswer,
    PlayerAnswer,
    ValueAnswer,
)


def run_callbacks(node: InputBase, answer: Answer) -> list[InputBase]:
    """Invoke the callbacks for *answer* and return follow-up inputs in order."""
    follow_ups: list[InputBase] = []
    _run(node, answer, follow_ups)
    return follow_ups


def _collect(result: Any, follow_ups: list[InputBase]) -> None:
    if result is None:
        return
    if not isinstance(result, InputBase):
        raise TypeError(
            f"Input callbacks must return a PlayerInput or None, got {type(result).__name__}"
        )
    follow_ups.append(result)


def _run(node: InputBase, answer: Answer, follow_ups: list[InputBase]) -> None:
    if isinstance(node, SelectOption) and isinstance(answer, OptionAnswer):
        _collect(node.cb(), follow_ups)
    elif isinstance(node, SelectAmount) and isinstance(answer, AmountAnswer):
        _collect(node.cb(answer.amount), follow_ups)
    elif isinstance(node, SelectPlayer) and isinstance(answer, PlayerAnswer):
        _collect(node.cb(answer.player_id), follow_ups)
    elif isinstance(node, SelectCard) and isinstance(answer, CardAnswer):
        _collect(node.cb(list(answer.cards)), follow_ups)
    elif isinstance(node, SelectValue) and isinstance(answer, ValueAnswer):
        _collect(node.cb(answer.value), follow_ups)
    elif isinstance(node, AndOptions) and isinstance(answer, AndAnswer):
        for child, child_answer in zip(node.options, answer.answers):
            _run(child, child_answer, follow_ups)
        _collect(node.cb(), follow_ups)
    elif isinstance(node, OrOptions) and isinstance(answer, OrAnswer):
        _run(node.options[answer.index], answer.answer, follow_ups)
        _collect(node.cb(answer.index), follow_ups)
    else:
        raise TypeError(
            f"Answer {type(answer).__name__} does not match input {type(node).__name__}"
        )
