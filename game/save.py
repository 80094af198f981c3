"""Save/load management for game sessions.

``SaveManager`` writes one JSON file per game to the saves directory
(``MARS_SAVES_DIR``, default ``saves/`` at the project root).  Files are keyed
by a filename-safe slug of the game id, so each game has exactly one slot
that is overwritten on every save.

Only settled sessions can be saved: input callbacks and deferred actions are
closures, so ``Game.to_save_dict`` refuses while anything is pending.

Public API
----------
list_saves()              -> list[SaveMeta]
autosave(game)            -> Path
load_save(game_id)        -> dict
load_game(game_id)        -> Game
delete_save(game_id)      -> None
save_exists(game_id)      -> bool
game_to_slug(game_id)     -> str
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from game import config
from game.config import SAVE_VERSION

if TYPE_CHECKING:
    from game.engine import Game

logger = logging.getLogger(__name__)

_SAVES_DIR = config.saves_dir()


# ── Save Metadata ────────────────────────────────────────────────────────────


class SaveMeta(NamedTuple):
    """Summary of a save file for listings."""

    slug: str
    game_id: str
    saved_at: str   # ISO-8601 string (UTC)
    generation: int
    player_count: int
    save_version: int


# ── Helpers ──────────────────────────────────────────────────────────────────


def game_to_slug(game_id: str) -> str:
    """Convert a game id to a safe lowercase filename stem.

    Examples
    --------
    "Demo Game" -> "demo_game"
    "g-42!"     -> "g_42"
    """
    slug = re.sub(r"[^a-z0-9]+", "_", game_id.lower()).strip("_")
    return slug or "game"


def _saves_dir() -> Path:
    """Return (and create) the saves directory."""
    _SAVES_DIR.mkdir(parents=True, exist_ok=True)
    return _SAVES_DIR


def _save_path(game_id: str) -> Path:
    return _saves_dir() / f"{game_to_slug(game_id)}.json"


# ── SaveManager ──────────────────────────────────────────────────────────────


class SaveManager:
    """Static-style helper class — all methods are class methods."""

    @classmethod
    def list_saves(cls) -> list[SaveMeta]:
        """Return save metadata sorted newest-first.  Unreadable files are skipped."""
        metas: list[SaveMeta] = []
        for path in _saves_dir().glob("*.json"):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Skipping unreadable save %s: %s", path.name, exc)
                continue
            metas.append(
                SaveMeta(
                    slug=path.stem,
                    game_id=data.get("game_id", path.stem),
                    saved_at=data.get("saved_at", ""),
                    generation=data.get("generation", 1),
                    player_count=len(data.get("players", [])),
                    save_version=data.get("save_version", 1),
                )
            )

        metas.sort(key=lambda m: m.saved_at, reverse=True)
        return metas

    @classmethod
    def autosave(cls, game: Game) -> Path:
        """Write (or overwrite) the save file for *game*.

        Raises ``RuntimeError`` if the session still has pending decisions.
        A ``saved_at`` timestamp and ``save_version`` are injected here.
        """
        data = game.to_save_dict()
        data["saved_at"] = datetime.now(tz=timezone.utc).isoformat()
        data["save_version"] = SAVE_VERSION

        path = _save_path(game.game_id)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Saved game %s to %s", game.game_id, path)
        return path

    @classmethod
    def load_save(cls, game_id: str) -> dict:
        """Parse and return the raw save dict for *game_id*.

        Raises ``FileNotFoundError`` if the file does not exist,
        ``json.JSONDecodeError`` if it is malformed.
        """
        return json.loads(_save_path(game_id).read_text(encoding="utf-8"))

    @classmethod
    def load_game(cls, game_id: str) -> Game:
        """Load and rebuild a session, upgrading records from older releases."""
        from game.engine import Game

        data = cls.load_save(game_id)
        version = data.get("save_version", 1)
        if version < SAVE_VERSION:
            logger.warning("Upgrading save %s from version %d", game_id, version)
        return Game.load_from_save(data, legacy=True)

    @classmethod
    def delete_save(cls, game_id: str) -> None:
        """Delete the save file for *game_id* (no-op if missing)."""
        _save_path(game_id).unlink(missing_ok=True)

    @classmethod
    def save_exists(cls, game_id: str) -> bool:
        return _save_path(game_id).exists()
