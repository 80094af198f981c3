"""Runtime configuration read from the environment (and an optional ``.env``)."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Saves sit next to the project root unless MARS_SAVES_DIR says otherwise.
_DEFAULT_SAVES_DIR = Path(__file__).parent.parent / "saves"

MAX_INPUT_DEPTH = 32
SAVE_VERSION = 2  # bump if the player record format changes

STARTING_TERRAFORM_RATING = 20


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    logger.warning("Ignoring unrecognised value %r for %s", raw, name)
    return default


def saves_dir() -> Path:
    """Directory used by ``SaveManager``."""
    return Path(os.getenv("MARS_SAVES_DIR", str(_DEFAULT_SAVES_DIR)))


def log_level() -> str:
    return os.getenv("MARS_LOG_LEVEL", "WARNING").upper()


def auto_resolve_single_player() -> bool:
    """Default for ``select_player`` callers that do not pin the policy."""
    return _env_flag("MARS_AUTO_RESOLVE_SINGLE_PLAYER", False)
