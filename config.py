# /// script
# requires-python = ">=3.12"
# dependencies = ["anthropic>=0.78.0"]
# ///
"""Centralized configuration for environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from anthropic import Anthropic

logger = logging.getLogger(__name__)

ANTHROPIC_KEY_ENV = "ANTHROPIC_KEY"

DEFAULT_COMMENTARY_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_COMMENTARY_TIMEOUT = 20.0
DEFAULT_NAME_CACHE_TTL = 3600
DEFAULT_DATA_DIR = "data/games"
DEFAULT_SNAPSHOT_DIR = "data/snapshots"


def get_api_key() -> str:
    """Return the Anthropic API key, or empty string if not set."""
    return os.environ.get(ANTHROPIC_KEY_ENV, "")


def _env_number(name: str, default: float, cast: type = float) -> float:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %s", name, raw, default)
        return default
    return value


@dataclass
class ReplayConfig:
    """Runtime settings for a replay.

    Attributes:
        api_key: Anthropic API key; commentary is skipped without one.
        commentary_model: Model used for announcer commentary.
        commentary_timeout: Seconds before a commentary request is abandoned.
        name_cache_ttl: Seconds a resolved player name stays cached.
        data_dir: Directory of JSON game files.
        snapshot_dir: Directory for persisted lineup snapshots.
    """
    api_key: str = ""
    commentary_model: str = DEFAULT_COMMENTARY_MODEL
    commentary_timeout: float = DEFAULT_COMMENTARY_TIMEOUT
    name_cache_ttl: int = DEFAULT_NAME_CACHE_TTL
    data_dir: str = DEFAULT_DATA_DIR
    snapshot_dir: str = DEFAULT_SNAPSHOT_DIR

    @classmethod
    def from_env(cls) -> ReplayConfig:
        """Create a ReplayConfig from environment variables.

        Reads:
            ANTHROPIC_KEY, REPLAY_COMMENTARY_MODEL, REPLAY_COMMENTARY_TIMEOUT,
            REPLAY_NAME_CACHE_TTL, REPLAY_DATA_DIR, REPLAY_SNAPSHOT_DIR
        """
        return cls(
            api_key=get_api_key(),
            commentary_model=os.environ.get("REPLAY_COMMENTARY_MODEL") or DEFAULT_COMMENTARY_MODEL,
            commentary_timeout=_env_number("REPLAY_COMMENTARY_TIMEOUT", DEFAULT_COMMENTARY_TIMEOUT),
            name_cache_ttl=int(_env_number("REPLAY_NAME_CACHE_TTL", DEFAULT_NAME_CACHE_TTL, int)),
            data_dir=os.environ.get("REPLAY_DATA_DIR") or DEFAULT_DATA_DIR,
            snapshot_dir=os.environ.get("REPLAY_SNAPSHOT_DIR") or DEFAULT_SNAPSHOT_DIR,
        )

    def has_commentary(self) -> bool:
        """Return True if an API key is available for commentary."""
        return bool(self.api_key)


def create_anthropic_client(config: ReplayConfig | None = None) -> Anthropic:
    """Create an Anthropic client using the configured API key."""
    config = config or ReplayConfig.from_env()
    return Anthropic(api_key=config.api_key, timeout=config.commentary_timeout)
