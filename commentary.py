# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "anthropic>=0.78.0",
#     "pydantic>=2.0",
# ]
# ///
"""Announcer-style play-by-play commentary.

Builds a prompt from a ``VisibleState`` and asks Claude for a few sentences
of radio-style commentary.  Commentary is decoration: any API failure is
logged and an empty list comes back, leaving lineup and score untouched.
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any

import anthropic
from anthropic import Anthropic

from config import DEFAULT_COMMENTARY_MODEL, DEFAULT_COMMENTARY_TIMEOUT
from models import Half, VisibleState

logger = logging.getLogger(__name__)

SKIP_LLM_RESPONSE = (
    "This is a dummy response for testing purposes. LLM calls are being skipped."
)

MAX_TOKENS = 400


class AnnouncerStyle(str, Enum):
    CLASSIC = "classic"
    MODERN = "modern"
    ENTHUSIASTIC = "enthusiastic"
    POETIC = "poetic"


ANNOUNCER_PROFILES: dict[AnnouncerStyle, dict[str, Any]] = {
    AnnouncerStyle.CLASSIC: {
        "style": "Professional, precise, knowledgeable, balanced",
        "catchphrases": ["How about that!", "That's one for the highlight reel."],
    },
    AnnouncerStyle.MODERN: {
        "style": "Energetic, concise, dramatic, modern",
        "catchphrases": ["Back at the wall...", "Unbelievable!"],
    },
    AnnouncerStyle.ENTHUSIASTIC: {
        "style": "Enthusiastic, folksy, passionate, fan-like",
        "catchphrases": ["Holy cow!", "It might be, it could be, it IS!"],
    },
    AnnouncerStyle.POETIC: {
        "style": "Eloquent, poetic, storytelling, conversational",
        "catchphrases": ["Pull up a chair and spend the afternoon."],
    },
}


def split_sentences(text: str) -> list[str]:
    """Break text into one line per sentence, dropping blank lines."""
    lines = re.sub(r"([.!?])\s+", "\\1\n", text).split("\n")
    return [line.strip() for line in lines if line.strip()]


def build_prompt(state: VisibleState, style: AnnouncerStyle) -> str:
    """Format the play and game situation for the commentary request."""
    profile = ANNOUNCER_PROFILES[style]
    game = state.game
    batting, fielding = (
        (state.visitors, state.home) if game.half == Half.TOP else (state.home, state.visitors)
    )
    situation = {
        "inning": game.inning,
        "half": game.half.value.lower(),
        "outs": game.outs,
        "runners": {"first": game.on_first, "second": game.on_second, "third": game.on_third},
        "score": {
            state.visitors.display_name or state.visitors.team_id: state.visitors.runs,
            state.home.display_name or state.home.team_id: state.home.runs,
        },
        "batting_team": batting.display_name or batting.team_id,
        "batter": batting.current_batter,
        "on_deck": batting.next_batter,
        "pitcher": fielding.current_pitcher,
        "play": state.play_description,
        "event_code": state.event_string,
    }
    return (
        f"You are a baseball radio announcer. Style: {profile['style']}.\n"
        f"Catchphrases you may use sparingly: {'; '.join(profile['catchphrases'])}\n\n"
        "Call the play below in two to four sentences. Use only the facts given; "
        "do not invent players, counts or statistics.\n\n"
        f"{json.dumps(situation, indent=2)}"
    )


class CommentaryGenerator:
    """Generate commentary lines for a visible state.

    Args:
        client: Anthropic client.  ``None`` disables API calls; every
            request then returns an empty list unless ``skip_llm`` is set.
        model: Claude model id.
        timeout: Per-request timeout in seconds.
        skip_llm: Return a fixed dummy response instead of calling the API.
    """

    def __init__(
        self,
        client: Anthropic | None = None,
        model: str = DEFAULT_COMMENTARY_MODEL,
        timeout: float = DEFAULT_COMMENTARY_TIMEOUT,
        skip_llm: bool = False,
    ) -> None:
        self.client = client
        self.model = model
        self.timeout = timeout
        self.skip_llm = skip_llm

    def generate(
        self,
        state: VisibleState,
        style: AnnouncerStyle | str = AnnouncerStyle.CLASSIC,
    ) -> list[str]:
        """Return commentary for ``state`` split into sentences.

        Returns an empty list when no client is configured or the request
        fails.
        """
        if self.skip_llm:
            return split_sentences(SKIP_LLM_RESPONSE)
        if self.client is None:
            return []

        style = AnnouncerStyle(style)
        try:
            response = self.client.with_options(timeout=self.timeout).messages.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                messages=[{"role": "user", "content": build_prompt(state, style)}],
            )
        except anthropic.APIError as e:
            logger.warning("Commentary request failed for %s play %d: %s",
                           state.game_id, state.current_play, e)
            return []

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        return split_sentences(text)
