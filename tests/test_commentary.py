# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0", "anthropic>=0.78.0", "httpx"]
# ///
"""Tests for commentary.

Validates:
  1. skip_llm returns the fixed dummy response without a client call
  2. No client means no commentary
  3. The API is called with the configured model and timeout
  4. API errors are logged and produce an empty list
  5. split_sentences and build_prompt
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import anthropic
import httpx
import pytest

from commentary import (
    SKIP_LLM_RESPONSE,
    AnnouncerStyle,
    CommentaryGenerator,
    build_prompt,
    split_sentences,
)
from models import GameSituation, Half, TeamState, VisibleState


@pytest.fixture
def state() -> VisibleState:
    return VisibleState(
        game_id="CIN201904150",
        session_id="s1",
        current_play=6,
        game=GameSituation(inning=1, half=Half.BOTTOM, outs=1, on_first="Nick Senzel"),
        home=TeamState(team_id="CIN", display_name="Cincinnati Reds",
                       current_batter="Eugenio Suarez", next_batter="Yasiel Puig", runs=2),
        visitors=TeamState(team_id="PIT", display_name="Pittsburgh Pirates",
                           current_pitcher="Joe Musgrove"),
        play_description="Home run to left-center field",
        event_string="HR/F78.1-H",
    )


def _client(text: str) -> MagicMock:
    client = MagicMock()
    response = SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])
    client.with_options.return_value.messages.create.return_value = response
    return client


class TestGenerate:
    def test_skip_llm(self, state):
        client = MagicMock()
        lines = CommentaryGenerator(client=client, skip_llm=True).generate(state)
        assert lines == split_sentences(SKIP_LLM_RESPONSE)
        client.with_options.assert_not_called()

    def test_no_client(self, state):
        assert CommentaryGenerator().generate(state) == []

    def test_calls_api(self, state):
        client = _client("Suarez goes deep! Two runs score.")
        generator = CommentaryGenerator(client=client, model="test-model", timeout=5.0)
        lines = generator.generate(state, "enthusiastic")
        assert lines == ["Suarez goes deep!", "Two runs score."]
        client.with_options.assert_called_once_with(timeout=5.0)
        kwargs = client.with_options.return_value.messages.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert "Holy cow!" in kwargs["messages"][0]["content"]

    def test_api_error(self, state, caplog):
        client = MagicMock()
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client.with_options.return_value.messages.create.side_effect = (
            anthropic.APIConnectionError(request=request)
        )
        assert CommentaryGenerator(client=client).generate(state) == []
        assert "Commentary request failed" in caplog.text

    def test_unknown_style(self, state):
        with pytest.raises(ValueError):
            CommentaryGenerator(client=_client("x")).generate(state, "shouty")


class TestPrompt:
    def test_split_sentences(self):
        assert split_sentences("One. Two!  Three?\n\nFour") == ["One.", "Two!", "Three?", "Four"]
        assert split_sentences("") == []

    def test_prompt_uses_batting_side(self, state):
        prompt = build_prompt(state, AnnouncerStyle.CLASSIC)
        assert '"batter": "Eugenio Suarez"' in prompt
        assert '"pitcher": "Joe Musgrove"' in prompt
        assert '"batting_team": "Cincinnati Reds"' in prompt
        assert "Home run to left-center field" in prompt
        assert "Professional" in prompt
