# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "anthropic>=0.78.0",
#     "pydantic>=2.0",
# ]
# ///
"""Replay a recorded game from a JSON game file, one play at a time.

Run with:  uv run replay_game.py --game-file data/games/CIN201904150.json
           uv run replay_game.py --game-file game.json --plays 20 --substitutions
           uv run replay_game.py --game-file game.json --skip-llm --json
"""

from __future__ import annotations

import argparse
import logging
import sys
import uuid

from commentary import AnnouncerStyle, CommentaryGenerator
from config import ReplayConfig, create_anthropic_client
from data.cache import NameCache
from data.play_source import PlaySource
from data.players import PlayerNameResolver
from data.snapshot_store import InMemorySnapshotStore, JsonFileSnapshotStore
from errors import DataInconsistencyError, NotFoundError, ReplayError
from models import Half, VisibleState
from replay import ReplayOrchestrator


def format_state(state: VisibleState) -> str:
    """One-line summary of a visible state for terminal output."""
    game = state.game
    half = "Top" if game.half == Half.TOP else "Bot"
    bases = "".join(
        mark if occupied else "-"
        for mark, occupied in (("1", game.on_first), ("2", game.on_second), ("3", game.on_third))
    )
    batting = state.visitors if game.half == Half.TOP else state.home
    fielding = state.home if game.half == Half.TOP else state.visitors
    line = (
        f"[{state.current_play:>3}] {half} {game.inning}, {game.outs} out, {bases} | "
        f"{state.visitors.short_name} {state.visitors.runs} - "
        f"{state.home.short_name} {state.home.runs} | "
        f"{batting.current_batter or '?'} vs {fielding.current_pitcher or '?'}"
    )
    if state.play_description:
        line += f" | prev: {state.play_description}"
    return line


def build_orchestrator(
    source: PlaySource,
    config: ReplayConfig,
    skip_llm: bool = False,
    persist: bool = False,
) -> ReplayOrchestrator:
    """Wire the orchestrator's collaborators from configuration."""
    commentary = None
    if skip_llm:
        commentary = CommentaryGenerator(skip_llm=True)
    elif config.has_commentary():
        commentary = CommentaryGenerator(
            client=create_anthropic_client(config),
            model=config.commentary_model,
            timeout=config.commentary_timeout,
        )
    store = JsonFileSnapshotStore(config.snapshot_dir) if persist else InMemorySnapshotStore()
    resolver = PlayerNameResolver(source.lookup_players, NameCache(ttl=config.name_cache_ttl))
    return ReplayOrchestrator(source, store, resolver=resolver, commentary=commentary)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Replay a recorded baseball game, reconstructing lineups and score."
    )
    parser.add_argument(
        "--game-file", required=True,
        help="Path to a JSON game file.",
    )
    parser.add_argument(
        "--session", default=None,
        help="Session id (default: a new random id).",
    )
    parser.add_argument(
        "--plays", type=int, default=None, metavar="N",
        help="Stop after N advances (default: replay the whole game).",
    )
    parser.add_argument(
        "--skip-llm", action="store_true",
        help="Use a fixed commentary line instead of calling the API.",
    )
    parser.add_argument(
        "--style", choices=[s.value for s in AnnouncerStyle], default="classic",
        help="Announcer style for commentary.",
    )
    parser.add_argument(
        "--substitutions", action="store_true",
        help="Print the substitution preview before each advance.",
    )
    parser.add_argument(
        "--persist", action="store_true",
        help="Write lineup snapshots to REPLAY_SNAPSHOT_DIR.",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print each visible state as JSON.",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    source = PlaySource()
    try:
        game = source.load_file(args.game_file)
    except (OSError, DataInconsistencyError) as e:
        print(f"Error loading {args.game_file}: {e}", file=sys.stderr)
        return 1

    config = ReplayConfig.from_env()
    orchestrator = build_orchestrator(source, config, skip_llm=args.skip_llm, persist=args.persist)
    session_id = args.session or uuid.uuid4().hex[:12]

    def emit(state: VisibleState) -> None:
        if args.json:
            print(state.model_dump_json())
            return
        print(format_state(state))
        for line in state.game.log:
            print(f"      {line}")

    try:
        state = orchestrator.initialize(game.game_id, session_id)
    except ReplayError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    emit(state)

    advances = 0
    while args.plays is None or advances < args.plays:
        if args.substitutions:
            try:
                preview = orchestrator.preview_substitutions(
                    game.game_id, session_id, state.current_play,
                )
            except NotFoundError:
                break
            for sub in preview.substitutions:
                print(f"      * {sub.description}")
        try:
            state = orchestrator.advance(
                game.game_id, session_id, state.current_play, announcer_style=args.style,
            )
        except NotFoundError:
            break
        except ReplayError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        advances += 1
        emit(state)

    if not args.json:
        print(f"Score: {state.visitors.short_name} {state.visitors.runs}, "
              f"{state.home.short_name} {state.home.runs}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
