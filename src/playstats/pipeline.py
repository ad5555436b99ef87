"""
End-to-end helpers: raw clip records -> GameResult -> season stats.

Each game is played by one tracker on one worker; games run in parallel on a
thread pool and their results are committed to the shared SeasonAggregator
as they finish.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Optional

from playstats.config import FullConfig
from playstats.data.ingest import to_event
from playstats.data.schema import GameRecord
from playstats.errors import DuplicateGameError, MalformedPlayError, PlayStatsError
from playstats.rules.fsm import GameTracker
from playstats.state import GameResult
from playstats.stats.season import SeasonAggregator

logger = logging.getLogger(__name__)


def play_game(game: GameRecord, cfg: Optional[FullConfig] = None) -> GameResult:
    """Ingest and track every clip of one game; bad clips become skipped plays."""
    cfg = cfg or FullConfig()
    tracker = GameTracker(game.game_key, (game.home_team, game.away_team))
    for i, raw in enumerate(game.clips):
        try:
            event = to_event(raw, game.home_team, game.away_team,
                             game_id=game.game_key, strict_tags=cfg.ingest.strict_tags)
        except MalformedPlayError as e:
            tracker.skip(e.key if e.key != "?" else f"#{i}", e.reason)
            continue
        tracker.feed(event)
    return tracker.finish()


def aggregate_season(games: Iterable[GameRecord], cfg: Optional[FullConfig] = None,
                     season: Optional[str] = None) -> tuple[SeasonAggregator, list[GameResult]]:
    cfg = cfg or FullConfig()
    agg = SeasonAggregator(season or cfg.season)
    results: list[GameResult] = []
    with ThreadPoolExecutor(max_workers=cfg.aggregation.max_workers) as executor:
        futures = {executor.submit(play_game, g, cfg): g.game_key for g in games}
        for future in as_completed(futures):
            try:
                result = future.result()
            except (ValueError, PlayStatsError) as e:
                logger.warning("season %s: game %s not tracked: %s", agg.season, futures[future], e)
                continue
            try:
                agg.add_game(result)
            except DuplicateGameError as e:
                logger.warning("season %s: %s; game not merged again", agg.season, e)
                continue
            results.append(result)
    results.sort(key=lambda r: r.game_id)
    logger.info("season %s: %d games, %d incomplete", agg.season, len(results),
                sum(r.incomplete for r in results))
    return agg, results
