from __future__ import annotations
import argparse
import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from playstats.config import FullConfig, load_config
from playstats.data.ingest import load_game
from playstats.logging_config import setup_logging
from playstats.pipeline import aggregate_season
from playstats.stats.season import TeamSeasonStats

logger = logging.getLogger(__name__)

SUMMARY_COLS = ["team", "games_played", "points", "points_per_game", "total_yards",
                "yards_per_game", "rushing_yards", "yards_per_carry", "passing_yards",
                "completion_percentage", "turnovers", "takeaways", "turnover_differential",
                "penalty_yards_per_game"]

def stats_frame(stats: Iterable[TeamSeasonStats], round_digits: int = 1) -> pd.DataFrame:
    """One row per team, most total yards first."""
    rows = [s.snapshot(round_digits) for s in stats]
    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLS)
    df = pd.DataFrame(rows)
    return df.sort_values(["total_yards", "team"], ascending=[False, True]).reset_index(drop=True)

def games_frame(results) -> pd.DataFrame:
    rows = []
    for r in results:
        home, away = r.teams
        rows.append({"game_id": r.game_id, "home": home, "away": away,
                     "home_score": r.score[home], "away_score": r.score[away],
                     "plays": len(r.history), "skipped": len(r.skipped),
                     "incomplete": r.incomplete})
    return pd.DataFrame(rows)

def main(argv=None):
    ap = argparse.ArgumentParser(description="Season team statistics from annotated game files")
    ap.add_argument("games", help="directory of game JSON files")
    ap.add_argument("--config", default="", help="YAML config (defaults if omitted)")
    ap.add_argument("--season", default="")
    ap.add_argument("--csv", default="", help="also write the full table here")
    args = ap.parse_args(argv)

    cfg = load_config(args.config) if args.config else FullConfig()
    setup_logging(cfg.logging)

    paths = sorted(Path(args.games).glob("*.json"))
    if not paths:
        logger.error("no game files in %s", args.games)
        return 1
    games = [load_game(p) for p in paths]
    agg, results = aggregate_season(games, cfg, season=args.season or None)

    df = stats_frame(agg.standings(), cfg.aggregation.round_digits)
    print(f"\n== Season {agg.season}: {len(results)} games ==\n")
    print(games_frame(results).to_string(index=False))
    print()
    print(df[SUMMARY_COLS].to_string(index=False))
    if args.csv:
        Path(args.csv).parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(args.csv, index=False)
        print("Wrote", args.csv)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
