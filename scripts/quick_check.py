from __future__ import annotations

import argparse
import sys

import pandas as pd

from playstats.data.ingest import load_game
from playstats.logging_config import setup_logging
from playstats.config import LoggingCfg
from playstats.pipeline import play_game


def play_rows(result):
    for a in result.history:
        o = a.outcome
        yield {
            "key": o.event_key,
            "qtr": a.quarter,
            "offense": o.offense,
            "play_type": o.play_type.value,
            "gain": o.net_gain,
            "pts": o.points,
            "turnover": o.turnover_kind.value if o.turnover_kind else "",
            "fg_dist": o.field_goal_distance if o.field_goal_distance is not None else "",
            "next": f"{a.possession} {a.down}&{a.distance}",
            **{f"score_{t}": s for t, s in a.score.items()},
        }


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("game", help="one game JSON file")
    ap.add_argument("--level", default="WARNING")
    args = ap.parse_args()
    setup_logging(LoggingCfg(level=args.level))

    game = load_game(args.game)
    result = play_game(game)

    print(f"\n== {result.game_id}: {game.home_team} vs {game.away_team} ==\n")
    print(pd.DataFrame(list(play_rows(result))).to_string(index=False))
    print("\nfinal:", dict(result.score))
    print("by quarter:", {q: dict(p) for q, p in result.quarter_points.items()})
    if result.incomplete:
        print(f"\n-- {len(result.skipped)} skipped play(s) --")
        for s in result.skipped:
            print(f"{s.key}: {s.reason}")
    sys.stdout.flush()


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        import traceback

        print("quick_check error:", e)
        traceback.print_exc()
        sys.exit(1)
