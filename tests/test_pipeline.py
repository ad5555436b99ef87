import json
import logging

import pytest

from playstats.config import FullConfig
from playstats.data.schema import GameRecord
from playstats.errors import UnknownSignificantPlayTag
from playstats.eval.season_report import SUMMARY_COLS, games_frame, main, stats_frame
from playstats.pipeline import aggregate_season, play_game

HOME, AWAY = "KMHY", "SNU"


def clip(key, offense="Home", play_type="Run", gain=5, tags=(), **kw):
    rec = {"clipKey": key, "quarter": 1, "down": "1", "toGoYard": 10,
           "offensiveTeam": offense, "playType": play_type, "gainYard": gain,
           "significantPlays": list(tags) + [None] * (4 - len(tags))}
    rec.update(kw)
    return rec


def game(key, clips, home=HOME, away=AWAY):
    return GameRecord.model_validate({"gameKey": key, "homeTeam": home, "awayTeam": away,
                                      "Clips": clips})


def test_play_game_skips_bad_clips():
    g = game("G1", [
        clip("c1", gain=12),
        clip("c2", play_type="Lateral"),
        {"quarter": 1, "offensiveTeam": "Home"},
        clip("c3", tags=["Touchdown", "PAT(Good)"], gain=30),
        clip("c4", play_type="Run", tags=["Field Goal(Good)"]),
    ])
    res = play_game(g)
    assert [o.event_key for o in res.outcomes] == ["c1", "c3"]
    assert [s.key for s in res.skipped] == ["c2", "#2", "c4"]
    assert res.incomplete
    assert res.score == {HOME: 7, AWAY: 0}


def test_play_game_strict_tags():
    g = game("G1", [clip("c1", tags=["Onside Kick"])])
    with pytest.warns(UnknownSignificantPlayTag):
        assert not play_game(g).incomplete
    strict = FullConfig.model_validate({"ingest": {"strict_tags": True}})
    assert [s.key for s in play_game(g, strict).skipped] == ["c1"]


def test_aggregate_season_parallel_and_duplicate(caplog):
    g1_clips = [clip(f"a{i}", gain=10) for i in range(5)]
    games = [
        game("G1", g1_clips),
        game("G2", [clip(f"b{i}", offense="Away", gain=4) for i in range(5)], home="BEARS", away=HOME),
        game("G1", g1_clips),
    ]
    cfg = FullConfig.model_validate({"aggregation": {"max_workers": 3}})
    with caplog.at_level(logging.WARNING, logger="playstats.pipeline"):
        agg, results = aggregate_season(games, cfg, season="2025")
    assert agg.season == "2025"
    assert [r.game_id for r in results] == ["G1", "G2"]
    assert "game G1 already merged" in caplog.text
    k = agg.get(HOME)
    assert k.games_played == 2
    assert (k.rushing_attempts, k.rushing_yards) == (10, 70)
    assert agg.get("BEARS").games_played == 1
    assert agg.get(AWAY).games_played == 1


def test_stats_frame_sorted_and_empty():
    g1 = game("G1", [clip("a", gain=30), clip("b", offense="Away", gain=10)])
    agg, _ = aggregate_season([g1])
    df = stats_frame(agg.standings())
    assert list(df["team"]) == [HOME, AWAY]
    assert set(SUMMARY_COLS) <= set(df.columns)
    assert df.loc[0, "total_yards"] == 30

    empty = stats_frame([])
    assert empty.empty and list(empty.columns) == SUMMARY_COLS


def test_games_frame_rows():
    res = play_game(game("G1", [clip("a", tags=["Touchdown"], gain=40), clip("bad", play_type="?")]))
    df = games_frame([res])
    row = df.iloc[0]
    assert (row["home"], row["home_score"], row["away_score"]) == (HOME, 6, 0)
    assert row["plays"] == 1 and row["skipped"] == 1 and bool(row["incomplete"])


def test_report_main(tmp_path, capsys, clean_logging):
    games_dir = tmp_path / "games"
    games_dir.mkdir()
    for key in ("G1", "G2"):
        (games_dir / f"{key}.json").write_text(json.dumps(
            {"gameKey": key, "homeTeam": HOME, "awayTeam": AWAY,
             "Clips": [clip(f"{key}-1", gain=8), clip(f"{key}-2", offense="Away", gain=3)]}))
    out_csv = tmp_path / "out" / "season.csv"
    assert main([str(games_dir), "--season", "2024", "--csv", str(out_csv)]) == 0
    printed = capsys.readouterr().out
    assert "Season 2024: 2 games" in printed
    assert out_csv.exists()
    assert HOME in out_csv.read_text()


def test_report_main_empty_dir(tmp_path, clean_logging):
    assert main([str(tmp_path)]) == 1


def test_bad_game_does_not_stop_season(caplog):
    games = [
        game("G1", [clip("a", gain=12), clip("b", gain=3)]),
        game("G2", [clip("c", gain=8)], home="BEARS", away="BEARS"),
        game("G3", [clip("d", offense="Away", gain=6)]),
    ]
    with caplog.at_level(logging.WARNING, logger="playstats.pipeline"):
        agg, results = aggregate_season(games)
    assert [r.game_id for r in results] == ["G1", "G3"]
    assert "game G2 not tracked" in caplog.text
    assert agg.get(HOME).games_played == 2
    assert agg.get(HOME).rushing_yards == 15
    assert agg.get(AWAY).rushing_yards == 6
    assert agg.get("BEARS") is None
