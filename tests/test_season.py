import copy

import pytest

from helpers import AWAY, HOME, make_event, opp
from playstats.errors import DuplicateGameError
from playstats.features.vocab import FieldGoalRange, PenaltyOn, PlayType, SignificantPlay as SP
from playstats.rules.fsm import track_game
from playstats.stats.season import (
    SeasonAggregator,
    TeamSeasonStats,
    combine,
    game_contribution,
    merge,
)


def rushing_game(game_id, yards, carries=10, team=HOME):
    other = AWAY if team == HOME else HOME
    per = yards // carries
    events = [make_event(f"{game_id}-{i}", game_id=game_id, offense=team, defense=other, gain=per)
              for i in range(carries)]
    return track_game(game_id, (HOME, AWAY), events)


def full_game():
    g = "full"

    def e(key, offense, **kw):
        defense = AWAY if offense == HOME else HOME
        return make_event(key, game_id=g, offense=offense, defense=defense, **kw)

    events = [
        e("e1", AWAY, play_type=PlayType.KICKOFF, down=None, return_yards=25),
        e("e2", HOME, gain=12),
        e("e3", HOME, play_type=PlayType.PASS_COMPLETE, gain=20),
        e("e4", HOME, play_type=PlayType.PASS_INCOMPLETE),
        e("e5", HOME, play_type=PlayType.NONE, tags=[SP.PENALTY], penalty_yards=15,
          penalty_on=PenaltyOn.DEFENSE),
        e("e6", HOME, play_type=PlayType.FIELD_GOAL, tags=[SP.FIELD_GOAL_GOOD], end=opp(20)),
        e("e7", HOME, play_type=PlayType.KICKOFF, down=None, return_yards=18),
        e("e8", AWAY, play_type=PlayType.SACK, gain=-8),
        e("e9", AWAY, play_type=PlayType.PASS_INCOMPLETE, tags=[SP.INTERCEPT], return_yards=30),
        e("e10", HOME, tags=[SP.TOUCHDOWN, SP.PAT_GOOD], gain=5),
        e("e11", AWAY, play_type=PlayType.PUNT, gain=40, end=opp(10), return_yards=6),
        e("e12", HOME, tags=[SP.FUMBLE, SP.FUMBLE_REC_DEF], gain=2),
        e("e13", AWAY, tags=[SP.SAFETY], gain=-1),
    ]
    return track_game(g, (HOME, AWAY), events)


def test_merge_order_independent():
    g1, g2 = rushing_game("g1", 100), rushing_game("g2", 150)
    empty = TeamSeasonStats(HOME, "2024")
    a = merge(merge(empty, g1, HOME), g2, HOME)
    b = merge(merge(empty, g2, HOME), g1, HOME)
    assert a == b
    assert a.rushing_yards == 250
    assert a.games_played == 2
    assert a.yards_per_game == 125
    assert a.game_ids == {"g1", "g2"}


def test_remerge_raises_and_leaves_stats_unchanged():
    g1 = rushing_game("g1", 100)
    s = merge(TeamSeasonStats(HOME, "2024"), g1, HOME)
    before = copy.deepcopy(s)
    with pytest.raises(DuplicateGameError) as exc:
        merge(s, g1, HOME)
    assert exc.value.game_id == "g1" and exc.value.team == HOME
    assert s == before
    assert s.games_played == 1 and s.rushing_yards == 100


def test_combine_is_associative_and_commutative():
    parts = [game_contribution(rushing_game(f"g{i}", 10 * (i + 1)), HOME, "2024") for i in range(3)]
    a, b, c = parts
    assert combine(combine(a, b), c) == combine(a, combine(b, c))
    assert combine(a, b) == combine(b, a)
    assert combine(combine(a, b), c).games_played == 3


def test_combine_rejects_overlap_and_mismatch():
    a = game_contribution(rushing_game("g1", 100), HOME, "2024")
    with pytest.raises(DuplicateGameError):
        combine(a, a)
    with pytest.raises(ValueError):
        combine(a, TeamSeasonStats(HOME, "2023"))
    with pytest.raises(ValueError):
        combine(a, TeamSeasonStats(AWAY, "2024"))


def test_merge_team_checks():
    g = rushing_game("g1", 100)
    with pytest.raises(ValueError):
        merge(TeamSeasonStats(HOME, "2024"), g, AWAY)
    with pytest.raises(ValueError):
        merge(TeamSeasonStats("Bears", "2024"), g, "Bears")


def test_rates_with_zero_denominators():
    s = TeamSeasonStats(HOME, "2024")
    for name in TeamSeasonStats.DERIVED:
        assert getattr(s, name) == 0


def test_offense_contribution():
    res = full_game()
    assert res.score == {HOME: 12, AWAY: 0}
    h = game_contribution(res, HOME, "2024")
    assert h.games_played == 1
    assert (h.points, h.points_allowed) == (12, 0)
    assert (h.touchdowns, h.rushing_touchdowns, h.passing_touchdowns) == (1, 1, 0)
    assert (h.rushing_attempts, h.rushing_yards) == (3, 19)
    assert (h.pass_attempts, h.pass_completions, h.passing_yards) == (2, 1, 20)
    assert h.total_yards == 39
    assert (h.field_goal_attempts, h.field_goals_made, h.longest_field_goal) == (1, 1, 37)
    assert h.field_goals_made_by_range[FieldGoalRange.R30_39] == 1
    assert (h.fumbles, h.fumbles_lost, h.turnovers) == (1, 1, 1)
    assert h.penalties == 0


def test_defense_and_return_contribution():
    res = full_game()
    h = game_contribution(res, HOME, "2024")
    assert (h.kick_returns, h.kick_return_yards) == (1, 25)
    assert (h.punt_returns, h.punt_return_yards) == (1, 6)
    assert (h.interceptions, h.interception_return_yards, h.takeaways) == (1, 30, 1)
    assert h.sacks == 1
    assert h.tackles_for_loss == 2
    assert h.total_return_yards == 61

    a = game_contribution(res, AWAY, "2024")
    assert (a.kick_returns, a.kick_return_yards) == (1, 18)
    assert (a.penalties, a.penalty_yards) == (1, 15)
    assert (a.sacks_taken, a.sack_yards_lost) == (1, 8)
    assert a.total_yards == -9
    assert (a.interceptions_thrown, a.turnovers, a.takeaways) == (1, 1, 1)
    assert (a.punts, a.punt_yards, a.punts_inside_20) == (1, 40, 1)
    assert a.points_allowed == 12
    assert a.turnover_differential == 0


def test_derived_rates_follow_counters():
    h = game_contribution(full_game(), HOME, "2024")
    assert h.yards_per_carry == pytest.approx(19 / 3)
    assert h.completion_percentage == 50.0
    assert h.yards_per_completion == 20.0
    assert h.field_goal_percentage == 100.0
    snap = h.snapshot()
    assert snap["yards_per_carry"] == 6.3
    assert snap["field_goals_made_by_range"]["30-39"] == 1
    assert snap["team"] == HOME and snap["season"] == "2024"


def test_incomplete_game_still_contributes():
    events = [make_event("a", gain=4), make_event("bad", tags=[SP.FIELD_GOAL_GOOD]),
              make_event("b", gain=6)]
    res = track_game("g1", (HOME, AWAY), events)
    assert res.incomplete
    h = game_contribution(res, HOME, "2024")
    assert (h.rushing_attempts, h.rushing_yards) == (2, 10)


def test_aggregator_rejects_duplicate_for_both_teams():
    agg = SeasonAggregator("2024")
    g1 = rushing_game("g1", 100)
    agg.add_game(g1)
    agg.add_game(rushing_game("g2", 50, team=AWAY))
    with pytest.raises(DuplicateGameError):
        agg.add_game(g1)
    assert agg.get(HOME).games_played == 2
    assert agg.get(AWAY).games_played == 2
    assert agg.get(HOME).rushing_yards == 100
    assert agg.teams() == sorted([HOME, AWAY])
    assert [s.team for s in agg.standings()] == [HOME, AWAY]
    assert agg.get("Bears") is None


def test_return_touchdown_credited_to_defense():
    events = [make_event("i1", play_type=PlayType.PASS_INCOMPLETE, tags=[SP.INTERCEPT, SP.TOUCHDOWN],
                         return_yards=40)]
    res = track_game("g1", (HOME, AWAY), events)
    a = game_contribution(res, AWAY, "2024")
    h = game_contribution(res, HOME, "2024")
    assert (a.touchdowns, a.rushing_touchdowns, a.passing_touchdowns) == (1, 0, 0)
    assert a.points == 6 and a.interception_return_yards == 40
    assert h.touchdowns == 0 and h.points_allowed == 6
