"""
Season team statistics.

A finished ``GameResult`` is reduced to one ``TeamSeasonStats`` per team
(``game_contribution``); season totals are sums of those contributions.
``combine`` is associative and commutative, so games can be reduced in any
order or tree shape, on any number of workers, and still land on the same
counters. Every merged game id is remembered: merging a game twice raises
``DuplicateGameError`` instead of counting it again.

Only counters are stored. Rates (yards per carry, touchback percentage, ...)
are properties computed from the counters on every read, and a zero
denominator reads as 0.0.
"""
from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field, fields, replace
from typing import Optional

from playstats.errors import DuplicateGameError
from playstats.events import PlayOutcome
from playstats.features.vocab import (
    FieldGoalRange,
    PenaltyOn,
    PlayType,
    TurnoverKind,
)
from playstats.state import GameResult

logger = logging.getLogger(__name__)

# counters combined with max() instead of a sum
MAX_COUNTERS = frozenset({"longest_field_goal"})
# yards already counted on these plays when a sack is tagged on them
_YARDAGE_PLAYS = frozenset({PlayType.RUN, PlayType.PASS_COMPLETE})


def _rate(num: float, den: float, scale: float = 1.0) -> float:
    return num * scale / den if den else 0.0


@dataclass
class TeamSeasonStats:
    team: str
    season: str
    game_ids: frozenset[str] = frozenset()

    games_played: int = 0
    points: int = 0
    points_allowed: int = 0
    touchdowns: int = 0
    rushing_touchdowns: int = 0
    passing_touchdowns: int = 0
    total_yards: int = 0

    rushing_attempts: int = 0
    rushing_yards: int = 0
    pass_attempts: int = 0
    pass_completions: int = 0
    passing_yards: int = 0
    sacks_taken: int = 0
    sack_yards_lost: int = 0

    punts: int = 0
    punt_yards: int = 0
    punt_touchbacks: int = 0
    punts_inside_20: int = 0
    kick_returns: int = 0
    kick_return_yards: int = 0
    punt_returns: int = 0
    punt_return_yards: int = 0
    interception_return_yards: int = 0
    fumble_return_yards: int = 0
    field_goal_attempts: int = 0
    field_goals_made: int = 0
    longest_field_goal: int = 0
    field_goal_attempts_by_range: Counter = field(default_factory=Counter)
    field_goals_made_by_range: Counter = field(default_factory=Counter)

    fumbles: int = 0
    fumbles_lost: int = 0
    interceptions_thrown: int = 0
    turnovers: int = 0
    takeaways: int = 0
    interceptions: int = 0
    sacks: int = 0
    tackles_for_loss: int = 0
    penalties: int = 0
    penalty_yards: int = 0

    # --- derived rates ---------------------------------------------------
    @property
    def points_per_game(self) -> float:
        return _rate(self.points, self.games_played)

    @property
    def yards_per_game(self) -> float:
        return _rate(self.total_yards, self.games_played)

    @property
    def rushing_yards_per_game(self) -> float:
        return _rate(self.rushing_yards, self.games_played)

    @property
    def passing_yards_per_game(self) -> float:
        return _rate(self.passing_yards, self.games_played)

    @property
    def yards_per_carry(self) -> float:
        return _rate(self.rushing_yards, self.rushing_attempts)

    @property
    def yards_per_completion(self) -> float:
        return _rate(self.passing_yards, self.pass_completions)

    @property
    def yards_per_pass_attempt(self) -> float:
        return _rate(self.passing_yards, self.pass_attempts)

    @property
    def completion_percentage(self) -> float:
        return _rate(self.pass_completions, self.pass_attempts, 100.0)

    @property
    def average_punt_yards(self) -> float:
        return _rate(self.punt_yards, self.punts)

    @property
    def touchback_percentage(self) -> float:
        return _rate(self.punt_touchbacks, self.punts, 100.0)

    @property
    def inside_20_percentage(self) -> float:
        return _rate(self.punts_inside_20, self.punts, 100.0)

    @property
    def field_goal_percentage(self) -> float:
        return _rate(self.field_goals_made, self.field_goal_attempts, 100.0)

    @property
    def average_kick_return(self) -> float:
        return _rate(self.kick_return_yards, self.kick_returns)

    @property
    def average_punt_return(self) -> float:
        return _rate(self.punt_return_yards, self.punt_returns)

    @property
    def total_return_yards(self) -> int:
        return (self.kick_return_yards + self.punt_return_yards
                + self.interception_return_yards + self.fumble_return_yards)

    @property
    def turnover_rate(self) -> float:
        """Turnovers per game."""
        return _rate(self.turnovers, self.games_played)

    @property
    def turnover_differential(self) -> int:
        return self.takeaways - self.turnovers

    @property
    def penalty_yards_per_game(self) -> float:
        return _rate(self.penalty_yards, self.games_played)

    DERIVED = (
        "points_per_game", "yards_per_game", "rushing_yards_per_game",
        "passing_yards_per_game", "yards_per_carry", "yards_per_completion",
        "yards_per_pass_attempt", "completion_percentage", "average_punt_yards",
        "touchback_percentage", "inside_20_percentage", "field_goal_percentage",
        "average_kick_return", "average_punt_return", "total_return_yards",
        "turnover_rate", "turnover_differential", "penalty_yards_per_game",
    )

    def counters(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)
                if f.name not in ("team", "season", "game_ids")}

    def snapshot(self, round_digits: int = 1) -> dict:
        """Plain record of counters plus derived rates, for reporting."""
        rec: dict = {"team": self.team, "season": self.season}
        for k, v in self.counters().items():
            if isinstance(v, Counter):
                v = {r.value: v.get(r, 0) for r in FieldGoalRange}
            rec[k] = v
        for name in self.DERIVED:
            v = getattr(self, name)
            rec[name] = round(v, round_digits) if isinstance(v, float) else v
        return rec


def combine(a: TeamSeasonStats, b: TeamSeasonStats) -> TeamSeasonStats:
    """Associative, commutative sum of two accumulators for the same team and season."""
    if (a.team, a.season) != (b.team, b.season):
        raise ValueError(f"cannot combine {a.team}/{a.season} with {b.team}/{b.season}")
    overlap = a.game_ids & b.game_ids
    if overlap:
        raise DuplicateGameError(a.team, sorted(overlap)[0])
    out = {}
    for name, va in a.counters().items():
        vb = getattr(b, name)
        if name in MAX_COUNTERS:
            out[name] = max(va, vb)
        else:
            out[name] = va + vb
    return replace(a, game_ids=a.game_ids | b.game_ids, **out)


def _credit(c: TeamSeasonStats, o: PlayOutcome, team: str, opponent: str) -> None:
    c.points += o.points_for(team)
    c.points_allowed += o.points_for(opponent)
    if o.touchdown_team == team:
        c.touchdowns += 1
        if team == o.offense and o.play_type is PlayType.RUN:
            c.rushing_touchdowns += 1
        elif team == o.offense and o.play_type is PlayType.PASS_COMPLETE:
            c.passing_touchdowns += 1

    if o.penalty:
        flagged = o.defense if o.penalty_on is PenaltyOn.DEFENSE else o.offense
        if flagged == team:
            c.penalties += 1
            c.penalty_yards += o.penalty_yards

    if o.offense == team:
        _credit_offense(c, o)
    elif o.defense == team:
        _credit_defense(c, o)


def _credit_offense(c: TeamSeasonStats, o: PlayOutcome) -> None:
    pt, gain = o.play_type, o.net_gain
    if pt is PlayType.RUN:
        c.rushing_attempts += 1
        c.rushing_yards += gain
    elif pt is PlayType.PASS_COMPLETE:
        c.pass_attempts += 1
        c.pass_completions += 1
        c.passing_yards += gain
    elif pt is PlayType.PASS_INCOMPLETE:
        c.pass_attempts += 1
    elif pt is PlayType.PUNT:
        c.punts += 1
        c.punt_yards += abs(gain)
        c.punt_touchbacks += o.punt_touchback
        c.punts_inside_20 += o.punt_inside_20
    elif pt is PlayType.FIELD_GOAL:
        c.field_goal_attempts += 1
        if o.field_goal_range is not None:
            c.field_goal_attempts_by_range[o.field_goal_range] += 1
        if o.field_goal_made:
            c.field_goals_made += 1
            if o.field_goal_range is not None:
                c.field_goals_made_by_range[o.field_goal_range] += 1
            c.longest_field_goal = max(c.longest_field_goal, o.field_goal_distance or 0)

    if o.sack:
        c.sacks_taken += 1
        if pt not in _YARDAGE_PLAYS:
            c.sack_yards_lost += max(0, -gain)
    if o.fumble:
        c.fumbles += 1
    if o.turnover:
        c.turnovers += 1
        if o.turnover_kind is TurnoverKind.INTERCEPTION:
            c.interceptions_thrown += 1
        elif o.turnover_kind is TurnoverKind.FUMBLE:
            c.fumbles_lost += 1


def _credit_defense(c: TeamSeasonStats, o: PlayOutcome) -> None:
    if o.play_type is PlayType.KICKOFF:
        c.kick_returns += 1
        c.kick_return_yards += o.return_yards
    elif o.play_type is PlayType.PUNT and not o.punt_touchback:
        c.punt_returns += 1
        c.punt_return_yards += o.return_yards

    if o.turnover:
        c.takeaways += 1
        if o.turnover_kind is TurnoverKind.INTERCEPTION:
            c.interceptions += 1
            c.interception_return_yards += o.return_yards
        elif o.turnover_kind is TurnoverKind.FUMBLE:
            c.fumble_return_yards += o.return_yards
    if o.sack:
        c.sacks += 1
    if o.tackle_for_loss:
        c.tackles_for_loss += 1


def game_contribution(result: GameResult, team: str, season: str) -> TeamSeasonStats:
    """One game's counters for one team; skipped plays contribute nothing."""
    opponent = result.opponent(team)
    c = TeamSeasonStats(team=team, season=season,
                        game_ids=frozenset({result.game_id}), games_played=1)
    for o in result.outcomes:
        _credit(c, o, team, opponent)
    c.total_yards = c.rushing_yards + c.passing_yards - c.sack_yards_lost
    return c


def merge(existing: TeamSeasonStats, game: GameResult, team: str) -> TeamSeasonStats:
    """Fold one finished game into a team's season; ``existing`` is left untouched."""
    if team != existing.team:
        raise ValueError(f"stats belong to {existing.team}, not {team}")
    if game.game_id in existing.game_ids:
        raise DuplicateGameError(team, game.game_id)
    return combine(existing, game_contribution(game, team, existing.season))


class SeasonAggregator:
    """
    Per-team season accumulators for one season.

    ``add_game`` builds both teams' contributions without holding the lock,
    then commits them together; a game already merged for either team is
    rejected as a whole and nothing changes.
    """

    def __init__(self, season: str):
        self.season = season
        self._stats: dict[str, TeamSeasonStats] = {}
        self._lock = threading.Lock()

    def add_game(self, result: GameResult) -> None:
        contribs = [game_contribution(result, t, self.season) for t in result.teams]
        with self._lock:
            for t in result.teams:
                cur = self._stats.get(t)
                if cur is not None and result.game_id in cur.game_ids:
                    raise DuplicateGameError(t, result.game_id)
            for c in contribs:
                cur = self._stats.get(c.team) or TeamSeasonStats(c.team, self.season)
                self._stats[c.team] = combine(cur, c)
        logger.info("season %s: merged game %s (%s)%s", self.season, result.game_id,
                    " vs ".join(result.teams), " [incomplete]" if result.incomplete else "")

    def get(self, team: str) -> Optional[TeamSeasonStats]:
        with self._lock:
            return self._stats.get(team)

    def teams(self) -> list[str]:
        with self._lock:
            return sorted(self._stats)

    def standings(self) -> list[TeamSeasonStats]:
        """All teams, most total yards first."""
        with self._lock:
            stats = list(self._stats.values())
        return sorted(stats, key=lambda s: (-s.total_yards, s.team))
