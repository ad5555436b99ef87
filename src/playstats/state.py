from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from playstats.events import FieldPosition, PlayOutcome


class Phase(str, Enum):
    PRE_KICKOFF = "pre_kickoff"
    IN_PROGRESS = "in_progress"
    FINAL = "final"


@dataclass(slots=True)
class GameState:
    game_id: str
    teams: tuple[str, str]          # (home, away)
    phase: Phase = Phase.PRE_KICKOFF
    quarter: int = 1                # 1..4, 5 = overtime
    down: int = 1                   # 1..4
    distance: int = 10              # yards to go
    possession: Optional[str] = None
    position: Optional[FieldPosition] = None   # relative to the possession team
    score: dict[str, int] = field(default_factory=dict)
    history: list["AppliedPlay"] = field(default_factory=list)

    def __post_init__(self):
        for t in self.teams:
            self.score.setdefault(t, 0)

    def opponent(self, team: str) -> str:
        home, away = self.teams
        return away if team == home else home


@dataclass(frozen=True, slots=True)
class AppliedPlay:
    outcome: PlayOutcome
    quarter: int
    down: int
    distance: int
    possession: str
    score: Mapping[str, int]


@dataclass(frozen=True, slots=True)
class SkippedPlay:
    key: str
    reason: str


@dataclass(frozen=True, slots=True)
class GameResult:
    game_id: str
    teams: tuple[str, str]
    score: Mapping[str, int]
    history: tuple[AppliedPlay, ...] = ()
    skipped: tuple[SkippedPlay, ...] = ()
    quarter_points: Mapping[int, Mapping[str, int]] = field(default_factory=dict)

    @property
    def incomplete(self) -> bool:
        return bool(self.skipped)

    @property
    def outcomes(self) -> tuple[PlayOutcome, ...]:
        return tuple(a.outcome for a in self.history)

    @property
    def winner(self) -> Optional[str]:
        home, away = self.teams
        if self.score[home] == self.score[away]:
            return None
        return home if self.score[home] > self.score[away] else away

    def opponent(self, team: str) -> str:
        home, away = self.teams
        if team not in self.teams:
            raise ValueError(f"{team!r} did not play in game {self.game_id}")
        return away if team == home else home

    def as_record(self) -> dict:
        """Plain structured record for reporting collaborators."""
        return {
            "game_id": self.game_id,
            "home": self.teams[0],
            "away": self.teams[1],
            "score": dict(self.score),
            "quarter_points": {q: dict(p) for q, p in self.quarter_points.items()},
            "plays": len(self.history),
            "skipped": [{"key": s.key, "reason": s.reason} for s in self.skipped],
            "incomplete": self.incomplete,
            "possession_history": [
                {"key": a.outcome.event_key, "quarter": a.quarter, "down": a.down,
                 "distance": a.distance, "possession": a.possession}
                for a in self.history
            ],
        }
