from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from playstats.constants import FULL_FIELD, MAX_YARD, MIN_YARD
from playstats.features.vocab import (
    FieldGoalRange,
    FieldSide,
    PenaltyOn,
    PlayType,
    SignificantPlay,
    TurnoverKind,
)


@dataclass(frozen=True, slots=True)
class FieldPosition:
    side: FieldSide         # relative to the offense's own goal line
    yard: int               # 0..50

    def __post_init__(self):
        if not MIN_YARD <= self.yard <= MAX_YARD:
            raise ValueError(f"yard {self.yard} outside [{MIN_YARD}, {MAX_YARD}]")

    @property
    def from_own_goal(self) -> int:
        return self.yard if self.side is FieldSide.OWN else FULL_FIELD - self.yard

    @classmethod
    def from_own_goal_line(cls, yards: int) -> "FieldPosition":
        yards = max(0, min(FULL_FIELD, int(yards)))
        if yards <= MAX_YARD:
            return cls(FieldSide.OWN, yards)
        return cls(FieldSide.OPP, FULL_FIELD - yards)

    def flipped(self) -> "FieldPosition":
        """The same spot seen from the other team's goal line."""
        other = FieldSide.OPP if self.side is FieldSide.OWN else FieldSide.OWN
        return FieldPosition(other, self.yard)


@dataclass(frozen=True, slots=True)
class PlayEvent:
    key: str
    game_id: str
    quarter: int                            # 1..4, 5 = overtime
    down: Optional[int]                     # 1..4, None for kickoffs/tries
    yards_to_go: int
    offense: str
    defense: str
    play_type: PlayType
    start: Optional[FieldPosition] = None
    end: Optional[FieldPosition] = None
    tags: tuple[SignificantPlay, ...] = ()
    gain: Optional[int] = None              # annotated net yards, wins over start/end
    return_yards: int = 0                   # gained by the receiving team
    penalty_yards: int = 0
    penalty_on: Optional[PenaltyOn] = None
    start_score: Optional[Mapping[str, int]] = None

    def has(self, tag: SignificantPlay) -> bool:
        return tag in self.tags

    @property
    def net_gain(self) -> int:
        if self.gain is not None:
            return self.gain
        if self.start is not None and self.end is not None:
            return self.end.from_own_goal - self.start.from_own_goal
        return 0


@dataclass(frozen=True, slots=True)
class ScoreDelta:
    team: str
    points: int
    tag: SignificantPlay


@dataclass(frozen=True, slots=True)
class PlayOutcome:
    event_key: str
    play_type: PlayType
    quarter: int
    offense: str
    defense: str
    scores: tuple[ScoreDelta, ...] = ()
    turnover: bool = False
    turnover_kind: Optional[TurnoverKind] = None
    new_possession: Optional[str] = None
    field_goal_distance: Optional[int] = None
    field_goal_range: Optional[FieldGoalRange] = None
    field_goal_made: bool = False
    tackle_for_loss: bool = False
    sack: bool = False
    fumble: bool = False
    punt_inside_20: bool = False
    punt_touchback: bool = False
    net_gain: int = 0
    return_yards: int = 0
    penalty: bool = False
    penalty_yards: int = 0
    penalty_on: Optional[PenaltyOn] = None
    end: Optional[FieldPosition] = None
    start_score: Optional[Mapping[str, int]] = field(default=None, compare=False)

    @property
    def points(self) -> int:
        return sum(s.points for s in self.scores)

    @property
    def scoring_team(self) -> Optional[str]:
        return self.scores[0].team if self.scores else None

    @property
    def touchdown_team(self) -> Optional[str]:
        for s in self.scores:
            if s.tag is SignificantPlay.TOUCHDOWN:
                return s.team
        return None

    def points_for(self, team: str) -> int:
        return sum(s.points for s in self.scores if s.team == team)
