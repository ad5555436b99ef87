"""
Centralized closed vocabularies so play types and tags aren't duplicated.
Values are the exact, case-sensitive strings the annotation tool writes.
Import from here instead of comparing raw strings in other modules.
"""
from __future__ import annotations

from enum import Enum

import numpy as np


class FieldSide(str, Enum):
    OWN = "OWN"
    OPP = "OPP"


class PlayType(str, Enum):
    RUN = "Run"
    PASS_COMPLETE = "PassComplete"
    PASS_INCOMPLETE = "PassIncomplete"
    KICKOFF = "Kickoff"
    PUNT = "Punt"
    PAT = "PAT"
    TWO_POINT = "2pt"
    FIELD_GOAL = "FieldGoal"
    SACK = "Sack"
    NONE = "none"


class SignificantPlay(str, Enum):
    TOUCHDOWN = "Touchdown"
    TWO_POINT_GOOD = "2pt Conversion(Good)"
    TWO_POINT_NO_GOOD = "2pt Conversion(No Good)"
    PAT_GOOD = "PAT(Good)"
    PAT_NO_GOOD = "PAT(No Good)"
    FIELD_GOAL_GOOD = "Field Goal(Good)"
    FIELD_GOAL_NO_GOOD = "Field Goal(No Good)"
    PENALTY = "Penalty"
    SACK = "Sack"
    TFL = "TFL"
    FUMBLE = "Fumble Situation"
    FUMBLE_REC_OFF = "Fumble recovered by off"
    FUMBLE_REC_DEF = "Fumble recovered by def"
    INTERCEPT = "Intercept"
    TURNOVER = "Turn Over"
    SAFETY = "safety"


class FieldGoalRange(str, Enum):
    R1_19 = "1-19"
    R20_29 = "20-29"
    R30_39 = "30-39"
    R40_49 = "40-49"
    R50_PLUS = "50+"


class TurnoverKind(str, Enum):
    INTERCEPTION = "interception"
    FUMBLE = "fumble"
    UNKNOWN = "unknown"


class PenaltyOn(str, Enum):
    OFFENSE = "offense"
    DEFENSE = "defense"


PASS_PLAYS = frozenset({PlayType.PASS_COMPLETE, PlayType.PASS_INCOMPLETE})
KICKING_PLAYS = frozenset({PlayType.KICKOFF, PlayType.PUNT, PlayType.PAT, PlayType.FIELD_GOAL})
RETURN_PLAYS = frozenset({PlayType.KICKOFF, PlayType.PUNT})
CONVERSION_PLAYS = frozenset({PlayType.PAT, PlayType.TWO_POINT})
# plays without a down of their own
NON_DOWN_PLAYS = frozenset({PlayType.KICKOFF, PlayType.PAT, PlayType.TWO_POINT})

PAT_TAGS = frozenset({SignificantPlay.PAT_GOOD, SignificantPlay.PAT_NO_GOOD})
TWO_POINT_TAGS = frozenset({SignificantPlay.TWO_POINT_GOOD, SignificantPlay.TWO_POINT_NO_GOOD})
FIELD_GOAL_TAGS = frozenset({SignificantPlay.FIELD_GOAL_GOOD, SignificantPlay.FIELD_GOAL_NO_GOOD})

# lower edges of the closed bands [1,19], [20,29], [30,39], [40,49], [50,inf)
FG_RANGE_EDGES = np.array([1, 20, 30, 40, 50])
FG_RANGES = tuple(FieldGoalRange)

_PLAY_TYPE_BY_VALUE = {p.value: p for p in PlayType}
_TAG_BY_VALUE = {t.value: t for t in SignificantPlay}


def parse_play_type(raw: str | None) -> PlayType | None:
    """Exact-match lookup; returns None for anything outside the vocabulary."""
    if raw is None:
        return None
    return _PLAY_TYPE_BY_VALUE.get(raw)


def parse_tag(raw: str | None) -> SignificantPlay | None:
    if raw is None:
        return None
    return _TAG_BY_VALUE.get(raw)
