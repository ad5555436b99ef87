"""
Play outcome classification.

``classify`` turns one annotated ``PlayEvent`` into a ``PlayOutcome``: who
scored and how much, whether the ball changed hands, and the special-teams
details (field-goal distance and range, punt landing spot). It is a pure
function; the same event always classifies the same way and nothing is
shared between calls, so events can be classified on any number of workers.

Events whose type and tags contradict each other raise ``MalformedPlayError``
instead of being coerced into something plausible.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from playstats.constants import (
    FG_DISTANCE_OFFSET,
    FIELD_GOAL_POINTS,
    HALF_FIELD,
    PAT_POINTS,
    PUNT_INSIDE_YARD,
    PUNT_TOUCHBACK_YARD,
    SAFETY_POINTS,
    TOUCHDOWN_POINTS,
    TWO_POINT_POINTS,
)
from playstats.errors import MalformedPlayError
from playstats.events import PlayEvent, PlayOutcome, ScoreDelta
from playstats.features.vocab import (
    CONVERSION_PLAYS,
    FG_RANGE_EDGES,
    FG_RANGES,
    FIELD_GOAL_TAGS,
    KICKING_PLAYS,
    PASS_PLAYS,
    PAT_TAGS,
    RETURN_PLAYS,
    TWO_POINT_TAGS,
    FieldGoalRange,
    FieldSide,
    PlayType,
    SignificantPlay as SP,
    TurnoverKind,
)

# tags that score, in the order they are applied on a single event
SCORING_ORDER = (
    (SP.TOUCHDOWN, TOUCHDOWN_POINTS),
    (SP.PAT_GOOD, PAT_POINTS),
    (SP.TWO_POINT_GOOD, TWO_POINT_POINTS),
    (SP.FIELD_GOAL_GOOD, FIELD_GOAL_POINTS),
    (SP.SAFETY, SAFETY_POINTS),
)
CONVERSION_GOOD = frozenset({SP.PAT_GOOD, SP.TWO_POINT_GOOD})
# plays that hand the ball to the other team even without a score or turnover
POSSESSION_CHANGE_PLAYS = RETURN_PLAYS | CONVERSION_PLAYS | {PlayType.FIELD_GOAL}


def field_goal_distance(side: FieldSide, yard: int) -> int:
    """Kick distance from a spot: yard line + 10 yard end zone + 7 yard snap."""
    if side is FieldSide.OPP:
        return yard + FG_DISTANCE_OFFSET
    return (HALF_FIELD - yard) + HALF_FIELD + FG_DISTANCE_OFFSET


def field_goal_range(distance: Optional[int]) -> Optional[FieldGoalRange]:
    if distance is None or distance < FG_RANGE_EDGES[0]:
        return None
    idx = int(np.digitize([distance], FG_RANGE_EDGES)[0]) - 1
    return FG_RANGES[idx]


def is_tackle_for_loss(gain: int) -> bool:
    return gain < 0


def _check_consistency(ev: PlayEvent) -> None:
    pt, tags = ev.play_type, set(ev.tags)

    def bad(reason: str):
        raise MalformedPlayError(ev.key, reason)

    if ev.offense == ev.defense:
        bad(f"offense and defense are both {ev.offense!r}")
    td = SP.TOUCHDOWN in tags
    if tags & FIELD_GOAL_TAGS and pt is not PlayType.FIELD_GOAL:
        bad(f"field goal result tagged on a {pt.value} play")
    if tags & PAT_TAGS and pt is not PlayType.PAT and not (td and pt not in CONVERSION_PLAYS):
        bad(f"PAT result tagged on a {pt.value} play")
    if tags & TWO_POINT_TAGS and pt is not PlayType.TWO_POINT and not (td and pt not in CONVERSION_PLAYS):
        bad(f"two-point result tagged on a {pt.value} play")
    for group in (PAT_TAGS, TWO_POINT_TAGS, FIELD_GOAL_TAGS):
        if group <= tags:
            bad("both good and no-good tagged for the same kick")
    if {SP.FUMBLE_REC_OFF, SP.FUMBLE_REC_DEF} <= tags:
        bad("fumble recovered by both offense and defense")
    if td and SP.SAFETY in tags:
        bad("touchdown and safety on the same play")
    if td and (pt in CONVERSION_PLAYS or pt is PlayType.FIELD_GOAL):
        bad(f"touchdown tagged on a {pt.value} play")
    if SP.INTERCEPT in tags and pt not in PASS_PLAYS:
        bad(f"interception tagged on a {pt.value} play")
    if SP.SACK in tags and pt in KICKING_PLAYS:
        bad(f"sack tagged on a {pt.value} play")


def _turnover(ev: PlayEvent) -> Optional[TurnoverKind]:
    if ev.has(SP.INTERCEPT):
        return TurnoverKind.INTERCEPTION
    if ev.has(SP.FUMBLE_REC_DEF):
        return TurnoverKind.FUMBLE
    if ev.has(SP.TURNOVER):
        return TurnoverKind.UNKNOWN
    return None


def _scores(ev: PlayEvent, turnover: bool) -> tuple[ScoreDelta, ...]:
    # return touchdowns belong to the team that ended up with the ball
    td_team = ev.defense if (turnover or ev.play_type in RETURN_PLAYS) else ev.offense
    out = []
    for tag, pts in SCORING_ORDER:
        if not ev.has(tag):
            continue
        if tag is SP.TOUCHDOWN:
            team = td_team
        elif tag in CONVERSION_GOOD:
            team = td_team if ev.has(SP.TOUCHDOWN) else ev.offense
        elif tag is SP.SAFETY:
            team = ev.defense
        else:
            team = ev.offense
        out.append(ScoreDelta(team, pts, tag))
    return tuple(out)


def _new_possession(ev: PlayEvent, scores: tuple[ScoreDelta, ...], turnover: bool) -> Optional[str]:
    if scores:
        last = scores[-1]
        if last.tag is SP.SAFETY:
            return last.team  # receives the free kick
        return ev.defense if last.team == ev.offense else ev.offense
    if turnover or ev.play_type in POSSESSION_CHANGE_PLAYS:
        return ev.defense
    return None


def classify(event: PlayEvent) -> PlayOutcome:
    _check_consistency(event)
    pt = event.play_type
    gain = event.net_gain
    kind = _turnover(event)
    turnover = kind is not None
    scores = _scores(event, turnover)

    fg_distance = None
    if pt is PlayType.FIELD_GOAL and event.end is not None:
        fg_distance = field_goal_distance(event.end.side, event.end.yard)

    touchback = inside_20 = False
    if pt is PlayType.PUNT and event.end is not None and event.end.side is FieldSide.OPP:
        touchback = event.end.yard <= PUNT_TOUCHBACK_YARD
        inside_20 = not touchback and event.end.yard <= PUNT_INSIDE_YARD

    return PlayOutcome(
        event_key=event.key,
        play_type=pt,
        quarter=event.quarter,
        offense=event.offense,
        defense=event.defense,
        scores=scores,
        turnover=turnover,
        turnover_kind=kind,
        new_possession=_new_possession(event, scores, turnover),
        field_goal_distance=fg_distance,
        field_goal_range=field_goal_range(fg_distance),
        field_goal_made=event.has(SP.FIELD_GOAL_GOOD),
        tackle_for_loss=pt not in KICKING_PLAYS | CONVERSION_PLAYS
        and (is_tackle_for_loss(gain) or event.has(SP.TFL)),
        sack=pt is PlayType.SACK or event.has(SP.SACK),
        fumble=event.has(SP.FUMBLE) or event.has(SP.FUMBLE_REC_OFF) or event.has(SP.FUMBLE_REC_DEF),
        punt_inside_20=inside_20,
        punt_touchback=touchback,
        net_gain=gain,
        return_yards=event.return_yards,
        penalty=event.has(SP.PENALTY),
        penalty_yards=abs(event.penalty_yards),
        penalty_on=event.penalty_on,
        end=event.end,
        start_score=event.start_score,
    )
