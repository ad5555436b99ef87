from __future__ import annotations

import json
import logging
import warnings
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from playstats.data.schema import ClipRecord, GameRecord, SideYard
from playstats.errors import MalformedPlayError, UnknownSignificantPlayTag
from playstats.events import FieldPosition, PlayEvent
from playstats.features.vocab import (
    FieldSide,
    PenaltyOn,
    SignificantPlay,
    parse_play_type,
    parse_tag,
)

logger = logging.getLogger(__name__)

HOME, AWAY = "Home", "Away"
# older exports name the penalized side instead of tagging "Penalty"
PENALTY_ALIASES = {"PENALTY.HOME": HOME, "PENALTY.AWAY": AWAY}
PENALTY_ON = {
    "OFF": PenaltyOn.OFFENSE, "offense": PenaltyOn.OFFENSE,
    "DEF": PenaltyOn.DEFENSE, "defense": PenaltyOn.DEFENSE,
}


def _position(key: str, raw: Optional[SideYard]) -> Optional[FieldPosition]:
    if raw is None:
        return None
    try:
        return FieldPosition(FieldSide(raw.side), raw.yard)
    except ValueError as e:
        raise MalformedPlayError(key, f"bad field position {raw.side} {raw.yard}: {e}") from e


def _team(key: str, label: str, home: str, away: str) -> str:
    if label in (HOME, home):
        return home
    if label in (AWAY, away):
        return away
    raise MalformedPlayError(key, f"offense {label!r} is neither {home} nor {away}")


def _tags(rec: ClipRecord, strict: bool) -> tuple[tuple[SignificantPlay, ...], Optional[str]]:
    """Known tags in first-seen order, plus the side named by a penalty alias."""
    out: list[SignificantPlay] = []
    flagged = None
    for raw in rec.significant_plays:
        if raw is None:
            continue
        if raw in PENALTY_ALIASES:
            tag, flagged = SignificantPlay.PENALTY, PENALTY_ALIASES[raw]
        else:
            tag = parse_tag(raw)
        if tag is None:
            if strict:
                raise MalformedPlayError(rec.clip_key, f"unknown significant play {raw!r}")
            warnings.warn(f"play {rec.clip_key}: dropping unknown significant play {raw!r}",
                          UnknownSignificantPlayTag, stacklevel=3)
            continue
        if tag not in out:
            out.append(tag)
    return tuple(out), flagged


def to_event(record: Union[ClipRecord, dict], home: str, away: str,
             game_id: Optional[str] = None, strict_tags: bool = False) -> PlayEvent:
    """Map one annotation clip onto a ``PlayEvent``; raises ``MalformedPlayError``."""
    if not isinstance(record, ClipRecord):
        try:
            record = ClipRecord.model_validate(record)
        except ValidationError as e:
            key = str(record.get("clipKey", "?")) if isinstance(record, dict) else "?"
            raise MalformedPlayError(key, f"invalid clip record: {e.error_count()} error(s)") from e
    key = record.clip_key

    play_type = parse_play_type(record.play_type)
    if play_type is None:
        raise MalformedPlayError(key, f"unknown play type {record.play_type!r}")
    offense = _team(key, record.offensive_team, home, away)
    defense = away if offense == home else home
    tags, flagged = _tags(record, strict_tags)

    penalty_on = PENALTY_ON.get(record.penalty_on or "")
    if penalty_on is None and flagged is not None:
        penalty_on = PenaltyOn.OFFENSE if _team(key, flagged, home, away) == offense else PenaltyOn.DEFENSE

    start_score = None
    if record.start_score is not None:
        snap = {home: record.start_score.home, away: record.start_score.away}
        start_score = {t: v for t, v in snap.items() if v is not None} or None

    return PlayEvent(
        key=key,
        game_id=game_id or record.game_key or "",
        quarter=record.quarter,
        down=record.down,
        yards_to_go=record.to_go_yard or 0,
        offense=offense,
        defense=defense,
        play_type=play_type,
        start=_position(key, record.start),
        end=_position(key, record.end),
        tags=tags,
        gain=record.gain_yard,
        return_yards=record.return_yard,
        penalty_yards=record.penalty_yard,
        penalty_on=penalty_on,
        start_score=start_score,
    )


def load_game(path: Union[str, Path]) -> GameRecord:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    game = GameRecord.model_validate(raw)
    logger.debug("loaded %s: %s vs %s, %d clips", game.game_key, game.home_team,
                 game.away_team, len(game.clips))
    return game
