"""
Raw record shapes written by the annotation tool.

These mirror the JSON the tool exports (camelCase keys, ``Home``/``Away``
offense labels, a fixed-size ``significantPlays`` list padded with nulls).
They only validate shape; mapping onto the closed vocabularies happens in
``playstats.data.ingest``.
"""
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from playstats.constants import OVERTIME_QUARTER


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SideYard(_Record):
    side: str
    yard: int = Field(ge=0, le=50)


class ScoreSnapshot(_Record):
    home: Optional[int] = Field(default=None, alias="Home")
    away: Optional[int] = Field(default=None, alias="Away")


class ClipRecord(_Record):
    clip_key: str = Field(alias="clipKey")
    game_key: Optional[str] = Field(default=None, alias="gameKey")
    quarter: int = Field(default=1, ge=1, le=OVERTIME_QUARTER)
    down: Optional[Union[int, str]] = None
    to_go_yard: Optional[int] = Field(default=None, alias="toGoYard")
    offensive_team: str = Field(alias="offensiveTeam")
    play_type: Optional[str] = Field(default=None, alias="playType")
    start: Optional[SideYard] = None
    end: Optional[SideYard] = None
    gain_yard: Optional[int] = Field(default=None, alias="gainYard")
    return_yard: int = Field(default=0, alias="returnYard")
    penalty_yard: int = Field(default=0, alias="penaltyYard")
    penalty_on: Optional[str] = Field(default=None, alias="penaltyOn")
    significant_plays: List[Optional[str]] = Field(default_factory=list, alias="significantPlays")
    start_score: Optional[ScoreSnapshot] = Field(default=None, alias="startScore")

    @field_validator("down", mode="before")
    @classmethod
    def _blank_down(cls, v):
        if v in ("", None):
            return None
        return int(v)

    @field_validator("return_yard", "penalty_yard", mode="before")
    @classmethod
    def _null_zero(cls, v):
        return 0 if v is None else v


class GameRecord(_Record):
    game_key: str = Field(alias="gameKey")
    home_team: str = Field(alias="homeTeam")
    away_team: str = Field(alias="awayTeam")
    date: Optional[str] = None
    clips: List[dict] = Field(default_factory=list, alias="Clips")
