from __future__ import annotations


class PlayStatsError(Exception):
    """Base class for errors raised by the play statistics engine."""


class ClassificationError(PlayStatsError):
    pass


class MalformedPlayError(ClassificationError):
    """A play whose type and tags cannot describe a real play."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"play {key}: {reason}")
        self.key = key
        self.reason = reason


class GameAlreadyFinalized(PlayStatsError):
    def __init__(self, game_id: str):
        super().__init__(f"game {game_id} is already final")
        self.game_id = game_id


class DuplicateGameError(PlayStatsError):
    def __init__(self, team: str, game_id: str):
        super().__init__(f"game {game_id} already merged for {team}")
        self.team = team
        self.game_id = game_id


class InvalidGameStateError(PlayStatsError):
    """Structurally impossible tracker state; indicates a bug, not bad data."""


class UnknownSignificantPlayTag(UserWarning):
    """A tag outside the known vocabulary; the tag is dropped."""
