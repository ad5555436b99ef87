from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from playstats.constants import FIRST_AND_TEN_YTG, GOAL_TO_GO_YARD, MAX_DOWN, MIN_YTG
from playstats.errors import GameAlreadyFinalized, InvalidGameStateError, MalformedPlayError
from playstats.events import FieldPosition, PlayEvent, PlayOutcome
from playstats.features.vocab import NON_DOWN_PLAYS, FieldSide, PenaltyOn, PlayType
from playstats.rules.classifier import classify
from playstats.state import AppliedPlay, GameResult, GameState, Phase, SkippedPlay

logger = logging.getLogger(__name__)

# plays that never consume a down on their own
NO_DOWN_PLAYS = NON_DOWN_PLAYS | {PlayType.NONE}


class _EndOfGame:
    def __repr__(self):
        return "END_OF_GAME"


END_OF_GAME = _EndOfGame()


def first_down_distance(pos: Optional[FieldPosition]) -> int:
    """10 to go, or the distance to the goal line when inside the opponent's 10."""
    if pos is not None and pos.side is FieldSide.OPP and pos.yard <= GOAL_TO_GO_YARD:
        return max(MIN_YTG, pos.yard)
    return FIRST_AND_TEN_YTG


def _advance(pos: Optional[FieldPosition], yards: int) -> Optional[FieldPosition]:
    if pos is None:
        return None
    return FieldPosition.from_own_goal_line(pos.from_own_goal + yards)


class GameTracker:
    """
    Single-owner state machine for one game: PreKickoff -> InProgress -> Final.

    Outcomes must be applied in game order by one caller; nothing here is
    shared across games, so different games can run on different workers.
    """

    def __init__(self, game_id: str, teams: tuple[str, str]):
        if teams[0] == teams[1]:
            raise ValueError(f"game {game_id} needs two distinct teams, got {teams}")
        self.state = GameState(game_id=game_id, teams=tuple(teams))
        self._skipped: list[SkippedPlay] = []
        self._seen_keys: set[str] = set()  # applied or skipped
        self._quarter_points: dict[int, dict[str, int]] = {}
        self._result: Optional[GameResult] = None

    @property
    def game_id(self) -> str:
        return self.state.game_id

    @property
    def is_final(self) -> bool:
        return self.state.phase is Phase.FINAL

    @property
    def incomplete(self) -> bool:
        return bool(self._skipped)

    def _ensure_open(self) -> None:
        if self.is_final:
            raise GameAlreadyFinalized(self.game_id)

    def skip(self, key: str, reason: str) -> None:
        self._ensure_open()
        logger.warning("game %s: skipping play %s (%s)", self.game_id, key, reason)
        self._skipped.append(SkippedPlay(key, reason))
        self._seen_keys.add(key)

    def feed(self, event: PlayEvent) -> Optional[PlayOutcome]:
        """Classify and apply one event; bad plays are skipped, not fatal."""
        self._ensure_open()
        if event.key in self._seen_keys:
            self.skip(event.key, "duplicate play key")
            return None
        self._seen_keys.add(event.key)
        if event.game_id != self.game_id:
            self.skip(event.key, f"belongs to game {event.game_id}")
            return None
        if {event.offense, event.defense} != set(self.state.teams):
            self.skip(event.key, f"teams {event.offense}/{event.defense} not in this game")
            return None
        try:
            outcome = classify(event)
            self.apply(outcome)
        except MalformedPlayError as e:
            self.skip(event.key, e.reason)
            return None
        return outcome

    def apply(self, outcome: PlayOutcome) -> GameState:
        self._ensure_open()
        s = self.state
        if outcome.offense not in s.teams or outcome.defense not in s.teams:
            raise InvalidGameStateError(
                f"game {s.game_id}: outcome {outcome.event_key} for teams not in {s.teams}"
            )
        if outcome.quarter < s.quarter:
            raise MalformedPlayError(
                outcome.event_key, f"quarter {outcome.quarter} after quarter {s.quarter}"
            )

        if s.phase is Phase.PRE_KICKOFF:
            s.phase = Phase.IN_PROGRESS
            s.possession = outcome.offense
        if outcome.quarter > s.quarter:
            logger.info("game %s: quarter %d -> %d", s.game_id, s.quarter, outcome.quarter)
            s.quarter = outcome.quarter
        if outcome.start_score is not None:
            self._check_score_snapshot(outcome)
        if s.possession != outcome.offense:
            logger.debug("game %s: play %s has %s on offense, tracker had %s",
                         s.game_id, outcome.event_key, outcome.offense, s.possession)
            s.possession = outcome.offense
            s.position = s.position.flipped() if s.position else None

        qp = self._quarter_points.setdefault(s.quarter, {t: 0 for t in s.teams})
        for delta in outcome.scores:
            s.score[delta.team] += delta.points
            qp[delta.team] += delta.points

        self._transition(outcome)

        if not 1 <= s.down <= MAX_DOWN or s.distance < MIN_YTG:
            raise InvalidGameStateError(
                f"game {s.game_id}: down {s.down} distance {s.distance} after {outcome.event_key}"
            )
        s.history.append(AppliedPlay(outcome, s.quarter, s.down, s.distance,
                                     s.possession, dict(s.score)))
        logger.debug("game %s: %s -> %s %d&%d score=%s", s.game_id, outcome.event_key,
                     s.possession, s.down, s.distance, s.score)
        return s

    def _transition(self, o: PlayOutcome) -> None:
        s = self.state
        before = s.position
        gain = o.net_gain

        if o.scores or o.turnover or o.new_possession is not None or (
            o.play_type not in NO_DOWN_PLAYS and not o.penalty and gain >= s.distance
        ):
            offense = o.new_possession or o.offense
            if o.scores:
                s.position = None  # kickoff follows
            else:
                pos = o.end or _advance(before, gain)
                if offense != o.offense:
                    pos = _advance(pos.flipped() if pos else None, o.return_yards)
                s.position = pos
            s.possession = offense
            s.down = 1
            s.distance = first_down_distance(s.position)
            return

        if o.penalty:
            yards = o.penalty_yards
            if o.penalty_on is PenaltyOn.OFFENSE:
                s.distance += yards
                s.position = o.end or _advance(before, -yards)
            elif o.penalty_on is PenaltyOn.DEFENSE:
                s.distance -= yards
                s.position = o.end or _advance(before, yards)
            if s.distance <= 0:
                s.down = 1
                s.distance = first_down_distance(s.position)
            return

        if o.play_type in NO_DOWN_PLAYS:
            return

        s.position = o.end or _advance(before, gain)
        s.down += 1
        s.distance = max(MIN_YTG, s.distance - gain)
        if s.down > MAX_DOWN:
            logger.info("game %s: turnover on downs by %s", s.game_id, s.possession)
            s.possession = s.opponent(s.possession)
            s.position = s.position.flipped() if s.position else None
            s.down = 1
            s.distance = first_down_distance(s.position)

    def _check_score_snapshot(self, o: PlayOutcome) -> None:
        seen = {t: o.start_score.get(t) for t in self.state.teams}
        if any(v is not None and v != self.state.score[t] for t, v in seen.items()):
            logger.warning("game %s: play %s starts at %s but tracker has %s",
                           self.game_id, o.event_key, seen, self.state.score)

    def finish(self) -> GameResult:
        if self._result is not None:
            return self._result
        s = self.state
        s.phase = Phase.FINAL
        self._result = GameResult(
            game_id=s.game_id,
            teams=s.teams,
            score=dict(s.score),
            history=tuple(s.history),
            skipped=tuple(self._skipped),
            quarter_points={q: dict(p) for q, p in sorted(self._quarter_points.items())},
        )
        logger.info("game %s final: %s (%d plays, %d skipped)",
                    s.game_id, s.score, len(s.history), len(self._skipped))
        return self._result


def track_game(game_id: str, teams: tuple[str, str],
               stream: Iterable[Union[PlayEvent, _EndOfGame]]) -> GameResult:
    """Run a whole game's event stream; finalizes at END_OF_GAME or when the stream ends."""
    tracker = GameTracker(game_id, teams)
    for item in stream:
        if item is END_OF_GAME:
            tracker.finish()
            continue
        try:
            tracker.feed(item)
        except GameAlreadyFinalized:
            logger.warning("game %s: rejecting play %s after end of game", game_id, item.key)
    return tracker.finish()
