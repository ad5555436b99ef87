
from playstats.events import FieldPosition, PlayEvent
from playstats.features.vocab import FieldSide, PlayType

HOME, AWAY = "Tigers", "Eagles"


def own(y):
    return FieldPosition(FieldSide.OWN, y)


def opp(y):
    return FieldPosition(FieldSide.OPP, y)


def make_event(key="p1", play_type=PlayType.RUN, tags=(), offense=HOME, defense=AWAY,
               game_id="g1", quarter=1, down=1, ytg=10, **kw):
    return PlayEvent(key=key, game_id=game_id, quarter=quarter, down=down, yards_to_go=ytg,
                     offense=offense, defense=defense, play_type=play_type,
                     tags=tuple(tags), **kw)
