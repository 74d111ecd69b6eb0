"""Commands accepted by the game session.

Every inbound Socket.IO event maps to exactly one command class here;
``parse_command`` validates and coerces the raw payload. Timer commands
are produced by the session itself and carry the id of the round they
were scheduled for.
"""
from dataclasses import dataclass
import math
from typing import Any, Callable, Dict, Optional

from spotguess.models import Point
from .errors import InvalidCommand


@dataclass(frozen=True)
class PlayerJoin:
    sid: str
    name: str
    team_name: str


@dataclass(frozen=True)
class PlayerHello:
    sid: str


@dataclass(frozen=True)
class AdminHello:
    sid: str


@dataclass(frozen=True)
class SetCircle:
    sid: str
    x: float
    y: float
    normalized: bool = False


@dataclass(frozen=True)
class Confirm:
    sid: str


@dataclass(frozen=True)
class Unconfirm:
    sid: str


@dataclass(frozen=True)
class Disconnect:
    sid: str


@dataclass(frozen=True)
class SetTurn:
    team_id: Optional[str]
    sid: Optional[str] = None


@dataclass(frozen=True)
class NextTurn:
    sid: Optional[str] = None


@dataclass(frozen=True)
class PrevTurn:
    sid: Optional[str] = None


@dataclass(frozen=True)
class StartRound:
    image_url: Optional[str] = None
    duration: Optional[int] = None
    radius: Optional[int] = None
    target: Optional[Point] = None
    target_normalized: bool = False
    question: Optional[str] = None
    sid: Optional[str] = None


@dataclass(frozen=True)
class NewRound(StartRound):
    """Separate admin event with the same effect as StartRound."""


@dataclass(frozen=True)
class RevealTeamCircles:
    sid: Optional[str] = None


@dataclass(frozen=True)
class HideTeamCircles:
    sid: Optional[str] = None


@dataclass(frozen=True)
class ClearTeamCircles:
    sid: Optional[str] = None


@dataclass(frozen=True)
class RevealArea:
    auto_next: bool = False
    delay_ms: Optional[int] = None
    sid: Optional[str] = None


@dataclass(frozen=True)
class ShowFull:
    sid: Optional[str] = None


@dataclass(frozen=True)
class AdjustPoints:
    team_id: Optional[str]
    delta: int
    sid: Optional[str] = None


@dataclass(frozen=True)
class CountdownTick:
    round_id: int


@dataclass(frozen=True)
class ShowFullDue:
    round_id: int


@dataclass(frozen=True)
class RequestNextDue:
    round_id: int


def _as_float(value, field: str) -> float:
    if isinstance(value, bool):
        raise InvalidCommand(f'{field} must be a number')
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidCommand(f'{field} must be a number')
    # NaN and infinity cannot travel as JSON to the browser
    if not math.isfinite(number):
        raise InvalidCommand(f'{field} must be a finite number')
    return number


def _as_int(value, field: str, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == '':
        return default
    return int(_as_float(value, field))


def _as_team_id(value) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise InvalidCommand('teamId must be a string')


def _as_text(value) -> str:
    return value.strip() if isinstance(value, str) else ''


def _parse_target(value):
    if not isinstance(value, dict) or value.get('x') is None:
        return None, False
    point = Point(_as_float(value.get('x'), 'target.x'), _as_float(value.get('y'), 'target.y'))
    return point, bool(value.get('normalized'))


def _parse_join(data, sid):
    name = _as_text(data.get('name'))
    team_name = _as_text(data.get('teamName'))
    if not name or not team_name:
        raise InvalidCommand('Please enter your name and a team name.')
    return PlayerJoin(sid=sid, name=name, team_name=team_name)


def _parse_set_circle(data, sid):
    return SetCircle(
        sid=sid,
        x=_as_float(data.get('x'), 'x'),
        y=_as_float(data.get('y'), 'y'),
        normalized=bool(data.get('normalized')),
    )


def _parse_round(cls):
    def parse(data, sid):
        target, normalized = _parse_target(data.get('target'))
        image_url = data.get('imageUrl')
        question = data.get('question')
        return cls(
            image_url=image_url if isinstance(image_url, str) and image_url else None,
            duration=_as_int(data.get('duration'), 'duration'),
            radius=_as_int(data.get('radius'), 'radius'),
            target=target,
            target_normalized=normalized,
            question=question if isinstance(question, str) else None,
            sid=sid,
        )
    return parse


def _parse_reveal_area(data, sid):
    return RevealArea(
        auto_next=bool(data.get('autoNext')),
        delay_ms=_as_int(data.get('delayMs'), 'delayMs'),
        sid=sid,
    )


def _parse_adjust_points(data, sid):
    return AdjustPoints(
        team_id=_as_team_id(data.get('teamId')),
        delta=_as_int(data.get('delta'), 'delta', default=0),
        sid=sid,
    )


EVENT_PARSERS: Dict[str, Callable[[Dict[str, Any], str], Any]] = {
    'player:join': _parse_join,
    'player:hello': lambda data, sid: PlayerHello(sid=sid),
    'admin:hello': lambda data, sid: AdminHello(sid=sid),
    'team:setCircle': _parse_set_circle,
    'team:confirm': lambda data, sid: Confirm(sid=sid),
    'team:unconfirm': lambda data, sid: Unconfirm(sid=sid),
    'admin:setTurn': lambda data, sid: SetTurn(team_id=_as_team_id(data.get('teamId')), sid=sid),
    'admin:nextTurn': lambda data, sid: NextTurn(sid=sid),
    'admin:prevTurn': lambda data, sid: PrevTurn(sid=sid),
    'admin:startRound': _parse_round(StartRound),
    'admin:newRound': _parse_round(NewRound),
    'admin:revealTeamCircles': lambda data, sid: RevealTeamCircles(sid=sid),
    'admin:hideTeamCircles': lambda data, sid: HideTeamCircles(sid=sid),
    'admin:clearTeamCircles': lambda data, sid: ClearTeamCircles(sid=sid),
    'admin:revealArea': _parse_reveal_area,
    'admin:showFull': lambda data, sid: ShowFull(sid=sid),
    'admin:adjustPoints': _parse_adjust_points,
}


def parse_command(event: str, data, sid: str):
    parser = EVENT_PARSERS.get(event)
    if parser is None:
        raise InvalidCommand(f'Unknown event {event}')
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidCommand(f'{event} expects an object payload')
    return parser(data, sid)
