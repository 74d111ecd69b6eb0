from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Notification:
    """An outbound Socket.IO event.

    ``to`` is None for a broadcast, a connection sid for a private message,
    or a team room. ``skip_sid`` excludes the sender from a room message.
    """
    event: str
    payload: Any = field(default_factory=dict)
    to: Optional[str] = None
    skip_sid: Optional[str] = None

    @property
    def is_broadcast(self) -> bool:
        return self.to is None


def broadcast(event: str, payload: Any = None) -> Notification:
    return Notification(event, {} if payload is None else payload)


def direct(sid: str, event: str, payload: Any = None) -> Notification:
    return Notification(event, {} if payload is None else payload, to=sid)


def to_teammates(team_id: str, sender_sid: str, event: str, payload: Dict[str, Any]) -> Notification:
    return Notification(event, payload, to=team_id, skip_sid=sender_sid)


def toast(sid: str, message: str) -> Notification:
    return direct(sid, 'toast', {'message': message})
