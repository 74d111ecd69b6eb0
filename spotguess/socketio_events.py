from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from typing import Dict, Iterable

from spotguess import socketio
from spotguess.services.game.commands import EVENT_PARSERS, Disconnect, parse_command
from spotguess.services.game.errors import InvalidCommand
from spotguess.services.game.notifications import Notification

NAMESPACE = '/ws'

# sid -> team room the connection currently sits in
_sid_to_room: Dict[str, str] = {}


def get_session():
    return current_app.extensions['game_session']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def publish(notifications: Iterable[Notification], namespace: str = NAMESPACE) -> None:
    """Emit session notifications. Safe to call from background tasks."""
    for note in notifications:
        socketio.emit(note.event, note.payload, to=note.to, skip_sid=note.skip_sid, namespace=namespace)


def _sync_team_room(session, sid: str) -> None:
    player = session.registry.players.get(sid)
    wanted = player.team_id if player else None
    current = _sid_to_room.get(sid)
    if current == wanted:
        return
    if current:
        leave_room(current)
        _sid_to_room.pop(sid, None)
    if wanted:
        join_room(wanted)
        _sid_to_room[sid] = wanted


def handle_connect(auth=None):
    session = get_session()
    emit('state', session.state_payload())
    emit('turn:update', {'teamId': session.turns.current_team_id})


def handle_disconnect(*_args):
    sid = _get_sid()
    _sid_to_room.pop(sid, None)
    get_session().handle(Disconnect(sid=sid))


def _make_handler(event: str):
    def handler(data=None):
        sid = _get_sid()
        session = get_session()
        try:
            command = parse_command(event, data, sid)
        except InvalidCommand as exc:
            current_app.logger.info(f"[invalid] event={event} sid={sid} reason={exc.message}")
            emit('toast', {'message': exc.message})
            return
        session.handle(command)
        if event == 'player:join':
            _sync_team_room(session, sid)
    handler.__name__ = 'handle_' + event.replace(':', '_')
    return handler


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    for event in EVENT_PARSERS:
        socketio.on_event(event, _make_handler(event), namespace=NAMESPACE)
