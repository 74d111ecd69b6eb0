import itertools
import logging
import threading
from typing import Callable, List, Optional

from spotguess.models import (
    PHASE_COUNTDOWN,
    PHASE_DARK,
    PHASE_REVEAL,
    Circle,
    Player,
    Point,
    Round,
)
from .commands import (
    AdjustPoints,
    AdminHello,
    ClearTeamCircles,
    Confirm,
    CountdownTick,
    Disconnect,
    HideTeamCircles,
    NewRound,
    NextTurn,
    PlayerHello,
    PlayerJoin,
    PrevTurn,
    RequestNextDue,
    RevealArea,
    RevealTeamCircles,
    SetCircle,
    SetTurn,
    ShowFull,
    ShowFullDue,
    StartRound,
    Unconfirm,
)
from .errors import GameError, StateViolation
from .history import HistoryLog
from .notifications import Notification, broadcast, direct, to_teammates, toast
from .scheduler import ManualScheduler
from .scoring import AUTO_BONUS_POINTS, circle_scores, compute_winners
from .teams import TeamRegistry
from .turns import TurnSequencer

MIN_DURATION_SEC = 3
MIN_RADIUS_PX = 5
MAX_RADIUS_PX = 200


class GameSession:
    """The one live game of the process.

    Owns teams, turn order, the current round and its history. Every
    change goes through :meth:`dispatch`, which applies a single command
    under the session lock and returns the notifications to send out.
    :meth:`handle` additionally hands the result to ``publish`` before
    releasing the lock; socket handlers and timers both go through it.
    """

    def __init__(self, config=None, scheduler=None, publish: Optional[Callable[[List[Notification]], None]] = None,
                 logger=None):
        self.config = config if config is not None else {}
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.publish = publish
        self.logger = logger or logging.getLogger(__name__)
        self.registry = TeamRegistry()
        self.turns = TurnSequencer(self.registry)
        self.history = HistoryLog()
        self.round: Optional[Round] = None
        self._round_ids = itertools.count(1)
        self.lock = threading.RLock()
        self._handlers = {
            PlayerJoin: self._player_join,
            PlayerHello: self._player_hello,
            AdminHello: self._admin_hello,
            SetCircle: self._set_circle,
            Confirm: self._confirm,
            Unconfirm: self._unconfirm,
            Disconnect: self._disconnect,
            SetTurn: lambda cmd: self._change_turn(self.turns.set_turn(cmd.team_id)),
            NextTurn: lambda cmd: self._change_turn(self.turns.next_turn()),
            PrevTurn: lambda cmd: self._change_turn(self.turns.prev_turn()),
            StartRound: self._start_round,
            NewRound: self._start_round,
            RevealTeamCircles: self._reveal_team_circles,
            HideTeamCircles: self._hide_team_circles,
            ClearTeamCircles: self._clear_team_circles,
            RevealArea: self._reveal_area,
            ShowFull: self._show_full,
            AdjustPoints: self._adjust_points,
            CountdownTick: self._countdown_tick,
            ShowFullDue: self._show_full_due,
            RequestNextDue: self._request_next_due,
        }

    # ---- entry point ----

    def dispatch(self, command) -> List[Notification]:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f'Unsupported command {type(command).__name__}')
        with self.lock:
            try:
                return handler(command)
            except GameError as exc:
                sid = getattr(command, 'sid', None)
                self.logger.info(
                    f"[rejected] command={type(command).__name__} sid={sid} reason={exc.message or type(exc).__name__}"
                )
                if exc.silent or not sid:
                    return []
                return [toast(sid, exc.message)]

    # ---- payloads ----

    def state_payload(self):
        payload = self.registry.to_dict()
        payload['turnTeamId'] = self.turns.current_team_id
        return payload

    def snapshot(self):
        with self.lock:
            payload = self.state_payload()
            payload['round'] = self.round.to_config() if self.round else None
            payload['phase'] = self.round.phase if self.round else None
            return payload

    def _state(self) -> Notification:
        return broadcast('state', self.state_payload())

    def _turn_update(self) -> Notification:
        return broadcast('turn:update', {'teamId': self.turns.current_team_id})

    def _history(self) -> Notification:
        return broadcast('admin:history', self.history.to_list())

    # ---- helpers ----

    def _acting_player(self, sid) -> Player:
        player = self.registry.players.get(sid)
        if player is None:
            raise StateViolation('Join a team first.', silent=True)
        return player

    def _require_round(self) -> Round:
        if self.round is None:
            raise StateViolation('No round is running.', silent=True)
        return self.round

    def _is_current(self, round_id: int, phase: Optional[str] = None) -> bool:
        round_ = self.round
        if round_ is None or round_.id != round_id:
            return False
        return phase is None or round_.phase == phase

    def _schedule(self, round_: Round, delay: float, command, kind: str) -> None:
        self.scheduler.schedule(round_.id, delay, lambda: self.handle(command), kind=kind)

    def handle(self, command) -> List[Notification]:
        """Dispatch and publish while still holding the lock.

        Emission order then matches state order, so a late timer can never
        announce an old round after its successor went out.
        """
        with self.lock:
            notes = self.dispatch(command)
            if notes and self.publish is not None:
                self.publish(notes)
            return notes

    # ---- players ----

    def _player_join(self, cmd: PlayerJoin):
        team, created = self.registry.get_or_create_team(cmd.team_name)
        if created:
            self.logger.info(f"[team-created] team={team.id} name={team.name!r} color={team.color_idx}")
            if self.turns.current_team_id is None:
                self.turns.set_turn(team.id)
        player = self.registry.register_player(team, cmd.sid, cmd.name)
        self.logger.info(f"[join] sid={cmd.sid} name={player.name!r} team={team.id}")
        return [direct(cmd.sid, 'player:accepted', player.to_dict()), self._state()]

    def _disconnect(self, cmd: Disconnect):
        player = self.registry.unregister_player(cmd.sid)
        if player is None:
            return []
        self.logger.info(f"[leave] sid={cmd.sid} team={player.team_id}")
        return [self._state()]

    def _player_hello(self, cmd: PlayerHello):
        sid = cmd.sid
        notes = [
            direct(sid, 'state', self.state_payload()),
            direct(sid, 'turn:update', {'teamId': self.turns.current_team_id}),
        ]
        round_ = self.round
        if round_ is None:
            return notes
        notes.append(direct(sid, 'round:config', round_.to_config()))
        if round_.phase == PHASE_COUNTDOWN:
            notes.append(direct(sid, 'round:tick', {'secondsRemaining': round_.seconds_remaining}))
        else:
            notes.append(direct(sid, 'round:dark'))
        if round_.phase == PHASE_REVEAL:
            notes.append(direct(sid, 'round:revealArea', self._area_payload(round_)))
        if round_.reveal_clicks:
            notes.append(direct(sid, 'round:revealTeamCircles', {'reveal': True, 'teamCircles': round_.circles_dict()}))
        return notes

    def _admin_hello(self, cmd: AdminHello):
        sid = cmd.sid
        notes = [
            direct(sid, 'state', self.state_payload()),
            direct(sid, 'turn:update', {'teamId': self.turns.current_team_id}),
            direct(sid, 'admin:history', self.history.to_list()),
        ]
        if self.round is not None:
            notes.append(direct(sid, 'round:config', self.round.to_config()))
        return notes

    # ---- turns ----

    def _change_turn(self, changed: bool):
        if not changed:
            return []
        self.logger.info(f"[turn] team={self.turns.current_team_id}")
        return [self._turn_update(), self._state()]

    # ---- team guesses ----

    def _set_circle(self, cmd: SetCircle):
        player = self._acting_player(cmd.sid)
        round_ = self._require_round()
        self.turns.require_turn(player.team_id)
        if round_.is_locked(player.team_id):
            raise StateViolation('Your team has already locked in its answer.')
        circle = Circle(cmd.x, cmd.y, cmd.normalized)
        round_.team_circles[player.team_id] = circle
        return [
            to_teammates(player.team_id, cmd.sid, 'team:circlePreview', circle.to_dict()),
            broadcast('admin:teamCircleSet', {'teamId': player.team_id}),
        ]

    def _confirm(self, cmd: Confirm):
        player = self._acting_player(cmd.sid)
        round_ = self._require_round()
        self.turns.require_turn(player.team_id)
        circle = round_.team_circles.get(player.team_id)
        if circle is None:
            raise StateViolation('Please place your position first.')
        if round_.is_locked(player.team_id):
            return []
        round_.team_locked[player.team_id] = True
        notes = [broadcast('admin:teamLocked', {'teamId': player.team_id})]
        team = self.registry.get(player.team_id)
        if team is not None and circle_scores(round_, circle):
            team.points += AUTO_BONUS_POINTS
            self.logger.info(f"[auto-bonus] round={round_.id} team={team.id} delta={AUTO_BONUS_POINTS}")
            notes.append(self._state())
            notes.append(broadcast('score:autoBonus', {'teamId': team.id, 'delta': AUTO_BONUS_POINTS}))
        return notes

    def _unconfirm(self, cmd: Unconfirm):
        player = self._acting_player(cmd.sid)
        round_ = self._require_round()
        self.turns.require_turn(player.team_id)
        if not round_.is_locked(player.team_id):
            return []
        # Points awarded on confirm stay with the team
        round_.team_locked[player.team_id] = False
        return [broadcast('admin:teamUnlocked', {'teamId': player.team_id})]

    # ---- round lifecycle ----

    def _build_round(self, cmd: StartRound) -> Round:
        cfg = self.config
        duration = max(MIN_DURATION_SEC, cmd.duration or int(cfg.get('DEFAULT_ROUND_DURATION_SEC', 15)))
        radius = max(MIN_RADIUS_PX, min(MAX_RADIUS_PX, cmd.radius or int(cfg.get('DEFAULT_RADIUS_PX', 45))))
        if cmd.target is not None:
            target, normalized = cmd.target, cmd.target_normalized
        else:
            target = Point(float(cfg.get('DEFAULT_TARGET_X', 100)), float(cfg.get('DEFAULT_TARGET_Y', 100)))
            normalized = False
        return Round(
            id=next(self._round_ids),
            image_url=cmd.image_url or cfg.get('DEFAULT_IMAGE_URL', '/images/sample.jpg'),
            question=cmd.question or '',
            duration=duration,
            radius=radius,
            target=target,
            is_normalized=normalized,
            seconds_remaining=duration,
        )

    def _start_round(self, cmd: StartRound):
        notes = []
        previous = self.round
        if previous is not None:
            self.scheduler.cancel_round(previous.id)
            # Superseded rounds are closed without hit evaluation
            self.history.record(previous, ())
            self.logger.info(f"[round-closed] round={previous.id} winners=[]")
            notes.append(self._history())
        round_ = self._build_round(cmd)
        self.round = round_
        self.logger.info(
            f"[round-start] round={round_.id} duration={round_.duration} radius={round_.radius} "
            f"normalized={round_.is_normalized}"
        )
        notes.append(broadcast('round:config', round_.to_config()))
        notes.append(broadcast('round:tick', {'secondsRemaining': round_.seconds_remaining}))
        self._schedule(round_, 1.0, CountdownTick(round_.id), 'tick')
        return notes

    def _countdown_tick(self, cmd: CountdownTick):
        if not self._is_current(cmd.round_id, PHASE_COUNTDOWN):
            self.logger.info(f"[timer-abort] round={cmd.round_id} kind=tick stale")
            return []
        round_ = self.round
        round_.seconds_remaining -= 1
        notes = [broadcast('round:tick', {'secondsRemaining': round_.seconds_remaining})]
        if round_.seconds_remaining <= 0:
            round_.phase = PHASE_DARK
            self.logger.info(f"[round-dark] round={round_.id}")
            notes.append(broadcast('round:dark'))
        else:
            self._schedule(round_, 1.0, CountdownTick(round_.id), 'tick')
        return notes

    def _reveal_team_circles(self, cmd: RevealTeamCircles):
        round_ = self._require_round()
        round_.reveal_clicks = True
        return [broadcast('round:revealTeamCircles', {'reveal': True, 'teamCircles': round_.circles_dict()})]

    def _hide_team_circles(self, cmd: HideTeamCircles):
        round_ = self._require_round()
        round_.reveal_clicks = False
        return [broadcast('round:revealTeamCircles', {'reveal': False})]

    def _clear_team_circles(self, cmd: ClearTeamCircles):
        round_ = self._require_round()
        round_.team_circles = {}
        round_.team_locked = {}
        return [broadcast('round:clearTeamCircles')]

    @staticmethod
    def _area_payload(round_: Round):
        return {'target': round_.target.to_dict(), 'radius': round_.radius, 'isNormalized': round_.is_normalized}

    def _reveal_area(self, cmd: RevealArea):
        round_ = self._require_round()
        round_.phase = PHASE_REVEAL
        notes = [broadcast('round:revealArea', self._area_payload(round_))]
        winners = compute_winners(round_)
        self.history.record(round_, winners)
        self.logger.info(f"[round-reveal] round={round_.id} winners={sorted(winners)}")
        notes.append(self._history())
        if cmd.auto_next:
            cfg = self.config
            delay_ms = max(0, cmd.delay_ms or int(cfg.get('AUTO_NEXT_DEFAULT_DELAY_MS', 3000)))
            show_full_ms = min(delay_ms, int(cfg.get('SHOW_FULL_MAX_DELAY_MS', 5000)))
            request_next_ms = (
                max(delay_ms, int(cfg.get('REQUEST_NEXT_MIN_DELAY_MS', 1500)))
                + int(cfg.get('REQUEST_NEXT_BUFFER_MS', 2000))
            )
            self._schedule(round_, show_full_ms / 1000.0, ShowFullDue(round_.id), 'show-full')
            self._schedule(round_, request_next_ms / 1000.0, RequestNextDue(round_.id), 'request-next')
        return notes

    def _show_full(self, cmd: ShowFull):
        self._require_round()
        return [broadcast('round:showFull')]

    def _show_full_due(self, cmd: ShowFullDue):
        if not self._is_current(cmd.round_id):
            return []
        return [broadcast('round:showFull')]

    def _request_next_due(self, cmd: RequestNextDue):
        if not self._is_current(cmd.round_id):
            return []
        return [broadcast('admin:requestNext')]

    # ---- scores ----

    def _adjust_points(self, cmd: AdjustPoints):
        team = self.registry.get(cmd.team_id) if cmd.team_id else None
        if team is None:
            raise StateViolation(f'Unknown team {cmd.team_id}', silent=True)
        team.points += cmd.delta
        self.logger.info(f"[points] team={team.id} delta={cmd.delta} total={team.points}")
        return [self._state()]
