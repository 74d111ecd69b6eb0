import logging
from collections import defaultdict
from typing import Callable, Dict, List, Set, Tuple


class CancelToken:
    __slots__ = ('cancelled',)

    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class RoundScheduler:
    """Run delayed callbacks on Socket.IO background tasks, grouped by round.

    Every task owns a cancel token that is checked once its sleep ends.
    Cancelling a round flips the tokens of all its pending tasks, so a
    superseded round can never be touched by a late timer.
    """

    def __init__(self, socketio, logger=None):
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)
        self._tokens: Dict[int, Set[CancelToken]] = defaultdict(set)

    def schedule(self, round_id: int, delay: float, callback: Callable[[], None], kind: str = 'timer') -> CancelToken:
        token = CancelToken()
        self._tokens[round_id].add(token)
        self.logger.debug(f"[timer-set] round={round_id} kind={kind} delay={delay:.3f}s")

        def _worker():
            self.socketio.sleep(delay)
            pending = self._tokens.get(round_id)
            if pending is not None:
                pending.discard(token)
                if not pending:
                    self._tokens.pop(round_id, None)
            if token.cancelled:
                self.logger.debug(f"[timer-abort] round={round_id} kind={kind} cancelled")
                return
            callback()

        self.socketio.start_background_task(_worker)
        return token

    def cancel_round(self, round_id: int) -> int:
        tokens = self._tokens.pop(round_id, set())
        for token in tokens:
            token.cancel()
        if tokens:
            self.logger.info(f"[timer-cancel] round={round_id} cancelled={len(tokens)}")
        return len(tokens)

    def pending(self, round_id: int) -> int:
        return len(self._tokens.get(round_id, ()))


class ManualScheduler:
    """Scheduler used in TESTING: collects callbacks and runs them on demand."""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(__name__)
        self.queue: List[Tuple[int, float, str, CancelToken, Callable[[], None]]] = []

    def schedule(self, round_id: int, delay: float, callback: Callable[[], None], kind: str = 'timer') -> CancelToken:
        token = CancelToken()
        self.queue.append((round_id, delay, kind, token, callback))
        return token

    def cancel_round(self, round_id: int) -> int:
        count = 0
        for rid, _delay, _kind, token, _cb in self.queue:
            if rid == round_id and not token.cancelled:
                token.cancel()
                count += 1
        return count

    def pending(self, round_id=None, kind=None) -> list:
        return [
            (rid, delay, k) for rid, delay, k, token, _cb in self.queue
            if not token.cancelled
            and (round_id is None or rid == round_id)
            and (kind is None or k == kind)
        ]

    def run_next(self, kind=None) -> bool:
        """Run the earliest-scheduled pending callback. Returns False when idle."""
        for i, (rid, delay, k, token, callback) in enumerate(self.queue):
            if token.cancelled or (kind is not None and k != kind):
                continue
            del self.queue[i]
            self.logger.debug(f"[timer-fire] round={rid} kind={k} delay={delay:.3f}s")
            callback()
            return True
        return False

    def run_all(self, limit: int = 1000) -> int:
        ran = 0
        while ran < limit and self.run_next():
            ran += 1
        return ran
