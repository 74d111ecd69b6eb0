from typing import List, Optional

from .errors import TurnViolation
from .teams import TeamRegistry


class TurnSequencer:
    """Tracks which team may currently place and confirm a guess.

    Teams rotate in order of their names (case-sensitive), so the order
    does not depend on who joined first.
    """

    def __init__(self, registry: TeamRegistry):
        self.registry = registry
        self.current_team_id: Optional[str] = None

    def ordered_team_ids(self) -> List[str]:
        teams = sorted(self.registry.teams.values(), key=lambda t: (t.name, t.id))
        return [t.id for t in teams]

    def set_turn(self, team_id) -> bool:
        if not team_id or team_id not in self.registry.teams:
            return False
        self.current_team_id = team_id
        return True

    def _step(self, offset: int) -> bool:
        ids = self.ordered_team_ids()
        if not ids:
            return False
        if self.current_team_id not in ids:
            return self.set_turn(ids[0])
        idx = ids.index(self.current_team_id)
        return self.set_turn(ids[(idx + offset) % len(ids)])

    def next_turn(self) -> bool:
        return self._step(1)

    def prev_turn(self) -> bool:
        return self._step(-1)

    def is_allowed(self, team_id: str) -> bool:
        # Without a current team there is no gating at all
        return self.current_team_id is None or self.current_team_id == team_id

    def require_turn(self, team_id: str) -> None:
        if not self.is_allowed(team_id):
            raise TurnViolation("It is not your team's turn.")
