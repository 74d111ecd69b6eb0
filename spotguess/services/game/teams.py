from typing import Dict, List, Optional, Tuple

from spotguess.models import COLORS, Player, Team, find_team_by_name, generate_team_id
from .errors import CapacityError

MAX_TEAMS = 4
MAX_PLAYERS_PER_TEAM = 2


class TeamRegistry:
    """Teams and connected players.

    Teams are never removed: a team keeps its points after every player
    has disconnected.
    """

    def __init__(self):
        self.teams: Dict[str, Team] = {}
        self.players: Dict[str, Player] = {}

    def get(self, team_id: str) -> Optional[Team]:
        return self.teams.get(team_id)

    def get_or_create_team(self, name: str) -> Tuple[Team, bool]:
        existing = find_team_by_name(self.teams, name)
        if existing:
            return existing, False
        if len(self.teams) >= MAX_TEAMS:
            raise CapacityError(f'There are already {MAX_TEAMS} teams, please pick an existing team.')
        team = Team(
            id=generate_team_id(self.teams),
            name=name,
            color_idx=len(self.teams) % len(COLORS),
        )
        self.teams[team.id] = team
        return team, True

    def members(self, team_id: str) -> List[Player]:
        return [p for p in self.players.values() if p.team_id == team_id]

    def register_player(self, team: Team, player_id: str, name: str) -> Player:
        # A connection re-joining does not count against its own slot
        others = [p for p in self.members(team.id) if p.id != player_id]
        if len(others) >= MAX_PLAYERS_PER_TEAM:
            raise CapacityError(
                f'Team "{team.name}" is full (max. {MAX_PLAYERS_PER_TEAM} players). '
                'Pick another team or create a new one.'
            )
        player = Player(id=player_id, name=name, team_id=team.id, team_name=team.name)
        self.players[player_id] = player
        return player

    def unregister_player(self, player_id: str) -> Optional[Player]:
        return self.players.pop(player_id, None)

    def to_dict(self):
        return {
            'teams': {tid: t.to_dict() for tid, t in self.teams.items()},
            'players': {pid: p.to_dict() for pid, p in self.players.items()},
        }
