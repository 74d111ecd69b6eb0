from dataclasses import dataclass, field
from typing import Dict, List, Optional
import random
import string
import time

COLORS = ['#4da3ff', '#ff4d6d', '#22c55e', '#eab308']

PHASE_COUNTDOWN = 'countdown'
PHASE_DARK = 'dark'
PHASE_REVEAL = 'reveal'


def generate_team_id(existing, length=6):
    """Generate a unique, short team id such as ``t3k9x0a``."""
    while True:
        team_id = 't' + ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))
        if team_id not in existing:
            return team_id


@dataclass
class Team:
    id: str
    name: str
    points: int = 0
    color_idx: int = 0

    @property
    def color(self) -> str:
        return COLORS[self.color_idx % len(COLORS)]

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'points': self.points,
            'colorIdx': self.color_idx,
            'color': self.color,
        }


@dataclass
class Player:
    id: str
    name: str
    team_id: str
    team_name: str

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'teamId': self.team_id,
            'teamName': self.team_name,
        }


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def to_dict(self):
        return {'x': self.x, 'y': self.y}


@dataclass(frozen=True)
class Circle:
    """A team's shared guess on the image."""
    x: float
    y: float
    normalized: bool = False

    def to_dict(self):
        return {'x': self.x, 'y': self.y, 'normalized': self.normalized}


@dataclass
class Round:
    id: int
    image_url: str
    question: str
    duration: int
    radius: int
    target: Point
    is_normalized: bool
    phase: str = PHASE_COUNTDOWN
    seconds_remaining: int = 0
    team_circles: Dict[str, Circle] = field(default_factory=dict)
    team_locked: Dict[str, bool] = field(default_factory=dict)
    reveal_clicks: bool = False

    def is_locked(self, team_id: str) -> bool:
        return bool(self.team_locked.get(team_id))

    def circles_dict(self):
        return {tid: c.to_dict() for tid, c in self.team_circles.items()}

    def to_config(self):
        return {
            'imageUrl': self.image_url,
            'duration': self.duration,
            'radius': self.radius,
            'question': self.question,
            'target': self.target.to_dict(),
            'isNormalized': self.is_normalized,
        }


@dataclass(frozen=True)
class HistoryEntry:
    ts: int
    question: str
    image_url: str
    winners: frozenset
    team_circles: Dict[str, Circle]
    target: Point
    radius: int

    @classmethod
    def from_round(cls, round_: Round, winners) -> 'HistoryEntry':
        return cls(
            ts=int(time.time() * 1000),
            question=round_.question,
            image_url=round_.image_url,
            winners=frozenset(winners),
            team_circles=dict(round_.team_circles),
            target=round_.target,
            radius=round_.radius,
        )

    def to_dict(self):
        return {
            'ts': self.ts,
            'question': self.question,
            'imageUrl': self.image_url,
            'winners': sorted(self.winners),
            'teamCircles': {tid: c.to_dict() for tid, c in self.team_circles.items()},
            'target': self.target.to_dict(),
            'radius': self.radius,
        }


def serialize_history(entries: List[HistoryEntry]) -> List[dict]:
    return [e.to_dict() for e in entries]


def find_team_by_name(teams: Dict[str, Team], name: str) -> Optional[Team]:
    wanted = name.lower()
    for team in teams.values():
        if team.name.lower() == wanted:
            return team
    return None
