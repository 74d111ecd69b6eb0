import math
from typing import Optional, Set

from spotguess.models import Circle, Point, Round

AUTO_BONUS_POINTS = 5


def is_hit(circle: Optional[Circle], target: Optional[Point], radius) -> bool:
    """True when the circle centre lies within ``radius`` pixels of the target.

    A distance equal to the radius counts as a hit.
    """
    if circle is None or target is None:
        return False
    return math.hypot(circle.x - target.x, circle.y - target.y) <= (radius or 0)


def circle_scores(round_: Round, circle: Optional[Circle]) -> bool:
    """Whether a circle earns points automatically in this round.

    Normalized rounds never score automatically: the server has no pixel
    scale to compare fractions against, so the admin awards points by hand.
    """
    if round_.is_normalized or circle is None or circle.normalized:
        return False
    return is_hit(circle, round_.target, round_.radius)


def compute_winners(round_: Optional[Round]) -> Set[str]:
    """Apply hit detection to every recorded team circle of the round."""
    if round_ is None:
        return set()
    return {tid for tid, circle in round_.team_circles.items() if circle_scores(round_, circle)}
