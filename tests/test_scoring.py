from spotguess.models import Circle, Point, Round
from spotguess.services.game.scoring import circle_scores, compute_winners, is_hit


def make_round(normalized=False, radius=45):
    return Round(id=1, image_url='/img.jpg', question='Where?', duration=10, radius=radius,
                 target=Point(100, 100), is_normalized=normalized)


def test_is_hit_inside_and_outside():
    target = Point(100, 100)
    assert is_hit(Circle(120, 110), target, 45)
    assert not is_hit(Circle(300, 300), target, 45)


def test_is_hit_boundary_counts_as_hit():
    # 3-4-5 triangle: distance is exactly 50
    assert is_hit(Circle(130, 140), Point(100, 100), 50)
    assert not is_hit(Circle(130, 140), Point(100, 100), 49)


def test_is_hit_missing_inputs():
    assert not is_hit(None, Point(0, 0), 10)
    assert not is_hit(Circle(0, 0), None, 10)
    # Zero/absent radius only matches the exact point
    assert is_hit(Circle(5, 5), Point(5, 5), None)
    assert not is_hit(Circle(5, 6), Point(5, 5), None)


def test_compute_winners_pixel_round():
    rnd = make_round()
    rnd.team_circles = {
        'ta': Circle(120, 110),
        'tb': Circle(300, 300),
        'tc': Circle(100, 145),
    }
    assert compute_winners(rnd) == {'ta', 'tc'}


def test_compute_winners_skips_normalized_circles():
    rnd = make_round()
    rnd.team_circles = {'ta': Circle(100, 100, normalized=True)}
    assert compute_winners(rnd) == set()
    assert not circle_scores(rnd, rnd.team_circles['ta'])


def test_normalized_round_never_has_winners():
    rnd = make_round(normalized=True)
    rnd.target = Point(0.5, 0.5)
    rnd.team_circles = {'ta': Circle(0.5, 0.5, normalized=True), 'tb': Circle(0.5, 0.5)}
    assert compute_winners(rnd) == set()


def test_compute_winners_without_round():
    assert compute_winners(None) == set()
