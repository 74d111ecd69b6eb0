import pytest

from spotguess.models import COLORS
from spotguess.services.game.errors import CapacityError, TurnViolation
from spotguess.services.game.teams import TeamRegistry
from spotguess.services.game.turns import TurnSequencer


def test_team_lookup_is_case_insensitive():
    registry = TeamRegistry()
    red, created = registry.get_or_create_team('Red')
    assert created
    same, created = registry.get_or_create_team('rED')
    assert not created
    assert same is red
    assert len(registry.teams) == 1


def test_fifth_team_is_rejected_but_existing_name_still_works():
    registry = TeamRegistry()
    for name in ('A', 'B', 'C', 'D'):
        registry.get_or_create_team(name)
    with pytest.raises(CapacityError):
        registry.get_or_create_team('E')
    team, created = registry.get_or_create_team('a')
    assert not created and team.name == 'A'
    assert len(registry.teams) == 4


def test_colors_follow_creation_order():
    registry = TeamRegistry()
    teams = [registry.get_or_create_team(n)[0] for n in ('Zeta', 'Alpha', 'Mid')]
    assert [t.color_idx for t in teams] == [0, 1, 2]
    assert teams[1].color == COLORS[1]
    assert all(t.id.startswith('t') and len(t.id) == 7 for t in teams)


def test_third_player_is_rejected():
    registry = TeamRegistry()
    team, _ = registry.get_or_create_team('Blue')
    registry.register_player(team, 'sid1', 'Ann')
    registry.register_player(team, 'sid2', 'Ben')
    with pytest.raises(CapacityError):
        registry.register_player(team, 'sid3', 'Cid')
    assert set(registry.players) == {'sid1', 'sid2'}


def test_rejoin_does_not_count_against_own_slot():
    registry = TeamRegistry()
    team, _ = registry.get_or_create_team('Blue')
    registry.register_player(team, 'sid1', 'Ann')
    registry.register_player(team, 'sid2', 'Ben')
    player = registry.register_player(team, 'sid2', 'Benjamin')
    assert player.name == 'Benjamin'
    assert len(registry.members(team.id)) == 2


def test_unregister_keeps_team_and_points():
    registry = TeamRegistry()
    team, _ = registry.get_or_create_team('Blue')
    team.points = 7
    registry.register_player(team, 'sid1', 'Ann')
    assert registry.unregister_player('sid1').name == 'Ann'
    assert registry.unregister_player('sid1') is None
    assert registry.get(team.id).points == 7


def _sequencer(*names):
    registry = TeamRegistry()
    for name in names:
        registry.get_or_create_team(name)
    return registry, TurnSequencer(registry)


def test_turn_order_is_by_name_not_creation():
    registry, turns = _sequencer('Charlie', 'alpha', 'Bravo')
    names = [registry.get(tid).name for tid in turns.ordered_team_ids()]
    # case-sensitive: uppercase sorts before lowercase
    assert names == ['Bravo', 'Charlie', 'alpha']


def test_next_turn_cycles_back_to_start():
    registry, turns = _sequencer('A', 'B', 'C', 'D')
    ids = turns.ordered_team_ids()
    turns.set_turn(ids[2])
    for _ in range(len(ids)):
        assert turns.next_turn()
    assert turns.current_team_id == ids[2]


def test_prev_turn_wraps():
    registry, turns = _sequencer('A', 'B', 'C')
    ids = turns.ordered_team_ids()
    turns.set_turn(ids[0])
    turns.prev_turn()
    assert turns.current_team_id == ids[-1]


def test_step_without_current_defaults_to_first():
    registry, turns = _sequencer('B', 'A')
    assert turns.current_team_id is None
    assert turns.next_turn()
    assert registry.get(turns.current_team_id).name == 'A'
    turns.current_team_id = None
    assert turns.prev_turn()
    assert registry.get(turns.current_team_id).name == 'A'


def test_set_turn_unknown_team_is_noop():
    registry, turns = _sequencer('A')
    ids = turns.ordered_team_ids()
    turns.set_turn(ids[0])
    assert not turns.set_turn('tnope00')
    assert not turns.set_turn(None)
    assert turns.current_team_id == ids[0]


def test_no_teams_no_turn():
    _, turns = _sequencer()
    assert not turns.next_turn()
    assert not turns.prev_turn()


def test_gating():
    _, turns = _sequencer('A', 'B')
    a, b = turns.ordered_team_ids()
    # no current team: everybody may act
    assert turns.is_allowed(a) and turns.is_allowed(b)
    turns.set_turn(a)
    turns.require_turn(a)
    with pytest.raises(TurnViolation):
        turns.require_turn(b)
