import pytest

from brainbrawl.services.games.exceptions import TeamError
from brainbrawl.services.games.roster import Roster
from brainbrawl.services.games.settings import GameSettings


@pytest.fixture()
def roster():
    return Roster(GameSettings(
        players_per_team=4,
        cpu_player_names=('BotAlpha', 'BotBeta', 'RoboOne'),
        cpu_team_names=('CPU Crushers', 'AI Avengers'),
    ))


def _add(roster, *ids):
    for pid in ids:
        roster.add_player(pid, pid.upper())


def test_add_player_starts_clean(roster):
    player = roster.add_player('s1', 'Alice')
    assert player.score == 0
    assert player.team_id is None
    assert not player.is_cpu


def test_create_team_seats_creator(roster):
    _add(roster, 'a')
    team = roster.create_team('a', 'Reds')
    assert team.members == ['a']
    assert team.blitz_available
    assert roster.get_player('a').team_id == team.id


def test_create_team_unknown_player_is_silent(roster):
    assert roster.create_team('ghost', 'Reds') is None
    assert roster.teams == {}


def test_create_team_twice_rejected(roster):
    _add(roster, 'a')
    roster.create_team('a', 'Reds')
    with pytest.raises(TeamError):
        roster.create_team('a', 'Blues')


def test_third_team_rejected(roster):
    _add(roster, 'a', 'b', 'c')
    roster.create_team('a', 'Reds')
    roster.create_team('b', 'Blues')
    with pytest.raises(TeamError):
        roster.create_team('c', 'Greens')
    assert len(roster.teams) == 2


def test_join_team_capacity_counts_humans(roster):
    _add(roster, 'a', 'b', 'c', 'd', 'e')
    team = roster.create_team('a', 'Reds')
    for pid in ('b', 'c', 'd'):
        roster.join_team(pid, team.id)
    with pytest.raises(TeamError):
        roster.join_team('e', team.id)
    assert len(team.members) == 4


def test_join_unknown_team_is_silent(roster):
    _add(roster, 'a')
    assert roster.join_team('a', 'nope') is None
    assert roster.get_player('a').team_id is None


def test_join_cpu_team_rejected(roster):
    _add(roster, 'a')
    roster.fill_with_cpu()
    cpu_team = next(t for t in roster.teams.values() if t.is_cpu and 'a' not in t.members)
    roster.get_player('a').team_id = None
    with pytest.raises(TeamError):
        roster.join_team('a', cpu_team.id)


def test_remove_player_deletes_empty_human_team(roster):
    _add(roster, 'a')
    team = roster.create_team('a', 'Reds')
    assert roster.remove_player('a')
    assert team.id not in roster.teams
    assert 'a' not in roster.players


def test_remove_unknown_or_cpu_is_noop(roster):
    _add(roster, 'a')
    roster.create_team('a', 'Reds')
    roster.fill_with_cpu()
    cpu = next(roster.cpu_players())
    assert not roster.remove_player('ghost')
    assert not roster.remove_player(cpu.id)
    assert cpu.id in roster.players


def test_fill_pads_two_human_teams(roster):
    _add(roster, 'a', 'b')
    roster.create_team('a', 'Reds')
    roster.create_team('b', 'Blues')
    teams = roster.fill_with_cpu()
    assert len(teams) == 2
    assert all(len(t.members) == 4 for t in teams)
    cpu_names = [p.name for p in roster.cpu_players()]
    assert cpu_names[:4] == ['BotAlpha', 'BotBeta', 'RoboOne', 'BotAlpha 2']
    assert len(set(cpu_names)) == len(cpu_names)


def test_fill_synthesizes_missing_teams(roster):
    teams = roster.fill_with_cpu()
    assert [t.name for t in teams] == ['CPU Crushers', 'AI Avengers']
    assert all(t.is_cpu for t in teams)
    assert sum(1 for _ in roster.cpu_players()) == 8


def test_fill_seats_teamless_humans(roster):
    _add(roster, 'a', 'b', 'c')
    roster.create_team('a', 'Reds')
    roster.fill_with_cpu()
    for pid in ('b', 'c'):
        assert roster.get_player(pid).team_id is not None
    assert all(len(t.members) == 4 for t in roster.teams.values())


def test_reset_removes_cpus_and_restores_blitz(roster):
    _add(roster, 'a', 'b')
    red = roster.create_team('a', 'Reds')
    blue = roster.create_team('b', 'Blues')
    roster.fill_with_cpu()
    red.blitz_available = False
    red.score = 40
    roster.get_player('a').score = 40
    roster.reset()
    assert list(roster.cpu_players()) == []
    assert red.members == ['a'] and blue.members == ['b']
    assert red.blitz_available and blue.blitz_available
    assert red.score == 0 and roster.get_player('a').score == 0


def test_reset_drops_cpu_only_teams(roster):
    roster.fill_with_cpu()
    roster.reset()
    assert roster.teams == {}
    assert roster.players == {}


def test_reset_hands_synthesized_team_to_its_humans(roster):
    _add(roster, 'a', 'b', 'c')
    roster.create_team('a', 'Reds')
    roster.fill_with_cpu()
    crushers = roster.get_team(roster.get_player('b').team_id)
    assert crushers.is_cpu
    roster.reset()
    assert not crushers.is_cpu
    assert roster.human_members(crushers)
    _add(roster, 'd')
    with pytest.raises(TeamError):
        roster.create_team('d', 'Blues')
    assert roster.join_team('d', crushers.id) is crushers
    assert len(roster.teams) == 2


def test_team_cap_counts_synthesized_teams(roster):
    _add(roster, 'a')
    roster.create_team('a', 'Reds')
    roster.fill_with_cpu()
    _add(roster, 'b')
    with pytest.raises(TeamError):
        roster.create_team('b', 'Blues')
