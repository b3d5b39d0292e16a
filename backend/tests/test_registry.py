import pytest

from gameshow.errors import NotHost, RoomNotFound
from gameshow.models import GameSettings, Role, generate_room_code
from gameshow.services.games import questions, scoring
from gameshow.services.games.registry import SessionRegistry


def test_create_session_registers_host(registry, hub):
    session = registry.create_session('host')
    assert len(session.code) == 4
    assert registry.get(session.code) is session
    assert registry.session_for('host') is session
    assert session.players == {}
    assert 'host' in hub.rooms[session.code]
    assert hub.events('players', to=session.code) == [[]]


def test_room_codes_avoid_live_codes(monkeypatch):
    picks = iter(['AAAA', 'AAAA', 'BBBB'])
    monkeypatch.setattr('gameshow.models.random.choices', lambda alphabet, k: list(next(picks)))
    assert generate_room_code({'AAAA': object()}) == 'BBBB'


def test_room_code_length_follows_settings(hub):
    registry = SessionRegistry(hub, GameSettings(room_code_length=6))
    assert len(registry.create_session('host').code) == 6


def test_get_unknown_room(registry):
    with pytest.raises(RoomNotFound):
        registry.get('NOPE')
    with pytest.raises(RoomNotFound):
        registry.join_session('NOPE', 'ann', 'Ann')
    assert registry.session_for('ann') is None


def test_join_broadcasts_public_roster(registry, hub):
    session = registry.create_session('host')
    registry.join_session(session.code, 'ann', 'Ann')
    registry.join_session(session.code, 'screen', 'Screen', 'presenter')
    registry.join_session(session.code, 'bob', '  Bob ', 'nonsense')

    assert session.players['screen'].role == Role.PRESENTER
    assert session.players['bob'].role == Role.PLAYER
    assert hub.events('players', to=session.code)[-1] == [
        {'sid': 'ann', 'name': 'Ann', 'score': 0},
        {'sid': 'bob', 'name': 'Bob', 'score': 0},
    ]


def test_rejoin_keeps_score_and_position(registry, show):
    show.players['ann'].score = 25
    registry.join_session(show.code.lower(), 'ann', 'Annie')
    assert show.players['ann'].score == 25
    assert show.players['ann'].name == 'Annie'
    assert list(show.players) == ['ann', 'bob']


def test_only_one_host(registry, show):
    with pytest.raises(NotHost):
        registry.join_session(show.code, 'eve', 'Eve', 'host')
    assert 'eve' not in show.players


def test_player_disconnect_leaves_roster(registry, show, hub):
    hub.clear()
    registry.disconnect('bob')
    assert list(show.players) == ['ann']
    assert registry.session_for('bob') is None
    assert hub.events('players', to=show.code) == [[{'sid': 'ann', 'name': 'Ann', 'score': 0}]]
    assert registry.get(show.code) is show


def test_host_disconnect_tears_down_room(registry, show, hub):
    questions.start_round(show, 'host', 'general', 30)
    registry.disconnect('host')

    assert hub.events('hostLeft', to=show.code) == [{'room': show.code}]
    assert hub.closed == [show.code]
    assert len(registry) == 0
    assert show.round is None
    for sid in ('host', 'ann', 'bob'):
        assert registry.session_for(sid) is None


def test_disconnect_unknown_connection(registry):
    assert registry.disconnect('nobody') is None


def test_joining_another_room_moves_the_player(registry, show, hub):
    other = registry.create_session('host2')
    registry.join_session(other.code, 'bob', 'Bob')

    assert 'bob' not in show.players
    assert 'bob' in other.players
    assert 'bob' not in hub.rooms[show.code]
    assert registry.session_for('bob') is other


def test_host_creating_again_closes_old_room(registry, show):
    old_code = show.code
    fresh = registry.create_session('host')
    assert fresh.code != old_code
    assert len(registry) == 1
    assert registry.get(fresh.code) is fresh
    with pytest.raises(RoomNotFound):
        registry.get(old_code)


def test_scores_survive_between_rounds(show):
    questions.start_round(show, 'host', 'general', 30)
    scoring.confirm_points(show, 'host', {'ann': 10})
    scoring.end_round(show, 'host')
    assert show.players['ann'].score == 10
    assert show.to_dict()['players'][0] == {'sid': 'ann', 'name': 'Ann', 'score': 10}
