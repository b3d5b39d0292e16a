import pytest

from gameshow import create_app

from conftest import NAMESPACE, TestConfig


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health_counts_rooms(client, sio_factory):
    assert client.get('/api/health').get_json() == {'ok': True, 'rooms': 0}
    sio_factory().emit('createRoom', callback=True, namespace=NAMESPACE)
    assert client.get('/api/health').get_json() == {'ok': True, 'rooms': 1}


def test_room_state(client, sio_factory):
    code = sio_factory().emit('createRoom', callback=True, namespace=NAMESPACE)['room']
    joined = sio_factory().emit('joinRoom', {'room': code, 'name': 'Alice'}, callback=True, namespace=NAMESPACE)

    res = client.get(f'/api/rooms/{code.lower()}')
    assert res.status_code == 200
    state = res.get_json()
    assert state['room'] == code
    assert state['stage'] == 'lobby'
    assert state['round'] is None
    assert state['players'] == [{'sid': joined['sid'], 'name': 'Alice', 'score': 0}]


def test_unknown_room_is_404(client):
    res = client.get('/api/rooms/ZZZZ')
    assert res.status_code == 404
    assert res.get_json()['reason'] == 'roomNotFound'


def test_questions(client):
    res = client.get('/api/questions/general?count=2')
    assert res.status_code == 200
    data = res.get_json()
    assert data['ok'] is True
    assert len(data['questions']) == 2
    assert all(q['type'] == 'general' for q in data['questions'])


def test_questions_unknown_type(client):
    res = client.get('/api/questions/history')
    assert res.status_code == 400
    assert res.get_json() == {'error': 'Invalid type', 'reason': 'invalidType'}


@pytest.fixture()
def broken_app(tmp_path):
    class Config(TestConfig):
        QUESTION_BANK_PATH = str(tmp_path / 'missing.json')

    return create_app(Config)


def test_questions_unavailable(broken_app):
    res = broken_app.test_client().get('/api/questions/general')
    assert res.status_code == 503
    assert res.get_json()['reason'] == 'questionBankUnavailable'


def test_questions_check_command(flask_app):
    result = flask_app.test_cli_runner().invoke(args=['questions-check'])
    assert result.exit_code == 0
    assert 'general: 3' in result.output
    assert 'buzzer: 1' in result.output


def test_questions_check_command_fails_without_bank(broken_app):
    result = broken_app.test_cli_runner().invoke(args=['questions-check'])
    assert result.exit_code != 0
    assert 'Question bank unavailable' in result.output
