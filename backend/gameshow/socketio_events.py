from functools import wraps
from flask import current_app, request
from flask_socketio import emit
from gameshow import socketio
from gameshow.errors import GameError, RoomNotFound
from gameshow.services.games import buzzer, questions, scoring
from typing import Any, Dict, Optional


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _registry():
    return current_app.extensions['gameshow_registry']


def _current_session():
    session = _registry().session_for(_get_sid())
    if session is None:
        raise RoomNotFound('You are not in a room')
    return session


def _payload(data) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


def acknowledged(handler):
    """Turn a handler's return value (or GameError) into the client ack."""
    @wraps(handler)
    def wrapper(*args):
        try:
            result = handler(*args)
        except GameError as exc:
            current_app.logger.info(f"[rejected] event={handler.__name__} sid={_get_sid()} reason={exc.reason}")
            return exc.to_ack()
        ack = {'ok': True}
        if result:
            ack.update(result)
        return ack
    return wrapper


def handle_connect(auth=None):
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(reason=None):
    # Host leaving ends the room for everyone; a player just drops off the roster
    _registry().disconnect(_get_sid())


def handle_ping(data=None):
    emit('pong', data or {})


@acknowledged
def create_room(data=None):
    session = _registry().create_session(_get_sid())
    return {'room': session.code}


@acknowledged
def join_room(data=None):
    data = _payload(data)
    _registry().join_session(data.get('room'), _get_sid(), data.get('name'), data.get('role'))
    return {'sid': _get_sid()}


@acknowledged
def start_round(data=None):
    data = _payload(data)
    session = _current_session()
    with session.lock:
        questions.start_round(session, _get_sid(), data.get('roundType'), data.get('duration'))


@acknowledged
def start_question(data=None):
    session = _current_session()
    with session.lock:
        questions.start_question(session, _get_sid(), _payload(data).get('question'))


@acknowledged
def buzz(data=None):
    session = _current_session()
    with session.lock:
        hold = buzzer.buzz(session, _get_sid())
    return {'buzzer': hold.to_dict()}


@acknowledged
def reset_buzzer(data=None):
    data = _payload(data)
    session = _current_session()
    with session.lock:
        buzzer.reset_buzzer(
            session,
            _get_sid(),
            reset_all=bool(data.get('all', True)),
            preserve_locks=bool(data.get('preserveLocks', False)),
        )


@acknowledged
def lock_buzzers(data=None):
    session = _current_session()
    with session.lock:
        buzzer.lock_buzzers(session, _get_sid(), bool(_payload(data).get('locked', True)))


@acknowledged
def submit_answer(data=None):
    session = _current_session()
    with session.lock:
        questions.submit_answer(session, _get_sid(), _payload(data).get('answer'))


@acknowledged
def reveal_answer(data=None):
    session = _current_session()
    with session.lock:
        questions.reveal_answer(session, _get_sid())


@acknowledged
def confirm_points(data=None):
    session = _current_session()
    with session.lock:
        scoring.confirm_points(session, _get_sid(), _payload(data))


@acknowledged
def end_round(data=None):
    session = _current_session()
    with session.lock:
        scoring.end_round(session, _get_sid())


@acknowledged
def show_full_leaderboard(data=None):
    session = _current_session()
    with session.lock:
        scoring.show_full_leaderboard(session, _get_sid())


@acknowledged
def end_show(data=None):
    session = _current_session()
    with session.lock:
        scoring.end_show(session, _get_sid())


@acknowledged
def get_questions(data=None):
    data = _payload(data)
    bank = current_app.extensions['question_bank']
    return {'questions': bank.get_questions(data.get('type'), data.get('count'))}


@acknowledged
def reveal_next_step(data=None):
    session = _current_session()
    with session.lock:
        index = questions.reveal_next_step(session, _get_sid())
    return {'revealedStepIndex': index}


@acknowledged
def reveal_sequence_answer(data=None):
    session = _current_session()
    with session.lock:
        questions.reveal_sequence_answer(session, _get_sid())


ACTIONS = {
    'createRoom': create_room,
    'joinRoom': join_room,
    'startRound': start_round,
    'startQuestion': start_question,
    'buzz': buzz,
    'resetBuzzer': reset_buzzer,
    'lockBuzzers': lock_buzzers,
    'submitAnswer': submit_answer,
    'revealAnswer': reveal_answer,
    'confirmPoints': confirm_points,
    'endRound': end_round,
    'showFullLeaderboard': show_full_leaderboard,
    'endShow': end_show,
    'getQuestions': get_questions,
    'revealNextStep': reveal_next_step,
    'revealSequenceAnswer': reveal_sequence_answer,
}


def register_socketio_handlers(namespace: Optional[str] = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
    for event, handler in ACTIONS.items():
        socketio.on_event(event, handler, namespace=namespace)
