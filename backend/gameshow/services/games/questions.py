"""Round and question lifecycle.

A round is a run of questions of one type. Each question goes through one of
three variants:

- multiple-choice: timed answer window with a countdown ticker
- buzzer: untimed, players buzz in and answer out loud
- sequence: clues are revealed one at a time by the host

All functions expect the caller to hold ``session.lock``.
"""
import logging
from typing import Any, Dict, Optional

from gameshow.errors import (
    EarlyReveal,
    InvalidQuestionType,
    NoActiveQuestion,
    NoMoreSteps,
    NotPlayer,
    NotSequenceQuestion,
    TooLate,
)
from gameshow.models import (
    IN_ROUND,
    QUESTION_TYPE_BUZZER,
    Role,
    Round,
    RoundState,
    Session,
    question_kind,
)
from .answers import answers_match
from .buzzer import clear_hold, unlock_all
from .scheduler import Ticker


logger = logging.getLogger(__name__)

# Keys only the host may see
_SECRET_KEYS = ('answer', 'correctAnswer')


def _as_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _player_view(question: Dict[str, Any], index: int, *hide: str) -> Dict[str, Any]:
    view = {k: v for k, v in question.items() if k not in _SECRET_KEYS and k not in hide}
    view['index'] = index
    return view


def start_round(session: Session, sid: str, round_type: Optional[str], duration=None) -> Round:
    session.require_host(sid)
    if session.round is not None:
        session.round.cancel_ticker()

    now = session.clock()
    duration = _as_int(duration, 0) or session.settings.default_round_duration_sec
    session.round = Round(
        type=round_type,
        started_at=now,
        duration=duration,
        ends_at=now + duration,
    )
    unlock_all(session)
    session.stage = IN_ROUND
    logger.info(f"[round-start] room={session.code} type={round_type} duration={duration}s")

    session.broadcast('roundStarted', {'round': session.round.to_dict()})
    return session.round


def start_question(session: Session, sid: str, question) -> str:
    """Start ``question`` in the current round. Returns the variant started."""
    session.require_host(sid)
    r = session.require_round()
    if not isinstance(question, dict):
        raise InvalidQuestionType('Question must be an object')

    kind = question_kind(question)
    if kind == 'sequence':
        steps = question.get('steps')
        if not isinstance(steps, list) or not steps:
            raise InvalidQuestionType('Sequence questions need at least one step')

    r.cancel_ticker()
    r.current_question = question
    r.correct_answer = question.get('answer')
    r.answers = {}
    r.current_question_scores = {}
    r.all_answered = False
    r.state = RoundState.QUESTION_ACTIVE

    if kind == QUESTION_TYPE_BUZZER:
        _start_buzzer_question(session, r, question)
    elif kind == 'sequence':
        _start_sequence_question(session, r, question)
    else:
        _start_multiple_choice_question(session, r, question)

    logger.info(f"[question-start] room={session.code} kind={kind} index={r.question_index}")
    return kind


def _start_multiple_choice_question(session: Session, r: Round, question: Dict[str, Any]) -> None:
    choices = question.get('choices')
    r.choices = list(choices) if isinstance(choices, (list, tuple)) else None
    r.buzzer = None
    r.buzzer_locked = False
    r.ends_at = session.clock() + session.settings.answer_window_sec

    session.send_host('hostQuestionData', {**question, 'index': r.question_index})
    session.send_audience('questionStarted', {
        'question': _player_view(question, r.question_index),
        'endsAt': r.ends_at,
        'roundTotals': dict(r.round_scores),
    })

    r.ticker = Ticker(
        session.hub,
        r.ends_at,
        on_tick=lambda remaining: session.send_audience('tick', {'remaining': remaining}),
        on_expire=lambda: _time_up(session, r),
        lock=session.lock,
        interval=session.settings.tick_interval_sec,
        clock=session.clock,
        label=f"room={session.code} question={r.question_index}",
    )
    if session.settings.ticker_autostart:
        r.ticker.start()


def _start_buzzer_question(session: Session, r: Round, question: Dict[str, Any]) -> None:
    r.choices = None
    r.ends_at = None
    clear_hold(r)
    r.buzzer_locked = False
    unlock_all(session)

    session.broadcast('buzzerReset')
    session.send_audience('questionStarted', {
        'question': _player_view(question, r.question_index),
        'endsAt': None,
        'roundTotals': dict(r.round_scores),
    })
    session.send_host('hostBuzzerQuestionStarted', {
        'question': {**question, 'index': r.question_index, 'correctAnswer': question.get('answer')},
        'roundTotals': dict(r.round_scores),
    })


def _start_sequence_question(session: Session, r: Round, question: Dict[str, Any]) -> None:
    steps = question['steps']
    r.choices = None
    r.ends_at = None
    r.revealed_step_index = 0
    clear_hold(r)
    unlock_all(session)

    session.send_audience('sequenceStarted', {
        'question': _player_view(question, r.question_index, 'steps', 'points'),
        'visibleSteps': [steps[0]],
        'revealedStepIndex': 0,
        'roundTotals': dict(r.round_scores),
    })
    session.send_host('hostSequenceQuestionStarted', {
        'question': {**question, 'index': r.question_index},
        'steps': steps,
        'correctAnswer': question.get('answer'),
        'points': question.get('points') or list(session.settings.sequence_points),
    })


def _time_up(session: Session, r: Round) -> None:
    if session.round is not r:
        return
    r.state = RoundState.TIME_UP
    session.send_audience('roundEnded', {'reason': 'timeUp'})


def _require_sequence(session: Session, sid: str):
    session.require_host(sid)
    r = session.require_round()
    q = r.current_question
    if q is None:
        raise NoActiveQuestion()
    if question_kind(q) != 'sequence':
        raise NotSequenceQuestion()
    return r, q


def reveal_next_step(session: Session, sid: str) -> int:
    r, q = _require_sequence(session, sid)
    steps = q['steps']
    # The last clue stays hidden until the host moves on to the answer
    if r.revealed_step_index >= len(steps) - 1:
        raise NoMoreSteps()

    r.revealed_step_index += 1
    session.broadcast('sequenceStepRevealed', {
        'index': r.revealed_step_index,
        'step': steps[r.revealed_step_index],
        'visibleSteps': steps[:r.revealed_step_index + 1],
    })
    return r.revealed_step_index


def reveal_sequence_answer(session: Session, sid: str) -> None:
    r, q = _require_sequence(session, sid)
    r.state = RoundState.ANSWER_REVEALED
    session.broadcast('sequenceAnswerRevealed', {
        'title': q.get('title'),
        'steps': q['steps'],
        'answer': q.get('answer'),
        'questionIndex': r.question_index,
    })


def submit_answer(session: Session, sid: str, answer: Any) -> int:
    """Record a player's answer. Returns the provisional points for it."""
    r = session.require_round()
    if r.current_question is None:
        raise NoActiveQuestion()
    player = session.players.get(sid)
    if player is None or player.role != Role.PLAYER:
        raise NotPlayer()
    if r.ends_at is not None and session.clock() > r.ends_at:
        raise TooLate()

    r.answers[sid] = answer
    try:
        correct = answers_match(answer, r.correct_answer, r.choices)
    except (TypeError, ValueError):
        correct = False
    points = session.settings.correct_answer_points if correct else 0
    r.current_question_scores[sid] = points

    if not r.all_answered and all(p in r.answers for p in session.player_sids()):
        r.all_answered = True
        r.cancel_ticker()
        logger.info(f"[all-answered] room={session.code} index={r.question_index} count={len(r.answers)}")
        session.broadcast('allAnswered', {'answerCount': len(r.answers)})

    session.broadcast('playerAnswered', {'id': sid, 'name': player.name})
    return points


def reveal_answer(session: Session, sid: str) -> None:
    session.require_host(sid)
    r = session.require_round()
    if r.current_question is None:
        raise NoActiveQuestion()

    is_buzzer = question_kind(r.current_question) == QUESTION_TYPE_BUZZER
    # Untimed questions have no window to wait for
    time_expired = (r.ends_at or 0) <= session.clock()
    if not (r.all_answered or is_buzzer or time_expired):
        raise EarlyReveal()

    r.state = RoundState.ANSWER_REVEALED
    session.broadcast('answerRevealed', {
        'answer': r.correct_answer,
        'defaultQuestionScores': dict(r.current_question_scores),
        'roundTotals': dict(r.round_scores),
        'questionIndex': r.question_index,
    })
