import logging
import math
from typing import Any, Dict, List

from gameshow.models import ENDED, LEADERBOARD, ROUND_ENDED, RoundState, Session
from .buzzer import clear_hold


logger = logging.getLogger(__name__)


def coerce_points(raw: Any) -> int:
    """Turn a client supplied delta into an int; anything unusable counts as 0."""
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(value):
        return 0
    return int(round(value))


def confirm_points(session: Session, sid: str, scores_by_sid) -> Dict[str, int]:
    """Apply host-confirmed deltas and close the current question.

    Each delta is added to both the round total and the player's cumulative
    score. Deltas accumulate, so the same confirmation must not be sent twice.
    Returns the deltas actually applied, keyed by sid.
    """
    session.require_host(sid)
    r = session.require_round()
    if not isinstance(scores_by_sid, dict):
        scores_by_sid = {}

    applied: Dict[str, int] = {}
    for psid, raw in scores_by_sid.items():
        if psid not in session.players:
            logger.warning(f"[confirm-skip] room={session.code} unknown sid={psid}")
            continue
        applied[psid] = coerce_points(raw)

    # Every delta is parsed before any score changes
    for psid, pts in applied.items():
        r.round_scores[psid] = r.round_scores.get(psid, 0) + pts
        session.players[psid].score += pts

    r.question_index += 1
    r.current_question = None
    r.current_question_scores = {}
    r.answers = {}
    clear_hold(r)
    r.buzzer_locked = False
    r.cancel_ticker()
    r.state = RoundState.SCORES_CONFIRMED
    logger.info(f"[confirm] room={session.code} applied={applied} next_index={r.question_index}")

    session.broadcast('scoreUpdate', session.public_players())
    return applied


def round_leaderboard(session: Session) -> List[Dict[str, Any]]:
    """Players ranked by this round's points; ties keep join order."""
    r = session.require_round()
    rows = [
        {'sid': psid, 'name': session.players[psid].name, 'score': r.round_scores.get(psid, 0)}
        for psid in session.player_sids()
    ]
    return sorted(rows, key=lambda row: -row['score'])


def full_scoreboard(session: Session) -> List[Dict[str, Any]]:
    return sorted(session.public_players(), key=lambda row: -row['score'])


def end_round(session: Session, sid: str) -> Dict[str, int]:
    session.require_host(sid)
    r = session.require_round()
    leaderboard = round_leaderboard(session)
    round_scores = dict(r.round_scores)

    session.broadcast('roundScoresFinal', {'roundScores': round_scores})
    session.broadcast('roundLeaderboard', {
        'roundScores': round_scores,
        'players': leaderboard,
    })

    r.cancel_ticker()
    session.round = None
    session.stage = ROUND_ENDED
    logger.info(f"[round-end] room={session.code} questions={r.question_index}")
    return round_scores


def show_full_leaderboard(session: Session, sid: str) -> List[Dict[str, Any]]:
    session.require_host(sid)
    board = full_scoreboard(session)
    session.stage = LEADERBOARD
    session.broadcast('finalScoreboard', {'players': board})
    return board


def end_show(session: Session, sid: str) -> List[Dict[str, Any]]:
    session.require_host(sid)
    if session.round is not None:
        session.round.cancel_ticker()
        session.round = None
    board = full_scoreboard(session)
    session.stage = ENDED
    logger.info(f"[show-end] room={session.code}")
    session.broadcast('finalScoreboard', {'players': board})
    return board
