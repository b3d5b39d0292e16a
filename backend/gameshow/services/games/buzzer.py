import logging

from gameshow.errors import AlreadyBuzzed, BuzzersLocked, LockedOut, NotPlayer
from gameshow.models import BuzzerHold, Role, Round, Session


logger = logging.getLogger(__name__)

FULL_RESET = 'full'
SOFT_RESET = 'soft'
ADVANCE_AND_LOCK = 'advance'


def clear_hold(r: Round) -> None:
    r.buzzer = None
    r.last_buzzed = None


def unlock_all(session: Session) -> None:
    for p in session.players.values():
        p.buzzer_locked = False


def buzz(session: Session, sid: str) -> BuzzerHold:
    """First successful buzz wins; everyone after it is refused until a reset."""
    r = session.require_round()
    if r.buzzer_locked:
        raise BuzzersLocked()
    player = session.players.get(sid)
    if player is None or player.role != Role.PLAYER:
        raise NotPlayer()
    if player.buzzer_locked:
        raise LockedOut()
    if r.buzzer is not None:
        raise AlreadyBuzzed()

    r.buzzer = BuzzerHold(sid=sid, name=player.name, ts=session.clock())
    r.last_buzzed = sid
    logger.info(f"[buzz] room={session.code} sid={sid} name={player.name}")

    session.broadcast('buzzed', r.buzzer.to_dict())
    return r.buzzer


def reset_buzzer(session: Session, sid: str, reset_all: bool = True, preserve_locks: bool = False) -> str:
    """Clear the current holder. Returns which reset mode ran.

    full (reset_all, not preserve_locks): also lifts the global lock and every
        player's lockout
    soft (preserve_locks, not reset_all): lockouts stay as they are, players
        are re-sent their current status
    advance (any other combination): the last holder is locked out so the
        next buzz goes to someone else
    """
    session.require_host(sid)
    r = session.require_round()

    if reset_all and not preserve_locks:
        mode = FULL_RESET
        clear_hold(r)
        r.buzzer_locked = False
        unlock_all(session)
        for psid in session.player_sids():
            session.hub.emit('buzzerStatus', {'disabled': False}, to=psid)
    elif preserve_locks and not reset_all:
        mode = SOFT_RESET
        clear_hold(r)
        for psid in session.player_sids():
            locked_out = session.players[psid].buzzer_locked
            session.hub.emit('buzzerStatus', {'disabled': locked_out}, to=psid)
    else:
        mode = ADVANCE_AND_LOCK
        last_sid = r.last_buzzed
        locked = session.players.get(last_sid) if last_sid else None
        if locked is not None:
            locked.buzzer_locked = True
            session.hub.emit('buzzerStatus', {'disabled': True}, to=last_sid)
            session.broadcast('buzzerLockedOut', {'sid': last_sid, 'name': locked.name})
        clear_hold(r)

    logger.info(f"[buzzer-reset] room={session.code} mode={mode}")
    session.broadcast('buzzerReset')
    return mode


def lock_buzzers(session: Session, sid: str, locked: bool = True) -> None:
    session.require_host(sid)
    r = session.require_round()
    r.buzzer_locked = bool(locked)
    session.broadcast('buzzersLocked', {'locked': r.buzzer_locked})
