import logging
import threading
import time
from typing import Callable, Dict, Optional

from gameshow.errors import NotHost, RoomNotFound
from gameshow.models import GameSettings, Player, Role, Session, generate_room_code


logger = logging.getLogger(__name__)


class SessionRegistry:
    """Room code -> Session table plus which room each connection sits in.

    Lock order: a session's lock may be held while taking the registry lock,
    never the other way round.
    """

    def __init__(self, hub, settings: Optional[GameSettings] = None, clock: Callable[[], float] = time.time):
        self.hub = hub
        self.settings = settings or GameSettings()
        self.clock = clock
        self._sessions: Dict[str, Session] = {}
        self._sid_rooms: Dict[str, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, code) -> Session:
        key = str(code or '').strip().upper()
        with self._lock:
            session = self._sessions.get(key)
        if session is None:
            raise RoomNotFound()
        return session

    def session_for(self, sid: str) -> Optional[Session]:
        with self._lock:
            code = self._sid_rooms.get(sid)
            return self._sessions.get(code) if code else None

    def create_session(self, host_sid: str) -> Session:
        self._detach(host_sid)
        with self._lock:
            code = generate_room_code(self._sessions, length=self.settings.room_code_length)
            session = Session(code=code, host_sid=host_sid, hub=self.hub, settings=self.settings, clock=self.clock)
            self._sessions[code] = session
            self._sid_rooms[host_sid] = code
        self.hub.enter_room(host_sid, code)
        logger.info(f"[room-create] room={code} host={host_sid}")

        with session.lock:
            session.broadcast('players', session.public_players())
        return session

    def join_session(self, code, sid: str, name=None, role=None) -> Session:
        session = self.get(code)
        if session.is_host(sid):
            role = Role.HOST
        else:
            role = Role.parse(role or Role.PLAYER.value)
            if role == Role.HOST:
                raise NotHost('This room already has a host')

        current = self.session_for(sid)
        if current is not None and current is not session:
            self._detach(sid)

        name = str(name or '').strip() or 'Player'
        with session.lock:
            existing = session.players.get(sid)
            if existing is not None:
                existing.name = name
                existing.role = role
            else:
                session.players[sid] = Player(name=name, role=role)
            with self._lock:
                self._sid_rooms[sid] = session.code
            self.hub.enter_room(sid, session.code)
            logger.info(f"[room-join] room={session.code} sid={sid} name={name} role={role.value}")
            session.broadcast('players', session.public_players())
        return session

    def remove_session(self, code: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.pop(code, None)
            if session is None:
                return None
            for sid in [s for s, c in self._sid_rooms.items() if c == code]:
                del self._sid_rooms[sid]
        with session.lock:
            if session.round is not None:
                session.round.cancel_ticker()
            session.round = None
        self.hub.close_room(code)
        logger.info(f"[room-remove] room={code}")
        return session

    def disconnect(self, sid: str) -> Optional[Session]:
        """Connection gone for good: tear down its room if it hosted one."""
        return self._detach(sid, leave_room=False)

    def _detach(self, sid: str, leave_room: bool = True) -> Optional[Session]:
        session = self.session_for(sid)
        if session is None:
            return None
        with session.lock:
            if session.is_host(sid):
                logger.info(f"[host-left] room={session.code}")
                session.broadcast('hostLeft', {'room': session.code})
                self.remove_session(session.code)
                return session
            session.players.pop(sid, None)
            with self._lock:
                self._sid_rooms.pop(sid, None)
            if leave_room:
                self.hub.leave_room(sid, session.code)
            logger.info(f"[player-left] room={session.code} sid={sid}")
            session.broadcast('players', session.public_players())
        return session
