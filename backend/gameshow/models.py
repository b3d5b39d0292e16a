from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import random
import string
import threading
import time

from gameshow.errors import NoActiveRound, NotHost


class Role(str, Enum):
    HOST = 'host'
    PLAYER = 'player'
    PRESENTER = 'presenter'

    @classmethod
    def parse(cls, value) -> 'Role':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.PLAYER


class RoundState(str, Enum):
    ROUND_ACTIVE = 'roundActive'
    QUESTION_ACTIVE = 'questionActive'
    ANSWER_REVEALED = 'answerRevealed'
    TIME_UP = 'timeUp'
    SCORES_CONFIRMED = 'scoresConfirmed'


# Session stages: lobby -> round -> roundEnded -> (round ...) -> leaderboard -> ended
LOBBY = 'lobby'
IN_ROUND = 'round'
ROUND_ENDED = 'roundEnded'
LEADERBOARD = 'leaderboard'
ENDED = 'ended'

QUESTION_TYPE_BUZZER = 'buzzer'
QUESTION_TYPE_MULTIPLE_CHOICE = 'multipleChoice'
SEQUENCE_TYPES = ('sequence', 'links')


def question_kind(question: Dict[str, Any]) -> str:
    """Map a question's ``type`` onto one of the three engine variants."""
    qtype = question.get('type')
    if qtype == QUESTION_TYPE_BUZZER:
        return QUESTION_TYPE_BUZZER
    if qtype in SEQUENCE_TYPES:
        return 'sequence'
    return QUESTION_TYPE_MULTIPLE_CHOICE


def _int_list(value, default):
    if value is None:
        return list(default)
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(',') if p.strip()]
    else:
        parts = list(value)
    try:
        return [int(p) for p in parts] or list(default)
    except (TypeError, ValueError):
        return list(default)


@dataclass
class GameSettings:
    answer_window_sec: int = 30
    default_round_duration_sec: int = 15
    tick_interval_sec: float = 0.5
    correct_answer_points: int = 10
    sequence_points: List[int] = field(default_factory=lambda: [50, 30, 20, 10])
    room_code_length: int = 4
    # Spawn ticker loops on the hub; off for deterministic tests
    ticker_autostart: bool = True

    @classmethod
    def from_config(cls, config) -> 'GameSettings':
        defaults = cls()
        testing = bool(config.get('TESTING'))
        return cls(
            answer_window_sec=int(config.get('ANSWER_WINDOW_SEC', defaults.answer_window_sec)),
            default_round_duration_sec=int(config.get('DEFAULT_ROUND_DURATION_SEC', defaults.default_round_duration_sec)),
            tick_interval_sec=float(config.get('TICK_INTERVAL_SEC', defaults.tick_interval_sec)),
            correct_answer_points=int(config.get('CORRECT_ANSWER_POINTS', defaults.correct_answer_points)),
            sequence_points=_int_list(config.get('SEQUENCE_POINTS'), defaults.sequence_points),
            room_code_length=int(config.get('ROOM_CODE_LENGTH', defaults.room_code_length)),
            ticker_autostart=not testing or bool(config.get('ENABLE_TICKER_IN_TESTS')),
        )


@dataclass
class Player:
    name: str
    role: Role = Role.PLAYER
    score: int = 0
    buzzer_locked: bool = False

    def to_dict(self, sid: str) -> Dict[str, Any]:
        return {
            'sid': sid,
            'name': self.name,
            'score': self.score,
        }


@dataclass
class BuzzerHold:
    sid: str
    name: str
    ts: float

    def to_dict(self) -> Dict[str, Any]:
        return {'sid': self.sid, 'name': self.name, 'ts': self.ts}


@dataclass
class Round:
    type: Optional[str]
    started_at: float
    duration: int
    ends_at: Optional[float] = None
    question_index: int = 0
    round_scores: Dict[str, int] = field(default_factory=dict)
    state: RoundState = RoundState.ROUND_ACTIVE
    buzzer_locked: bool = False
    buzzer: Optional[BuzzerHold] = None
    last_buzzed: Optional[str] = None
    current_question: Optional[Dict[str, Any]] = None
    choices: Optional[List[Any]] = None
    correct_answer: Any = None
    answers: Dict[str, Any] = field(default_factory=dict)
    current_question_scores: Dict[str, int] = field(default_factory=dict)
    all_answered: bool = False
    revealed_step_index: int = 0
    # Owned countdown for the current timed question, see services.games.scheduler
    ticker: Any = None

    def cancel_ticker(self) -> None:
        if self.ticker is not None:
            self.ticker.cancel()
            self.ticker = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'questionIndex': self.question_index,
            'roundScores': dict(self.round_scores),
            'startedAt': self.started_at,
            'endsAt': self.ends_at,
            'duration': self.duration,
            'state': self.state.value,
            'buzzerLocked': self.buzzer_locked,
            'buzzer': self.buzzer.to_dict() if self.buzzer else None,
            'revealedStepIndex': self.revealed_step_index,
            'allAnswered': self.all_answered,
            'answerCount': len(self.answers),
        }


@dataclass
class Session:
    code: str
    host_sid: str
    players: Dict[str, Player] = field(default_factory=dict)
    round: Optional[Round] = None
    stage: str = LOBBY
    hub: Any = field(default=None, repr=False, compare=False)
    settings: GameSettings = field(default_factory=GameSettings, repr=False, compare=False)
    clock: Callable[[], float] = field(default=time.time, repr=False, compare=False)
    # Held for the whole of every action on this session, and by its ticker
    lock: Any = field(default_factory=threading.RLock, repr=False, compare=False)

    def is_host(self, sid: str) -> bool:
        return sid == self.host_sid

    def require_host(self, sid: str) -> None:
        if not self.is_host(sid):
            raise NotHost()

    def require_round(self) -> Round:
        if self.round is None:
            raise NoActiveRound()
        return self.round

    def broadcast(self, event: str, data: Optional[Any] = None) -> None:
        self.hub.emit(event, data, to=self.code)

    def send_host(self, event: str, data: Optional[Any] = None) -> None:
        self.hub.emit(event, data, to=self.host_sid)

    def send_audience(self, event: str, data: Optional[Any] = None) -> None:
        self.hub.emit_each(event, data, self.audience_sids())

    def player_sids(self) -> List[str]:
        """Connections with role player, in join order."""
        return [sid for sid, p in self.players.items() if p.role == Role.PLAYER]

    def audience_sids(self) -> List[str]:
        """Everyone on the roster except the host (players and presenters)."""
        return [sid for sid in self.players if sid != self.host_sid]

    def public_players(self) -> List[Dict[str, Any]]:
        return [self.players[sid].to_dict(sid) for sid in self.player_sids()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'room': self.code,
            'stage': self.stage,
            'players': self.public_players(),
            'round': self.round.to_dict() if self.round else None,
        }


def generate_room_code(taken, length=4):
    """Generate a short room code not present in ``taken``."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code
