"""Failures a game action can report back to its caller.

Every error carries a short ``reason`` code that is sent to the client in the
acknowledgement, e.g. ``{"ok": False, "reason": "tooLate", "error": "..."}``.
None of these are fatal to the room.
"""


class GameError(Exception):
    reason = 'error'
    message = 'Request failed'
    status_code = 400

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_ack(self) -> dict:
        return {'ok': False, 'reason': self.reason, 'error': self.message}


class RoomNotFound(GameError):
    reason = 'roomNotFound'
    message = 'Room not found'
    status_code = 404


class NotHost(GameError):
    reason = 'notHost'
    message = 'Only the host may do that'
    status_code = 403


class NotPlayer(GameError):
    reason = 'notPlayer'
    message = 'Only players may do that'
    status_code = 403


class NoActiveRound(GameError):
    reason = 'noActiveRound'
    message = 'No round in progress'


class NoActiveQuestion(GameError):
    reason = 'noActiveQuestion'
    message = 'No question in progress'


class NotSequenceQuestion(GameError):
    reason = 'notSequence'
    message = 'Current question is not a sequence question'


class AlreadyBuzzed(GameError):
    reason = 'alreadyBuzzed'
    message = 'Already buzzed'


class LockedOut(GameError):
    reason = 'lockedOut'
    message = 'You are locked out'


class BuzzersLocked(GameError):
    reason = 'buzzersLocked'
    message = 'Buzzers locked'


class TooLate(GameError):
    reason = 'tooLate'
    message = 'Answer window has closed'


class EarlyReveal(GameError):
    reason = 'early'
    message = 'Players are still answering'


class NoMoreSteps(GameError):
    reason = 'noMoreSteps'
    message = 'All steps are already visible'


class InvalidQuestionType(GameError):
    reason = 'invalidType'
    message = 'Invalid type'


class QuestionBankUnavailable(GameError):
    reason = 'questionBankUnavailable'
    message = 'Failed to load questions'
    status_code = 503
