"""Error taxonomy of the game-flow coordinator.

Precondition errors are raised before any side effect. Validation errors mean
a caller bug or a corrupted navigation parameter. Conflict errors are expected
under races. Transient errors are worth a retry by the caller; nothing here
retries automatically.
"""

from __future__ import annotations


class QuizGameError(Exception):
    code = "quiz_game_error"
    status_code = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self.args[0])


# --- precondition ---

class PreconditionError(QuizGameError):
    code = "precondition_failed"
    status_code = 400


class NotLoggedInError(PreconditionError):
    """You are not logged in."""

    code = "not_logged_in"
    status_code = 401


class MissingParameterError(PreconditionError):
    """A required navigation parameter is missing."""

    code = "missing_parameter"


class NoSelectionError(PreconditionError):
    """No option is selected."""

    code = "no_selection"


class SubmissionPendingError(PreconditionError):
    """An answer submission is already in progress."""

    code = "submission_pending"


# --- validation ---

class ValidationError(QuizGameError):
    code = "validation_error"
    status_code = 422


class OutOfRangeError(ValidationError):
    code = "out_of_range"


# --- conflict ---

class ConflictError(QuizGameError):
    code = "conflict"
    status_code = 409


class DuplicateAnswerError(ConflictError):
    """This team has already answered this quiz."""

    code = "duplicate_answer"


class MembershipLockedError(ConflictError):
    """Team membership cannot change after the game has started."""

    code = "membership_locked"


# --- transient ---

class TransientError(QuizGameError):
    code = "transient"
    status_code = 503


class UnavailableError(TransientError):
    """The store is unavailable."""

    code = "unavailable"


class NotFoundError(TransientError):
    code = "not_found"
    status_code = 404
