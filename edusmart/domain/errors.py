"""Business-rule failures raised by the use cases.

Every error carries a ``kind`` (how the HTTP layer presents it) and a stable
``code`` clients can branch on.
"""
from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAUTHENTICATED = "unauthenticated"
    UNAUTHORIZED = "unauthorized"
    UNVERIFIED = "unverified"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"
    INSUFFICIENT_TOKENS = "insufficient_tokens"


class DomainError(Exception):
    kind: ErrorKind = ErrorKind.CONFLICT
    code: str = "domain_error"
    default_message: str = "Operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- NotFound

class NotFound(DomainError):
    kind = ErrorKind.NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class UserNotFound(NotFound):
    code = "user_not_found"
    default_message = "User not found"


class CourseNotFound(NotFound):
    code = "course_not_found"
    default_message = "Course not found"


class ClassNotFound(NotFound):
    code = "class_not_found"
    default_message = "Class not found"


class RecordingNotFound(NotFound):
    code = "recording_not_found"
    default_message = "Recording not found"


class NotEnrolled(NotFound):
    code = "not_enrolled"
    default_message = "Learner is not enrolled in this course"


# --- auth

class Unauthenticated(DomainError):
    kind = ErrorKind.UNAUTHENTICATED
    code = "unauthenticated"
    default_message = "Authentication required"


class InvalidCredentials(Unauthenticated):
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class Unauthorized(DomainError):
    kind = ErrorKind.UNAUTHORIZED
    code = "unauthorized"
    default_message = "Not allowed"


class Unverified(DomainError):
    kind = ErrorKind.UNVERIFIED
    code = "unverified"
    default_message = "Account is not KYC-verified"


# --- Conflict

class Conflict(DomainError):
    kind = ErrorKind.CONFLICT
    code = "conflict"


class AlreadyEnrolled(Conflict):
    code = "already_enrolled"
    default_message = "Learner is already enrolled in this course"


class ClassFull(Conflict):
    code = "class_full"
    default_message = "Class is full"


class HasDependents(Conflict):
    code = "has_dependents"
    default_message = "Entity still has dependents"


class AlreadyCheckedIn(Conflict):
    code = "already_checked_in"
    default_message = "Already checked in today"


class ClassNotStarted(Conflict):
    code = "class_not_started"
    default_message = "Class has not started yet"


class ClassEnded(Conflict):
    code = "class_ended"
    default_message = "Class has already ended"


class InvalidTransition(Conflict):
    code = "invalid_transition"
    default_message = "KYC status transition not allowed"


# --- InvalidInput

class InvalidInput(DomainError):
    kind = ErrorKind.INVALID_INPUT
    code = "invalid_input"
    default_message = "Invalid input"


class RoleInvalid(InvalidInput):
    code = "role_invalid"
    default_message = "Role must be teacher or learner"


class InvalidSchedule(InvalidInput):
    code = "invalid_schedule"
    default_message = "Schedule must look like '2,4,6 (08:00-10:00)'"


class InvalidDateRange(InvalidInput):
    code = "invalid_date_range"
    default_message = "End date precedes start date"


class InsufficientTokens(DomainError):
    kind = ErrorKind.INSUFFICIENT_TOKENS
    code = "insufficient_tokens"
    default_message = "Not enough tokens in wallet"
