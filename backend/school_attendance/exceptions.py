"""Domain exceptions with machine-readable reason codes."""


class AttendanceError(Exception):
    """Base class for every expected failure of the service."""

    code = 'error'
    status_code = 400
    default_message = 'Request failed'

    def __init__(self, message: str = None, code: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {
            'error': True,
            'message': self.message,
            'code': self.code,
            'status_code': self.status_code
        }


# Authentication

class InvalidCredentials(AttendanceError):
    code = 'invalid_credentials'
    status_code = 401
    default_message = 'Invalid email or password'


class InvalidToken(AttendanceError):
    code = 'invalid_token'
    status_code = 401
    default_message = 'Invalid token'


class TokenExpired(AttendanceError):
    code = 'token_expired'
    status_code = 401
    default_message = 'Token has expired'


# Authorization

class AccessDenied(AttendanceError):
    code = 'access_denied'
    status_code = 403
    default_message = 'Access denied'


# Resolution

class NotFound(AttendanceError):
    code = 'not_found'
    status_code = 404
    default_message = 'Not found'


class StudentNotFound(NotFound):
    code = 'student_not_found'
    default_message = 'Student not found'


class EventNotFound(NotFound):
    code = 'event_not_found'
    default_message = 'Event not found'


class RecordNotFound(NotFound):
    code = 'record_not_found'
    default_message = 'Attendance record not found'


class SchoolNotFound(NotFound):
    code = 'school_not_found'
    default_message = 'School not found'


class UserNotFound(NotFound):
    code = 'user_not_found'
    default_message = 'User not found'


class NoActiveEvent(AttendanceError):
    code = 'no_active_event'
    status_code = 422
    default_message = 'No active event is accepting scans'


# Conflicts

class Conflict(AttendanceError):
    code = 'conflict'
    status_code = 409
    default_message = 'Resource already exists'


class DuplicateAttendance(Conflict):
    code = 'duplicate_attendance'
    default_message = 'Attendance already recorded for this student and event'


# Input and storage

class ValidationError(AttendanceError):
    code = 'validation_error'
    status_code = 400
    default_message = 'Invalid request data'


class PersistenceError(AttendanceError):
    code = 'persistence_error'
    status_code = 503
    default_message = 'Storage is unavailable, please retry'
