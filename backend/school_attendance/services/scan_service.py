"""Scan resolution pipeline: QR payload -> deduplicated attendance record."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from school_attendance import db
from school_attendance.exceptions import AccessDenied, DuplicateAttendance, PersistenceError
from school_attendance.models import Student, utcnow
from school_attendance.services.attendance_ledger import AttendanceLedger
from school_attendance.services.event_service import EventService
from school_attendance.services.scope_service import ScopeResolver
from school_attendance.utils.validators import Validator


class ScanReason(Enum):
    """Terminal states of a scan."""
    SUCCESS = 'success'
    STUDENT_NOT_FOUND = 'student_not_found'
    ACCESS_DENIED = 'access_denied'
    NO_ACTIVE_EVENT = 'no_active_event'
    DUPLICATE_ATTENDANCE = 'duplicate_attendance'
    PERSISTENCE_ERROR = 'persistence_error'


REASON_MESSAGES = {
    ScanReason.SUCCESS: 'Attendance recorded',
    ScanReason.STUDENT_NOT_FOUND: 'No student matches this QR code',
    ScanReason.ACCESS_DENIED: 'This student is outside your school',
    ScanReason.NO_ACTIVE_EVENT: 'No active event. Create or activate an event to start scanning',
    ScanReason.DUPLICATE_ATTENDANCE: 'Student is already checked in for this event',
    ScanReason.PERSISTENCE_ERROR: 'Could not save attendance, please retry'
}

REASON_STATUS = {
    ScanReason.SUCCESS: 201,
    ScanReason.STUDENT_NOT_FOUND: 404,
    ScanReason.ACCESS_DENIED: 403,
    ScanReason.NO_ACTIVE_EVENT: 422,
    ScanReason.DUPLICATE_ATTENDANCE: 409,
    ScanReason.PERSISTENCE_ERROR: 503
}


@dataclass
class ScanOutcome:
    """Typed result of one scan; failures are values, not exceptions."""

    reason: ScanReason
    timestamp: datetime
    student_name: Optional[str] = None
    event_name: Optional[str] = None
    record_id: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.reason == ScanReason.SUCCESS

    @property
    def message(self) -> str:
        return REASON_MESSAGES[self.reason]

    @property
    def status_code(self) -> int:
        return REASON_STATUS[self.reason]

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'reason': None if self.success else self.reason.value,
            'message': self.message,
            'student_name': self.student_name,
            'event_name': self.event_name,
            'timestamp': self.timestamp.isoformat(),
            'record_id': self.record_id
        }


class ScanService:
    """Orchestrates one scan to a terminal outcome."""

    @staticmethod
    def resolve_scan(qr_payload: str, identity) -> ScanOutcome:
        """Resolve a scanned QR payload for the scanning identity.

        Steps: look the payload up as the student's qr_code, check the student
        is in the scanner's scope, find the active event of the student's
        school, then insert; the ledger's unique constraint is the duplicate
        signal. Always returns a ScanOutcome.
        """
        try:
            return ScanService._resolve(qr_payload, identity)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception('Scan failed on storage error: %s', e)
            return ScanOutcome(ScanReason.PERSISTENCE_ERROR, utcnow())
        except PersistenceError:
            return ScanOutcome(ScanReason.PERSISTENCE_ERROR, utcnow())

    @staticmethod
    def _resolve(qr_payload: str, identity) -> ScanOutcome:
        # 1. Decode: the payload is the lookup key as-is.
        student = None
        if Validator.is_lookup_key(qr_payload):
            student = Student.query.filter_by(qr_code=qr_payload).first()
        if student is None:
            current_app.logger.info('Scan by %s: unknown QR code', identity.subject_id)
            return ScanOutcome(ScanReason.STUDENT_NOT_FOUND, utcnow())

        # 2. Scope check
        try:
            ScopeResolver.ensure_can_record_attendance(identity, student)
        except AccessDenied:
            current_app.logger.warning(
                'Scan by %s %s denied for student %s of school %s',
                identity.role.value, identity.subject_id, student.id, student.school_id
            )
            return ScanOutcome(ScanReason.ACCESS_DENIED, utcnow())

        # 3. Active event of the student's school
        event = EventService.current_active_event(school_id=student.school_id)
        if event is None:
            current_app.logger.info('Scan for student %s: no active event in school %s',
                                    student.id, student.school_id)
            return ScanOutcome(ScanReason.NO_ACTIVE_EVENT, utcnow(), student_name=student.name)

        # 4-5. Insert; a constraint violation means the student is already in.
        student_id, student_name, event_name = student.id, student.name, event.name
        try:
            record = AttendanceLedger.record(
                student_id=student_id,
                event_name=event_name,
                scanned_by=identity.subject_id,
                student_name=student_name
            )
        except DuplicateAttendance:
            current_app.logger.info('Duplicate scan: student %s already in %r', student_id, event_name)
            return ScanOutcome(
                ScanReason.DUPLICATE_ATTENDANCE, utcnow(),
                student_name=student_name, event_name=event_name
            )

        return ScanOutcome(
            ScanReason.SUCCESS, record.timestamp,
            student_name=record.student_name, event_name=record.event_name, record_id=record.id
        )
