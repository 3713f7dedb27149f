"""Attendance ledger: the append-only (with explicit delete) store of scans."""
from datetime import datetime
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from school_attendance import db
from school_attendance.exceptions import (
    AccessDenied, DuplicateAttendance, PersistenceError, RecordNotFound, StudentNotFound, ValidationError
)
from school_attendance.models import AttendanceRecord, Role, Student, utcnow
from school_attendance.services.scope_service import ResourceKind, ScopeResolver


class AttendanceLedger:
    """Service for writing and reading attendance records."""

    @staticmethod
    def record(
        student_id: int,
        event_name: str,
        scanned_by: str,
        student_name: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ) -> AttendanceRecord:
        """Insert one attendance record.

        Duplicates are detected by the (student_id, event_name) unique
        constraint at insert time, never by a separate pre-check, so two
        concurrent scans of one badge cannot both succeed.
        """
        if not event_name or not str(event_name).strip():
            raise ValidationError('event_name is required')

        if student_name is None:
            student = Student.get_by_id(student_id)
            if student is None:
                raise StudentNotFound()
            student_name = student.name

        record = AttendanceRecord(
            student_id=student_id,
            student_name=student_name,
            event_name=event_name,
            timestamp=timestamp or utcnow(),
            scanned_by=str(scanned_by)
        )

        try:
            db.session.add(record)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            if AttendanceLedger._pair_exists(student_id, event_name):
                raise DuplicateAttendance()
            current_app.logger.error('Unexpected constraint failure recording attendance: %s', e)
            raise PersistenceError('Unexpected constraint failure while recording attendance')
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception('Failed to record attendance: %s', e)
            raise PersistenceError()

        current_app.logger.info(
            'Attendance recorded: student=%s event=%r by=%s', student_id, event_name, scanned_by
        )
        return record

    @staticmethod
    def _pair_exists(student_id: int, event_name: str) -> bool:
        return db.session.query(
            AttendanceRecord.query.filter_by(student_id=student_id, event_name=event_name).exists()
        ).scalar()

    @staticmethod
    def delete(record_id: int, identity) -> bool:
        """Hard-delete a record. School admins may only delete their own school's records."""
        ScopeResolver.ensure_role(identity, (Role.MAIN_ADMIN, Role.SCHOOL_ADMIN), 'Admin access required')

        record = AttendanceRecord.get_by_id(record_id)
        if record is None:
            raise RecordNotFound()

        ScopeResolver.ensure_can_delete_attendance(identity, record)

        record.delete()
        current_app.logger.info(
            'Attendance record %s deleted by %s %s', record_id, identity.role.value, identity.subject_id
        )
        return True

    @staticmethod
    def _scoped_query(identity):
        return AttendanceRecord.query.filter(ScopeResolver.scope_filter(identity, ResourceKind.ATTENDANCE))

    @staticmethod
    def list_by_event(event_name: str, identity) -> List[AttendanceRecord]:
        """Records of one named event, restricted to the caller's scope."""
        return AttendanceLedger._scoped_query(identity).filter(
            AttendanceRecord.event_name == event_name
        ).order_by(AttendanceRecord.timestamp.desc()).all()

    @staticmethod
    def list_by_student(student_id: int, identity) -> List[AttendanceRecord]:
        """Records of one student; an out-of-scope student is refused outright."""
        if identity.role != Role.MAIN_ADMIN:
            student = Student.get_by_id(student_id)
            if student is None:
                raise StudentNotFound()
            ScopeResolver.ensure_can_see_student(identity, student)

        return AttendanceLedger._scoped_query(identity).filter(
            AttendanceRecord.student_id == student_id
        ).order_by(AttendanceRecord.timestamp.desc()).all()

    @staticmethod
    def list_all(identity, school_id: Optional[int] = None) -> List[AttendanceRecord]:
        """Every record in scope, optionally narrowed to one school."""
        query = AttendanceLedger._scoped_query(identity)
        if school_id is not None:
            query = query.filter(
                AttendanceRecord.student_id.in_(db.select(Student.id).where(Student.school_id == school_id))
            )
        return query.order_by(AttendanceRecord.timestamp.desc()).all()

    @staticmethod
    def exists(student_id: int, event_name: str, identity) -> bool:
        """Whether the student already attended the named event (within scope)."""
        if identity.role not in (Role.MAIN_ADMIN, Role.SCHOOL_ADMIN, Role.TEACHER):
            raise AccessDenied('Teacher access required')
        return db.session.query(
            AttendanceLedger._scoped_query(identity).filter(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.event_name == event_name
            ).exists()
        ).scalar()
