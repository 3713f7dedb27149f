"""Access scope resolver.

The only place that maps a role to the rows it may see or change. List
queries are narrowed with :meth:`ScopeResolver.scope_filter`; writes (and
reads of a single row by id) go through the ``ensure_*`` checks, which
raise AccessDenied so a guessed id cannot bypass the list filter.
"""
from enum import Enum

from flask import current_app
from sqlalchemy import false, select, true

from school_attendance.exceptions import AccessDenied
from school_attendance.models import AttendanceRecord, Event, Role, School, Student, User, parent_students


class ResourceKind(Enum):
    SCHOOL = 'school'
    USER = 'user'
    STUDENT = 'student'
    EVENT = 'event'
    ATTENDANCE = 'attendance'


SCHOOL_BOUND_ROLES = (Role.SCHOOL_ADMIN, Role.TEACHER)
SCANNER_ROLES = (Role.MAIN_ADMIN, Role.SCHOOL_ADMIN, Role.TEACHER)
ADMIN_ROLES = (Role.MAIN_ADMIN, Role.SCHOOL_ADMIN)


def _children_ids(parent_id: int):
    return select(parent_students.c.student_id).where(parent_students.c.parent_id == parent_id)


def _children_school_ids(parent_id: int):
    return select(Student.school_id).where(Student.id.in_(_children_ids(parent_id)))


def _school_student_ids(school_id: int):
    return select(Student.id).where(Student.school_id == school_id)


class ScopeResolver:
    """Role-to-scope mapping for every resource kind."""

    @staticmethod
    def scope_filter(identity, kind: ResourceKind):
        """Return a SQL predicate selecting the rows of ``kind`` visible to ``identity``."""
        role = identity.role

        if role == Role.MAIN_ADMIN:
            return true()

        if role in SCHOOL_BOUND_ROLES:
            school_id = identity.school_id
            if school_id is None:
                return false()
            if kind == ResourceKind.SCHOOL:
                return School.id == school_id
            if kind == ResourceKind.USER:
                return User.school_id == school_id
            if kind == ResourceKind.STUDENT:
                return Student.school_id == school_id
            if kind == ResourceKind.EVENT:
                return Event.school_id == school_id
            if kind == ResourceKind.ATTENDANCE:
                # Records carry no school; scope through their student.
                return AttendanceRecord.student_id.in_(_school_student_ids(school_id))

        if role == Role.PARENT:
            parent_id = identity.subject_id
            if kind == ResourceKind.SCHOOL:
                return School.id.in_(_children_school_ids(parent_id))
            if kind == ResourceKind.USER:
                return User.id == parent_id
            if kind == ResourceKind.STUDENT:
                return Student.id.in_(_children_ids(parent_id))
            if kind == ResourceKind.EVENT:
                return Event.school_id.in_(_children_school_ids(parent_id))
            if kind == ResourceKind.ATTENDANCE:
                return AttendanceRecord.student_id.in_(_children_ids(parent_id))

        if role == Role.STUDENT and kind == ResourceKind.USER:
            return User.id == identity.subject_id

        return false()

    # Row-level checks

    @staticmethod
    def can_see_student(identity, student: Student) -> bool:
        role = identity.role
        if role == Role.MAIN_ADMIN:
            return True
        if role in SCHOOL_BOUND_ROLES:
            return identity.school_id is not None and student.school_id == identity.school_id
        if role == Role.PARENT:
            return any(parent.id == identity.subject_id for parent in student.parents)
        return False

    @staticmethod
    def can_see_event(identity, event: Event) -> bool:
        role = identity.role
        if role == Role.MAIN_ADMIN:
            return True
        if role in SCHOOL_BOUND_ROLES:
            return identity.school_id is not None and event.school_id == identity.school_id
        if role == Role.PARENT:
            parent = User.get_by_id(identity.subject_id)
            return parent is not None and any(child.school_id == event.school_id for child in parent.children)
        return False

    @classmethod
    def ensure_can_see_student(cls, identity, student: Student) -> None:
        if not cls.can_see_student(identity, student):
            current_app.logger.warning(
                'Access denied: %s %s reading student %s', identity.role.value, identity.subject_id, student.id
            )
            raise AccessDenied('Access denied to this student')

    @classmethod
    def ensure_can_see_event(cls, identity, event: Event) -> None:
        if not cls.can_see_event(identity, event):
            raise AccessDenied('Access denied to this event')

    @staticmethod
    def ensure_role(identity, roles, message: str = 'Access denied') -> None:
        if identity.role not in roles:
            raise AccessDenied(message)

    @classmethod
    def ensure_school_member(cls, identity, school_id: int) -> None:
        """Admins and teachers may only act inside their own school."""
        if identity.role == Role.MAIN_ADMIN:
            return
        if identity.role not in SCHOOL_BOUND_ROLES or identity.school_id is None \
                or identity.school_id != school_id:
            raise AccessDenied('Access denied to this school')

    @classmethod
    def ensure_can_manage_students(cls, identity, school_id: int) -> None:
        cls.ensure_role(identity, ADMIN_ROLES, 'Admin access required')
        cls.ensure_school_member(identity, school_id)

    @classmethod
    def ensure_can_manage_events(cls, identity, school_id: int) -> None:
        cls.ensure_role(identity, SCANNER_ROLES, 'Teacher access required')
        cls.ensure_school_member(identity, school_id)

    @classmethod
    def ensure_can_toggle_event(cls, identity, event: Event) -> None:
        cls.ensure_can_manage_events(identity, event.school_id)
        if identity.role == Role.TEACHER and current_app.config.get('STRICT_EVENT_ASSIGNMENT') \
                and event.teacher_id != identity.subject_id:
            raise AccessDenied('Event is assigned to another teacher')

    @classmethod
    def ensure_can_record_attendance(cls, identity, student: Student) -> None:
        cls.ensure_role(identity, SCANNER_ROLES, 'Only teachers and admins can record attendance')
        if identity.role != Role.MAIN_ADMIN and \
                (identity.school_id is None or student.school_id != identity.school_id):
            raise AccessDenied('Access denied to this student')

    @classmethod
    def ensure_can_delete_attendance(cls, identity, record: AttendanceRecord) -> None:
        cls.ensure_role(identity, ADMIN_ROLES, 'Admin access required')
        if identity.role == Role.MAIN_ADMIN:
            return
        student = Student.get_by_id(record.student_id) if record.student_id is not None else None
        if student is None or student.school_id != identity.school_id:
            raise AccessDenied('Access denied to this attendance record')
