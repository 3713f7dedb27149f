"""Student management service, scoped by school."""
from typing import Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from school_attendance import db
from school_attendance.exceptions import Conflict, SchoolNotFound, StudentNotFound, ValidationError
from school_attendance.models import AttendanceRecord, Role, School, Student
from school_attendance.models.student import MAX_COURSE, MIN_COURSE
from school_attendance.services.scope_service import SCANNER_ROLES, ResourceKind, ScopeResolver
from school_attendance.utils.validators import Validator

EDITABLE_FIELDS = ('name', 'group', 'course', 'specialty', 'school_id')


def _validate_course(value) -> int:
    course = Validator.to_int(value, 'course')
    if course < MIN_COURSE or course > MAX_COURSE:
        raise ValidationError(f"Course must be between {MIN_COURSE} and {MAX_COURSE}")
    return course


class StudentService:
    """Service for managing students."""

    @staticmethod
    def list_students(identity, school_id: Optional[int] = None) -> List[Student]:
        query = Student.query.filter(ScopeResolver.scope_filter(identity, ResourceKind.STUDENT))
        if school_id is not None:
            query = query.filter(Student.school_id == school_id)
        return query.order_by(Student.created_at.desc(), Student.id.desc()).all()

    @staticmethod
    def get_student(student_id: int, identity) -> Student:
        student = Student.get_by_id(student_id)
        if student is None:
            raise StudentNotFound()
        ScopeResolver.ensure_can_see_student(identity, student)
        return student

    @staticmethod
    def get_by_qr(qr_code: str, identity) -> Student:
        """Look a student up by QR code, for scanners only."""
        ScopeResolver.ensure_role(identity, SCANNER_ROLES, 'Teacher access required')
        if not Validator.is_lookup_key(qr_code):
            raise StudentNotFound()
        student = Student.query.filter_by(qr_code=qr_code).first()
        if student is None:
            raise StudentNotFound()
        ScopeResolver.ensure_can_see_student(identity, student)
        return student

    @staticmethod
    def _resolve_school(data: Dict, identity) -> int:
        school_id = data.get('school_id')
        if identity.role == Role.SCHOOL_ADMIN:
            school_id = identity.school_id
        if school_id is None:
            raise ValidationError("School ID required")
        school_id = Validator.to_int(school_id, 'school_id')
        if School.get_by_id(school_id) is None:
            raise SchoolNotFound()
        return school_id

    @staticmethod
    def create_student(data: Dict, identity) -> Student:
        """Create a student; the QR code is generated when not supplied."""
        Validator.require(Validator.validate_required_fields(data, ['name', 'group', 'course', 'specialty']))
        Validator.require(Validator.validate_name(data['name']))

        school_id = StudentService._resolve_school(data, identity)
        ScopeResolver.ensure_can_manage_students(identity, school_id)

        qr_code = data.get('qr_code')
        if qr_code is not None and (not isinstance(qr_code, str) or not qr_code.strip()):
            raise ValidationError("qr_code must be a non-empty string")

        student = Student(
            name=data['name'].strip(),
            group=str(data['group']).strip(),
            course=_validate_course(data['course']),
            specialty=str(data['specialty']).strip(),
            qr_code=qr_code.strip() if qr_code else Student.generate_qr_code(),
            school_id=school_id
        )
        try:
            student.save()
        except IntegrityError:
            db.session.rollback()
            raise Conflict("QR code already assigned to another student", code='duplicate_qr_code')

        current_app.logger.info('Student %s created in school %s', student.id, school_id)
        return student

    @staticmethod
    def update_student(student_id: int, data: Dict, identity) -> Student:
        """Update student fields. The QR code is immutable once issued."""
        student = StudentService.get_student(student_id, identity)
        ScopeResolver.ensure_can_manage_students(identity, student.school_id)

        if 'qr_code' in data and data['qr_code'] != student.qr_code:
            raise ValidationError("qr_code cannot be changed")

        updates = {key: data[key] for key in EDITABLE_FIELDS if key in data}
        if 'name' in updates:
            Validator.require(Validator.validate_name(updates['name']))
            updates['name'] = updates['name'].strip()
        if 'course' in updates:
            updates['course'] = _validate_course(updates['course'])
        if 'school_id' in updates:
            new_school = Validator.to_int(updates['school_id'], 'school_id')
            if identity.role != Role.MAIN_ADMIN and new_school != student.school_id:
                raise ValidationError("Only the main admin can move students between schools")
            if School.get_by_id(new_school) is None:
                raise SchoolNotFound()
            updates['school_id'] = new_school

        return student.update(**updates)

    @staticmethod
    def delete_student(student_id: int, identity) -> None:
        """Delete a student. Attendance records keep their name snapshot."""
        student = StudentService.get_student(student_id, identity)
        ScopeResolver.ensure_can_manage_students(identity, student.school_id)
        AttendanceRecord.query.filter_by(student_id=student.id).update(
            {AttendanceRecord.student_id: None}, synchronize_session=False
        )
        student.delete()
        current_app.logger.info('Student %s deleted by %s %s', student_id, identity.role.value, identity.subject_id)
