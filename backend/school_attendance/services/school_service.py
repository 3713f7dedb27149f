"""School management service (main admin only)."""
from typing import List

from flask import current_app
from sqlalchemy.exc import IntegrityError

from school_attendance import db
from school_attendance.exceptions import Conflict, SchoolNotFound
from school_attendance.models import Event, Role, School, Student, User
from school_attendance.services.scope_service import ResourceKind, ScopeResolver
from school_attendance.utils.validators import Validator


class SchoolService:

    @staticmethod
    def list_schools(identity) -> List[School]:
        return School.query.filter(
            ScopeResolver.scope_filter(identity, ResourceKind.SCHOOL)
        ).order_by(School.created_at.desc(), School.id.desc()).all()

    @staticmethod
    def get_school(school_id: int, identity) -> School:
        school = School.query.filter(
            School.id == school_id, ScopeResolver.scope_filter(identity, ResourceKind.SCHOOL)
        ).first()
        if school is None:
            raise SchoolNotFound()
        return school

    @staticmethod
    def create_school(name: str, identity) -> School:
        ScopeResolver.ensure_role(identity, (Role.MAIN_ADMIN,), 'Main admin access required')
        Validator.require(Validator.validate_name(name, 'School name'))

        school = School(name=name.strip()).save()
        current_app.logger.info('School %s (%r) created', school.id, school.name)
        return school

    @staticmethod
    def update_school(school_id: int, name: str, identity) -> School:
        ScopeResolver.ensure_role(identity, (Role.MAIN_ADMIN,), 'Main admin access required')
        Validator.require(Validator.validate_name(name, 'School name'))

        school = SchoolService.get_school(school_id, identity)
        return school.update(name=name.strip())

    @staticmethod
    def delete_school(school_id: int, identity) -> None:
        """Delete an empty school. Schools that still own rows are refused, never cascaded."""
        ScopeResolver.ensure_role(identity, (Role.MAIN_ADMIN,), 'Main admin access required')
        school = SchoolService.get_school(school_id, identity)

        owned = (
            Student.query.filter_by(school_id=school.id).first()
            or Event.query.filter_by(school_id=school.id).first()
            or User.query.filter_by(school_id=school.id).first()
        )
        if owned is not None:
            raise Conflict('School still owns students, events or users', code='school_not_empty')
        try:
            school.delete()
        except IntegrityError:
            db.session.rollback()
            raise Conflict('School still owns students or events', code='school_not_empty')
        current_app.logger.info('School %s deleted', school_id)
