"""User management and parent-child linking."""
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from school_attendance import db
from school_attendance.exceptions import (
    AccessDenied, Conflict, SchoolNotFound, StudentNotFound, UserNotFound, ValidationError
)
from school_attendance.models import Event, Role, School, Student, User
from school_attendance.services.scope_service import ADMIN_ROLES, ResourceKind, ScopeResolver
from school_attendance.utils.validators import Validator

SCHOOL_ROLES = (Role.SCHOOL_ADMIN, Role.TEACHER, Role.PARENT)


class UserService:

    @staticmethod
    def create_user(email: str, password: str, role, school_id: Optional[int] = None) -> User:
        """Register a user. School admins must belong to a school."""
        if not Validator.validate_email(email):
            raise ValidationError("Invalid email format")
        Validator.require(Validator.validate_password(password))

        try:
            role = Role.parse(role)
        except ValueError as e:
            raise ValidationError(str(e))

        if school_id is not None:
            school_id = Validator.to_int(school_id, 'school_id')
            if School.get_by_id(school_id) is None:
                raise SchoolNotFound()
        if role == Role.SCHOOL_ADMIN and school_id is None:
            raise ValidationError("School ID required for school_admin")

        email = email.lower().strip()
        if User.query.filter_by(email=email).first():
            raise Conflict("User already exists", code='duplicate_email')

        user = User(email=email, role=role, school_id=school_id)
        user.set_password(password)
        try:
            user.save()
        except IntegrityError:
            db.session.rollback()
            raise Conflict("User already exists", code='duplicate_email')

        current_app.logger.info('User %s registered as %s', user.id, role.value)
        return user

    @staticmethod
    def register(data: dict, identity) -> User:
        ScopeResolver.ensure_role(identity, (Role.MAIN_ADMIN,), 'Main admin access required')
        Validator.require(Validator.validate_required_fields(data, ['email', 'password', 'role']))
        return UserService.create_user(
            email=data['email'],
            password=data['password'],
            role=data['role'],
            school_id=data.get('school_id')
        )

    @staticmethod
    def list_users(identity, school_id: Optional[int] = None, role: Optional[str] = None) -> List[User]:
        """List users; filtering by school defaults to that school's staff and parents."""
        query = User.query.filter(ScopeResolver.scope_filter(identity, ResourceKind.USER))
        if school_id is not None:
            query = query.filter(User.school_id == school_id)
            if role is None:
                query = query.filter(User.role.in_(SCHOOL_ROLES))
        if role is not None:
            try:
                query = query.filter(User.role == Role.parse(role))
            except ValueError as e:
                raise ValidationError(str(e))
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    @staticmethod
    def delete_user(user_id: int, identity) -> None:
        ScopeResolver.ensure_role(identity, (Role.MAIN_ADMIN,), 'Main admin access required')
        user = User.get_by_id(user_id)
        if user is None:
            raise UserNotFound()
        if user.id == identity.subject_id:
            raise ValidationError("You cannot delete your own account")
        Event.query.filter_by(teacher_id=user.id).update(
            {Event.teacher_id: None}, synchronize_session=False
        )
        user.delete()
        current_app.logger.info('User %s deleted', user_id)

    @staticmethod
    def _load_link(parent_id: int, student_id: int, identity):
        ScopeResolver.ensure_role(identity, ADMIN_ROLES, 'Admin access required')

        parent = User.get_by_id(parent_id)
        if parent is None:
            raise UserNotFound()
        if parent.role != Role.PARENT:
            raise ValidationError("Only parent accounts can have children")

        student = Student.get_by_id(student_id)
        if student is None:
            raise StudentNotFound()

        if identity.role == Role.SCHOOL_ADMIN:
            if student.school_id != identity.school_id:
                raise AccessDenied('Access denied to this student')
            if parent.school_id not in (None, identity.school_id):
                raise AccessDenied('Access denied to this parent')
        return parent, student

    @staticmethod
    def link_child(parent_id: int, student_id: int, identity) -> User:
        """Explicitly link a student to a parent account. Idempotent."""
        parent, student = UserService._load_link(parent_id, student_id, identity)
        if student not in parent.children:
            parent.children.append(student)
            db.session.commit()
            current_app.logger.info('Student %s linked to parent %s', student.id, parent.id)
        return parent

    @staticmethod
    def unlink_child(parent_id: int, student_id: int, identity) -> User:
        parent, student = UserService._load_link(parent_id, student_id, identity)
        if student in parent.children:
            parent.children.remove(student)
            db.session.commit()
            current_app.logger.info('Student %s unlinked from parent %s', student.id, parent.id)
        return parent

    @staticmethod
    def list_children(identity) -> List[Student]:
        ScopeResolver.ensure_role(identity, (Role.PARENT,), 'Parent access required')
        parent = User.get_by_id(identity.subject_id)
        if parent is None:
            raise UserNotFound()
        return list(parent.children)
