"""User management API."""
from flask import Blueprint, request
from school_attendance.models.user import Role
from school_attendance.services.user_service import UserService
from school_attendance.utils.decorators import admin_required, main_admin_required, roles_required
from school_attendance.utils.helpers import get_json_body, success_response
from school_attendance.utils.validators import Validator

users_bp = Blueprint('users', __name__)


@users_bp.route('', methods=['GET'])
@main_admin_required
def list_users(identity):
    """List users, optionally filtered by school_id and role."""
    users = UserService.list_users(
        identity,
        school_id=request.args.get('school_id', type=int),
        role=request.args.get('role')
    )
    return success_response(data=[user.to_dict() for user in users])


@users_bp.route('', methods=['POST'])
@main_admin_required
def register_user(identity):
    """Register a user account."""
    user = UserService.register(get_json_body(), identity)
    return success_response(data=user.to_dict(), message='User registered', status_code=201)


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@main_admin_required
def delete_user(identity, user_id):
    UserService.delete_user(user_id, identity)
    return success_response(message='User deleted')


@users_bp.route('/<int:user_id>/children', methods=['POST'])
@admin_required
def link_child(identity, user_id):
    """Link a student to a parent account."""
    student_id = Validator.to_int(get_json_body().get('student_id'), 'student_id')
    parent = UserService.link_child(user_id, student_id, identity)
    return success_response(data=parent.to_dict(), message='Child linked')


@users_bp.route('/<int:user_id>/children/<int:student_id>', methods=['DELETE'])
@admin_required
def unlink_child(identity, user_id, student_id):
    parent = UserService.unlink_child(user_id, student_id, identity)
    return success_response(data=parent.to_dict(), message='Child unlinked')


@users_bp.route('/me/children', methods=['GET'])
@roles_required(Role.PARENT)
def my_children(identity):
    """Students linked to the calling parent."""
    children = UserService.list_children(identity)
    return success_response(data=[child.to_dict() for child in children])
