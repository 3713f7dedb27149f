"""School management API - main admin only."""
from flask import Blueprint
from school_attendance.services.school_service import SchoolService
from school_attendance.utils.decorators import main_admin_required
from school_attendance.utils.helpers import get_json_body, success_response

schools_bp = Blueprint('schools', __name__)


@schools_bp.route('', methods=['GET'])
@main_admin_required
def list_schools(identity):
    schools = SchoolService.list_schools(identity)
    return success_response(data=[school.to_dict() for school in schools])


@schools_bp.route('/<int:school_id>', methods=['GET'])
@main_admin_required
def get_school(identity, school_id):
    return success_response(data=SchoolService.get_school(school_id, identity).to_dict())


@schools_bp.route('', methods=['POST'])
@main_admin_required
def create_school(identity):
    school = SchoolService.create_school(get_json_body().get('name'), identity)
    return success_response(data=school.to_dict(), message='School created', status_code=201)


@schools_bp.route('/<int:school_id>', methods=['PUT'])
@main_admin_required
def update_school(identity, school_id):
    school = SchoolService.update_school(school_id, get_json_body().get('name'), identity)
    return success_response(data=school.to_dict(), message='School updated')


@schools_bp.route('/<int:school_id>', methods=['DELETE'])
@main_admin_required
def delete_school(identity, school_id):
    SchoolService.delete_school(school_id, identity)
    return success_response(message='School deleted')
