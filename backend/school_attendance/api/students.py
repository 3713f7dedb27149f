"""Student management API."""
from flask import Blueprint, request
from school_attendance.services.student_service import StudentService
from school_attendance.utils.decorators import admin_required, identity_required, scanner_required
from school_attendance.utils.helpers import get_json_body, success_response

students_bp = Blueprint('students', __name__)


@students_bp.route('', methods=['GET'])
@identity_required
def get_students(identity):
    """Students visible to the caller; main admins may filter by school_id."""
    students = StudentService.list_students(identity, school_id=request.args.get('school_id', type=int))
    return success_response(data=[student.to_dict() for student in students])


@students_bp.route('/<int:student_id>', methods=['GET'])
@identity_required
def get_student(identity, student_id):
    return success_response(data=StudentService.get_student(student_id, identity).to_dict())


@students_bp.route('/qr/<path:qr_code>', methods=['GET'])
@scanner_required
def get_student_by_qr(identity, qr_code):
    """Resolve a scanned QR code to its student."""
    return success_response(data=StudentService.get_by_qr(qr_code, identity).to_dict())


@students_bp.route('', methods=['POST'])
@admin_required
def create_student(identity):
    student = StudentService.create_student(get_json_body(), identity)
    return success_response(data=student.to_dict(), message='Student created', status_code=201)


@students_bp.route('/<int:student_id>', methods=['PUT'])
@admin_required
def update_student(identity, student_id):
    student = StudentService.update_student(student_id, get_json_body(), identity)
    return success_response(data=student.to_dict(), message='Student updated')


@students_bp.route('/<int:student_id>', methods=['DELETE'])
@admin_required
def delete_student(identity, student_id):
    StudentService.delete_student(student_id, identity)
    return success_response(message='Student deleted')
