"""Attendance API: scanning, backfill, listing and deletion."""
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request
from school_attendance.exceptions import StudentNotFound, ValidationError
from school_attendance.models import Student
from school_attendance.services.attendance_ledger import AttendanceLedger
from school_attendance.services.scan_service import ScanService
from school_attendance.services.scope_service import ScopeResolver
from school_attendance.utils.decorators import admin_required, identity_required, scanner_required
from school_attendance.utils.helpers import get_json_body, success_response
from school_attendance.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)


@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')


@attendance_bp.route('/scan', methods=['POST'])
@scanner_required
def scan(identity):
    """Record attendance for a scanned QR code against the active event."""
    qr_code = get_json_body().get('qr_code')
    if not isinstance(qr_code, str):
        raise ValidationError('qr_code must be a string')

    outcome = ScanService.resolve_scan(qr_code, identity)

    body = {
        'error': not outcome.success,
        'message': outcome.message,
        'data': outcome.to_dict()
    }
    if not outcome.success:
        body['code'] = outcome.reason.value
        body['status_code'] = outcome.status_code
    return jsonify(body), outcome.status_code


@attendance_bp.route('', methods=['POST'])
@admin_required
def create_record(identity):
    """Administrative backfill of a record for a named event."""
    data = get_json_body()
    Validator.require(Validator.validate_required_fields(data, ['student_id', 'event_name']))
    student_id = Validator.to_int(data['student_id'], 'student_id')

    student = Student.get_by_id(student_id)
    if student is None:
        raise StudentNotFound()
    ScopeResolver.ensure_can_record_attendance(identity, student)

    timestamp = None
    if data.get('timestamp'):
        try:
            timestamp = datetime.fromisoformat(str(data['timestamp']).replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError('Invalid timestamp')
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)

    record = AttendanceLedger.record(
        student_id=student.id,
        event_name=str(data['event_name']).strip(),
        scanned_by=identity.subject_id,
        student_name=student.name,
        timestamp=timestamp
    )
    return success_response(data=record.to_dict(), message='Attendance recorded', status_code=201)


@attendance_bp.route('', methods=['GET'])
@identity_required
def list_records(identity):
    records = AttendanceLedger.list_all(identity, school_id=request.args.get('school_id', type=int))
    return success_response(data=[record.to_dict() for record in records])


@attendance_bp.route('/event/<path:event_name>', methods=['GET'])
@identity_required
def list_by_event(identity, event_name):
    records = AttendanceLedger.list_by_event(event_name, identity)
    return success_response(data=[record.to_dict() for record in records])


@attendance_bp.route('/student/<int:student_id>', methods=['GET'])
@identity_required
def list_by_student(identity, student_id):
    records = AttendanceLedger.list_by_student(student_id, identity)
    return success_response(data=[record.to_dict() for record in records])


@attendance_bp.route('/check', methods=['GET'])
@scanner_required
def check(identity):
    """Whether a student already has a record for the named event."""
    student_id = request.args.get('student_id', type=int)
    event_name = request.args.get('event_name')
    if student_id is None or not event_name:
        raise ValidationError('student_id and event_name are required')

    return success_response(data={'exists': AttendanceLedger.exists(student_id, event_name, identity)})


@attendance_bp.route('/<int:record_id>', methods=['DELETE'])
@admin_required
def delete_record(identity, record_id):
    AttendanceLedger.delete(record_id, identity)
    return success_response(message='Attendance record deleted')
