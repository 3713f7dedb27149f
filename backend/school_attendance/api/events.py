"""Event API, including the active-event gate used by scanners."""
from flask import Blueprint, request
from school_attendance.exceptions import ValidationError
from school_attendance.services.event_service import EventService
from school_attendance.utils.decorators import admin_required, identity_required, scanner_required
from school_attendance.utils.helpers import get_json_body, success_response

events_bp = Blueprint('events', __name__)


@events_bp.route('', methods=['GET'])
@identity_required
def list_events(identity):
    events = EventService.list_events(identity, school_id=request.args.get('school_id', type=int))
    return success_response(data=[event.to_dict() for event in events])


@events_bp.route('/active', methods=['GET'])
@identity_required
def list_active_events(identity):
    """Active events in scope, newest first."""
    events = EventService.list_active(identity, school_id=request.args.get('school_id', type=int))
    return success_response(data=[event.to_dict() for event in events])


@events_bp.route('/active/current', methods=['GET'])
@identity_required
def current_active_event(identity):
    """The event new scans attach to; data is null when none is active."""
    event = EventService.current_active_event(identity, school_id=request.args.get('school_id', type=int))
    if event is None:
        return success_response(data=None, message='No active event')
    return success_response(data=event.to_dict())


@events_bp.route('/<int:event_id>', methods=['GET'])
@identity_required
def get_event(identity, event_id):
    return success_response(data=EventService.get_event(event_id, identity).to_dict())


@events_bp.route('', methods=['POST'])
@scanner_required
def create_event(identity):
    event = EventService.create_event(get_json_body(), identity)
    return success_response(data=event.to_dict(), message='Event created', status_code=201)


@events_bp.route('/<int:event_id>/active', methods=['PUT'])
@scanner_required
def toggle_active(identity, event_id):
    """Set an event's active flag; other events are left untouched."""
    is_active = get_json_body().get('is_active')
    if not isinstance(is_active, bool):
        raise ValidationError('is_active must be a boolean')

    event = EventService.set_active(event_id, is_active, identity)
    return success_response(data=event.to_dict(), message='Event updated')


@events_bp.route('/<int:event_id>', methods=['DELETE'])
@admin_required
def delete_event(identity, event_id):
    EventService.delete_event(event_id, identity)
    return success_response(message='Event deleted')
