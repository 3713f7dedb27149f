"""Event management and the active-event gate."""
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from school_attendance import db
from school_attendance.exceptions import Conflict, EventNotFound, SchoolNotFound, ValidationError
from school_attendance.models import Event, Role, School
from school_attendance.services.scope_service import ResourceKind, ScopeResolver
from school_attendance.utils.helpers import parse_date
from school_attendance.utils.validators import Validator


class EventService:
    """Service for managing events and finding the one accepting scans."""

    @staticmethod
    def _active_query(identity=None, school_id: Optional[int] = None):
        query = Event.query.filter(Event.is_active.is_(True))
        if identity is not None:
            query = query.filter(ScopeResolver.scope_filter(identity, ResourceKind.EVENT))
        if school_id is not None:
            query = query.filter(Event.school_id == school_id)
        # Several events may be active at once; the newest date wins.
        return query.order_by(Event.date.desc(), Event.id.desc())

    @staticmethod
    def current_active_event(identity=None, school_id: Optional[int] = None) -> Optional[Event]:
        """The event new scans attach to, or None when nothing is active.

        None is an ordinary state, not an error. Callers must not assume at
        most one event is active: activating an event never deactivates others.
        """
        return EventService._active_query(identity, school_id).first()

    @staticmethod
    def list_active(identity, school_id: Optional[int] = None) -> List[Event]:
        return EventService._active_query(identity, school_id).all()

    @staticmethod
    def set_active(event_id: int, is_active: bool, identity) -> Event:
        """Set an event's active flag. Idempotent; sibling events are untouched."""
        event = EventService.get_event(event_id, identity)
        ScopeResolver.ensure_can_toggle_event(identity, event)

        if event.is_active != bool(is_active):
            event.update(is_active=bool(is_active))
            current_app.logger.info(
                'Event %s (%r) %s by %s %s', event.id, event.name,
                'activated' if event.is_active else 'deactivated',
                identity.role.value, identity.subject_id
            )
        return event

    @staticmethod
    def list_events(identity, school_id: Optional[int] = None) -> List[Event]:
        query = Event.query.filter(ScopeResolver.scope_filter(identity, ResourceKind.EVENT))
        if school_id is not None:
            query = query.filter(Event.school_id == school_id)
        return query.order_by(Event.date.desc(), Event.id.desc()).all()

    @staticmethod
    def get_event(event_id: int, identity) -> Event:
        event = Event.get_by_id(event_id)
        if event is None:
            raise EventNotFound()
        ScopeResolver.ensure_can_see_event(identity, event)
        return event

    @staticmethod
    def create_event(data: dict, identity) -> Event:
        """Create an event. School admins and teachers always create in their own school."""
        Validator.require(Validator.validate_required_fields(data, ['name', 'date']))
        Validator.require(Validator.validate_name(data['name'], 'Event name'))

        school_id = data.get('school_id')
        teacher_id = data.get('teacher_id')
        if identity.role in (Role.SCHOOL_ADMIN, Role.TEACHER):
            school_id = identity.school_id
        if identity.role == Role.TEACHER:
            teacher_id = identity.subject_id

        if school_id is None:
            raise ValidationError('school_id is required')
        school_id = Validator.to_int(school_id, 'school_id')
        if teacher_id is not None:
            teacher_id = Validator.to_int(teacher_id, 'teacher_id')
        ScopeResolver.ensure_can_manage_events(identity, school_id)
        if School.get_by_id(school_id) is None:
            raise SchoolNotFound()

        try:
            event_date = parse_date(data['date'])
        except ValueError as e:
            raise ValidationError(str(e))

        event = Event(
            name=data['name'].strip(),
            date=event_date,
            description=data.get('description'),
            is_active=bool(data.get('is_active', False)),
            school_id=school_id,
            teacher_id=teacher_id
        )
        try:
            event.save()
        except IntegrityError:
            db.session.rollback()
            raise Conflict(f"Event '{data['name'].strip()}' already exists", code='duplicate_event')

        current_app.logger.info('Event %s (%r) created in school %s', event.id, event.name, event.school_id)
        return event

    @staticmethod
    def delete_event(event_id: int, identity) -> None:
        """Delete an event; its attendance history is kept (records reference the name)."""
        event = EventService.get_event(event_id, identity)
        ScopeResolver.ensure_role(identity, (Role.MAIN_ADMIN, Role.SCHOOL_ADMIN), 'Admin access required')
        ScopeResolver.ensure_school_member(identity, event.school_id)
        event.delete()
        current_app.logger.info('Event %s deleted by %s %s', event_id, identity.role.value, identity.subject_id)
