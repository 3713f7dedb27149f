"""Models package with all models."""
from .base import BaseModel, utcnow
from .school import School
from .user import User, Role, parent_students
from .student import Student
from .event import Event
from .attendance import AttendanceRecord

__all__ = [
    'BaseModel', 'utcnow', 'School', 'User', 'Role', 'parent_students',
    'Student', 'Event', 'AttendanceRecord'
]
