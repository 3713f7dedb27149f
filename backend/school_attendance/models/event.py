"""Event model; an active event receives scanned attendance."""
from school_attendance import db
from school_attendance.models.base import BaseModel


class Event(BaseModel):
    """Event model."""

    __tablename__ = 'events'

    name = db.Column(db.String(255), unique=True, nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=False, nullable=False, index=True)

    school_id = db.Column(db.Integer, db.ForeignKey('schools.id'), nullable=False, index=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    __table_args__ = (
        db.Index('ix_events_school_active', 'school_id', 'is_active'),
    )

    def __repr__(self) -> str:
        return f'<Event {self.name}>'
