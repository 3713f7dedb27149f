"""Attendance record model."""
from school_attendance import db
from school_attendance.models.base import BaseModel, utcnow


class AttendanceRecord(BaseModel):
    """One student's attendance at one named event.

    ``event_name`` is stored as text rather than an event id so history
    survives event deletion; renaming an event does not relink past records.
    ``student_name`` is a snapshot taken at write time.
    """

    __tablename__ = 'attendance_records'

    student_id = db.Column(db.Integer, db.ForeignKey('students.id', ondelete='SET NULL'), nullable=True, index=True)
    student_name = db.Column(db.String(255), nullable=False)
    event_name = db.Column(db.String(255), nullable=False, index=True)
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)
    scanned_by = db.Column(db.String(255), nullable=False)

    __table_args__ = (
        db.UniqueConstraint('student_id', 'event_name', name='uq_attendance_student_event'),
    )

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'id': self.id,
            'student_id': self.student_id,
            'student_name': self.student_name,
            'event_name': self.event_name,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'scanned_by': self.scanned_by
        }

    def __repr__(self):
        return f'<AttendanceRecord {self.student_id}-{self.event_name}>'
