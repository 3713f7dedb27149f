"""Student model identified during scanning by its QR code."""
import secrets
from school_attendance import db
from school_attendance.models.base import BaseModel

MIN_COURSE = 1
MAX_COURSE = 4


class Student(BaseModel):
    """Student model."""

    __tablename__ = 'students'

    name = db.Column(db.String(255), nullable=False)
    group = db.Column(db.String(100), nullable=False)
    course = db.Column(db.Integer, nullable=False)
    specialty = db.Column(db.String(255), nullable=False)

    # Unique across every school: a scan carries no school context.
    qr_code = db.Column(db.String(255), unique=True, nullable=False, index=True)

    school_id = db.Column(db.Integer, db.ForeignKey('schools.id'), nullable=False, index=True)

    school = db.relationship('School', lazy='joined')

    __table_args__ = (
        db.CheckConstraint(f'course BETWEEN {MIN_COURSE} AND {MAX_COURSE}', name='ck_students_course'),
    )

    @staticmethod
    def generate_qr_code() -> str:
        """Generate an opaque QR correlation identifier."""
        return secrets.token_urlsafe(16)

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'group': self.group,
            'course': self.course,
            'specialty': self.specialty,
            'qr_code': self.qr_code,
            'school_id': self.school_id,
            'school_name': self.school.name if self.school else None,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self) -> str:
        return f'<Student {self.name}>'
