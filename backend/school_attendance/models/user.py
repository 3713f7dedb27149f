"""User model for authentication and authorization."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from school_attendance import db
from school_attendance.models.base import BaseModel


class Role(Enum):
    """User roles enumeration."""
    MAIN_ADMIN = 'main_admin'
    SCHOOL_ADMIN = 'school_admin'
    TEACHER = 'teacher'
    PARENT = 'parent'
    STUDENT = 'student'

    @classmethod
    def parse(cls, value) -> 'Role':
        """Accept a Role, its value ('school_admin') or its name ('SCHOOL_ADMIN')."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f'Invalid role: {value!r}')
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f'Invalid role: {value!r}') from None


# Parent <-> Student links, populated only by an explicit linking operation.
parent_students = db.Table(
    'parent_students',
    db.Column('parent_id', db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    db.Column('student_id', db.Integer, db.ForeignKey('students.id', ondelete='CASCADE'), primary_key=True)
)


class User(BaseModel):
    """User model for all system users."""

    __tablename__ = 'users'

    # Basic Information
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(Role), nullable=False, default=Role.TEACHER)
    school_id = db.Column(db.Integer, db.ForeignKey('schools.id', ondelete='SET NULL'), nullable=True, index=True)

    # Security
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)
    failed_login_attempts = db.Column(db.Integer, default=0, nullable=False)

    # Relationships
    school = db.relationship('School', lazy='joined')
    children = db.relationship(
        'Student', secondary=parent_students, order_by='Student.name',
        backref=db.backref('parents', lazy='select')
    )

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        default_exclude = ['password_hash', 'failed_login_attempts']
        exclude = (exclude or []) + default_exclude

        result = super().to_dict(exclude=exclude)
        result['role'] = self.role.value if self.role else None
        result['school_name'] = self.school.name if self.school else None
        if self.role == Role.PARENT:
            result['children'] = [child.id for child in self.children]

        return result

    def __repr__(self) -> str:
        return f'<User {self.email}>'
