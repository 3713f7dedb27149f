"""School model, the root of every tenancy partition."""
from school_attendance import db
from school_attendance.models.base import BaseModel


class School(BaseModel):
    """A school owning its students and events."""

    __tablename__ = 'schools'

    name = db.Column(db.String(255), nullable=False)

    def __repr__(self) -> str:
        return f'<School {self.name}>'
