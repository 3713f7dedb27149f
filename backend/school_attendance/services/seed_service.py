"""Database seeding: the demo main admin and default school."""
import os
from typing import List

from school_attendance import db
from school_attendance.models import Role, School, User

DEMO_ADMIN_EMAIL = 'admin@education.gov'
DEFAULT_SCHOOL_NAME = 'Default School'


class SeedService:
    """Service to seed the database with the records a fresh install needs."""

    @staticmethod
    def seed_defaults() -> List[str]:
        """Create the demo admin and default school if missing. Returns what was created."""
        created = []

        if not User.query.filter_by(email=DEMO_ADMIN_EMAIL).first():
            admin = User(email=DEMO_ADMIN_EMAIL, role=Role.MAIN_ADMIN)
            admin.set_password(os.environ.get('DEMO_ADMIN_PASSWORD', 'admin123'))
            db.session.add(admin)
            created.append(f'Created main admin user: {DEMO_ADMIN_EMAIL}')

        if not School.query.filter_by(name=DEFAULT_SCHOOL_NAME).first():
            db.session.add(School(name=DEFAULT_SCHOOL_NAME))
            created.append(f'Created school: {DEFAULT_SCHOOL_NAME}')

        db.session.commit()
        return created
