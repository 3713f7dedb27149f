"""Shared fixtures: an in-memory app seeded with two schools."""
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from school_attendance import create_app, db
from school_attendance.models import Event, Role, School, Student, User
from school_attendance.services.token_service import Identity, issue_token

PASSWORD = 'password123'


@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def _user(email, role, school_id=None):
    user = User(email=email, role=role, school_id=school_id)
    user.set_password(PASSWORD)
    db.session.add(user)
    return user


@pytest.fixture
def seed(app):
    """Two schools, one user per role, one student and one event per school.

    Only ids are handed out; tests reload rows through the session they use.
    """
    s1 = School(name='North High')
    s2 = School(name='South High')
    db.session.add_all([s1, s2])
    db.session.flush()

    main_admin = _user('main@education.gov', Role.MAIN_ADMIN)
    admin1 = _user('admin1@north.edu', Role.SCHOOL_ADMIN, s1.id)
    admin2 = _user('admin2@south.edu', Role.SCHOOL_ADMIN, s2.id)
    teacher1 = _user('teacher1@north.edu', Role.TEACHER, s1.id)
    teacher2 = _user('teacher2@south.edu', Role.TEACHER, s2.id)
    parent = _user('parent@home.org', Role.PARENT)
    pupil = _user('pupil@north.edu', Role.STUDENT, s1.id)

    alice = Student(name='Alice Smith', group='A1', course=2, specialty='Physics',
                    qr_code='abc-123', school_id=s1.id)
    bob = Student(name='Bob Jones', group='B1', course=3, specialty='History',
                  qr_code='xyz-789', school_id=s2.id)
    db.session.add_all([alice, bob])
    db.session.flush()
    parent.children.append(alice)

    fair = Event(name='Science Fair', date=date(2024, 5, 1), is_active=True,
                 school_id=s1.id, teacher_id=teacher1.id)
    match = Event(name='Sports Day', date=date(2024, 5, 2), is_active=False,
                  school_id=s2.id, teacher_id=teacher2.id)
    db.session.add_all([fair, match])
    db.session.commit()

    return SimpleNamespace(
        s1=s1.id, s2=s2.id,
        main_admin=main_admin.id, admin1=admin1.id, admin2=admin2.id,
        teacher1=teacher1.id, teacher2=teacher2.id, parent=parent.id, pupil=pupil.id,
        alice=alice.id, bob=bob.id,
        fair=fair.id, match=match.id
    )


@pytest.fixture
def identity_for(seed):
    """Build an Identity for a seeded user, as the token decoder would."""
    def _identity(name):
        user = db.session.get(User, getattr(seed, name))
        return Identity(
            subject_id=user.id,
            role=user.role,
            school_id=user.school_id,
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1)
        )
    return _identity


@pytest.fixture
def headers(seed):
    """Bearer headers for a seeded user."""
    def _headers(name):
        user = db.session.get(User, getattr(seed, name))
        token = issue_token(user.id, user.role, user.school_id)
        return {'Authorization': f'Bearer {token}'}
    return _headers
