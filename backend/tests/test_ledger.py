"""Attendance ledger: uniqueness, history and deletion rights."""
import threading
from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from config import TestingConfig, config_map
from school_attendance import create_app, db
from school_attendance.exceptions import (
    AccessDenied, DuplicateAttendance, RecordNotFound, StudentNotFound
)
from school_attendance.models import AttendanceRecord, School, Student
from school_attendance.services.attendance_ledger import AttendanceLedger


def test_record_snapshots_student_name(seed):
    record = AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by=seed.teacher1)

    assert record.id is not None
    assert record.student_name == 'Alice Smith'
    assert record.scanned_by == str(seed.teacher1)
    assert record.timestamp is not None


def test_second_record_for_same_pair_is_duplicate(seed):
    AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t')
    with pytest.raises(DuplicateAttendance):
        AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t')

    assert AttendanceRecord.query.filter_by(student_id=seed.alice).count() == 1


def test_same_student_other_event_is_fine(seed):
    AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t')
    AttendanceLedger.record(seed.alice, 'Science Fair 2', scanned_by='t')
    assert AttendanceRecord.query.filter_by(student_id=seed.alice).count() == 2


def test_uniqueness_is_enforced_by_storage(seed):
    """A writer that skips the ledger still cannot create a second row."""
    AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t')

    db.session.add(AttendanceRecord(
        student_id=seed.alice, student_name='Alice Smith',
        event_name='Science Fair', scanned_by='other'
    ))
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_event_name_is_matched_literally(seed):
    AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t')
    AttendanceLedger.record(seed.alice, 'science fair', scanned_by='t')
    assert AttendanceRecord.query.filter_by(student_id=seed.alice).count() == 2


def test_record_unknown_student(seed):
    with pytest.raises(StudentNotFound):
        AttendanceLedger.record(424242, 'Science Fair', scanned_by='t')


def test_explicit_timestamp_is_kept(seed):
    when = datetime(2024, 5, 1, 9, 30)
    record = AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t', timestamp=when)
    assert record.timestamp == when


def test_list_by_event_is_scoped(seed, identity_for):
    AttendanceLedger.record(seed.alice, 'Open Day', scanned_by='t')
    AttendanceLedger.record(seed.bob, 'Open Day', scanned_by='t')

    assert len(AttendanceLedger.list_by_event('Open Day', identity_for('main_admin'))) == 2
    assert [r.student_id for r in AttendanceLedger.list_by_event('Open Day', identity_for('teacher1'))] == [seed.alice]
    assert [r.student_id for r in AttendanceLedger.list_by_event('Open Day', identity_for('admin2'))] == [seed.bob]


def test_list_by_student_out_of_scope(seed, identity_for):
    AttendanceLedger.record(seed.bob, 'Sports Day', scanned_by='t')

    with pytest.raises(AccessDenied):
        AttendanceLedger.list_by_student(seed.bob, identity_for('teacher1'))
    assert len(AttendanceLedger.list_by_student(seed.bob, identity_for('teacher2'))) == 1


def test_parent_reads_child_history(seed, identity_for):
    AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t')
    records = AttendanceLedger.list_by_student(seed.alice, identity_for('parent'))
    assert [r.event_name for r in records] == ['Science Fair']


def test_exists(seed, identity_for):
    AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t')
    assert AttendanceLedger.exists(seed.alice, 'Science Fair', identity_for('teacher1'))
    assert not AttendanceLedger.exists(seed.alice, 'Sports Day', identity_for('teacher1'))
    # Out of scope reads as absent
    assert not AttendanceLedger.exists(seed.alice, 'Science Fair', identity_for('teacher2'))


def test_delete_by_own_school_admin(seed, identity_for):
    record = AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t')
    record_id = record.id

    assert AttendanceLedger.delete(record_id, identity_for('admin1')) is True
    assert db.session.get(AttendanceRecord, record_id) is None

    # The pair may be recorded again once deleted
    AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t')


@pytest.mark.parametrize('name', ['admin2', 'teacher1', 'parent'])
def test_delete_refused(seed, identity_for, name):
    record_id = AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t').id
    with pytest.raises(AccessDenied):
        AttendanceLedger.delete(record_id, identity_for(name))
    assert db.session.get(AttendanceRecord, record_id) is not None


def test_delete_missing_record(seed, identity_for):
    with pytest.raises(RecordNotFound):
        AttendanceLedger.delete(999, identity_for('main_admin'))


def test_history_survives_student_deletion(seed, identity_for):
    from school_attendance.services.student_service import StudentService

    record_id = AttendanceLedger.record(seed.alice, 'Science Fair', scanned_by='t').id
    StudentService.delete_student(seed.alice, identity_for('admin1'))

    db.session.expire_all()
    assert db.session.get(Student, seed.alice) is None
    record = db.session.get(AttendanceRecord, record_id)
    assert record is not None
    assert record.student_id is None
    assert record.student_name == 'Alice Smith'


@pytest.fixture
def file_app(tmp_path, monkeypatch):
    """An app on a file database, so each thread gets its own connection."""
    class FileTestingConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'ledger.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'timeout': 30}}

    monkeypatch.setitem(config_map, 'file_testing', FileTestingConfig)
    app = create_app('file_testing')
    with app.app_context():
        db.create_all()
        school = School(name='North High')
        db.session.add(school)
        db.session.flush()
        student = Student(name='Alice Smith', group='A1', course=2, specialty='Physics',
                          qr_code='abc-123', school_id=school.id)
        db.session.add(student)
        db.session.commit()
        app.config['STUDENT_ID'] = student.id
        db.session.remove()

    yield app

    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def test_concurrent_records_yield_one_success(file_app):
    workers = 8
    student_id = file_app.config['STUDENT_ID']
    barrier = threading.Barrier(workers)
    results = []
    lock = threading.Lock()

    def scan():
        with file_app.app_context():
            barrier.wait()
            try:
                AttendanceLedger.record(student_id, 'E', scanned_by='t', student_name='Alice Smith')
                result = 'ok'
            except DuplicateAttendance:
                result = 'duplicate'
            except Exception as e:
                result = repr(e)
            finally:
                db.session.remove()
            with lock:
                results.append(result)

    threads = [threading.Thread(target=scan) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count('ok') == 1, results
    assert results.count('duplicate') == workers - 1, results
    with file_app.app_context():
        assert AttendanceRecord.query.filter_by(student_id=student_id, event_name='E').count() == 1
