"""Attendance endpoints."""
import json

from school_attendance import db
from school_attendance.models import AttendanceRecord, Event


def test_scan_success(client, seed, headers):
    response = client.post('/api/attendance/scan', json={'qr_code': 'abc-123'}, headers=headers('teacher1'))

    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['error'] is False
    assert data['data']['success'] is True
    assert data['data']['event_name'] == 'Science Fair'
    assert data['data']['student_name'] == 'Alice Smith'


def test_scan_twice(client, seed, headers):
    client.post('/api/attendance/scan', json={'qr_code': 'abc-123'}, headers=headers('teacher1'))
    response = client.post('/api/attendance/scan', json={'qr_code': 'abc-123'}, headers=headers('teacher1'))

    assert response.status_code == 409
    data = json.loads(response.data)
    assert data['error'] is True
    assert data['code'] == 'duplicate_attendance'


def test_scan_no_active_event(client, seed, headers):
    db.session.get(Event, seed.fair).is_active = False
    db.session.commit()

    response = client.post('/api/attendance/scan', json={'qr_code': 'abc-123'}, headers=headers('teacher1'))
    assert response.status_code == 422
    assert json.loads(response.data)['code'] == 'no_active_event'


def test_scan_cross_school(client, seed, headers):
    response = client.post('/api/attendance/scan', json={'qr_code': 'xyz-789'}, headers=headers('teacher1'))
    assert response.status_code == 403
    assert json.loads(response.data)['code'] == 'access_denied'


def test_scan_unknown(client, seed, headers):
    response = client.post('/api/attendance/scan', json={'qr_code': 'does-not-exist'}, headers=headers('teacher1'))
    assert response.status_code == 404
    assert json.loads(response.data)['code'] == 'student_not_found'


def test_scan_requires_string(client, seed, headers):
    response = client.post('/api/attendance/scan', json={'qr_code': 5}, headers=headers('teacher1'))
    assert response.status_code == 400


def test_scan_requires_scanner_role(client, seed, headers):
    response = client.post('/api/attendance/scan', json={'qr_code': 'abc-123'}, headers=headers('parent'))
    assert response.status_code == 403


def test_scan_requires_token(client, seed):
    response = client.post('/api/attendance/scan', json={'qr_code': 'abc-123'})
    assert response.status_code == 401


def test_backfill(client, seed, headers):
    response = client.post('/api/attendance', json={
        'student_id': seed.alice,
        'event_name': 'Parents Evening',
        'timestamp': '2024-05-01T10:00:00+02:00'
    }, headers=headers('admin1'))

    assert response.status_code == 201
    data = json.loads(response.data)['data']
    assert data['event_name'] == 'Parents Evening'
    assert data['timestamp'] == '2024-05-01T08:00:00'

    response = client.post('/api/attendance', json={
        'student_id': seed.alice, 'event_name': 'Parents Evening'
    }, headers=headers('admin1'))
    assert response.status_code == 409


def test_backfill_other_school(client, seed, headers):
    response = client.post('/api/attendance', json={
        'student_id': seed.bob, 'event_name': 'Parents Evening'
    }, headers=headers('admin1'))
    assert response.status_code == 403


def test_backfill_teacher_forbidden(client, seed, headers):
    response = client.post('/api/attendance', json={
        'student_id': seed.alice, 'event_name': 'Parents Evening'
    }, headers=headers('teacher1'))
    assert response.status_code == 403


def test_listing_is_scoped(client, seed, headers):
    client.post('/api/attendance/scan', json={'qr_code': 'abc-123'}, headers=headers('teacher1'))

    response = client.get('/api/attendance', headers=headers('admin1'))
    assert len(json.loads(response.data)['data']) == 1

    response = client.get('/api/attendance', headers=headers('admin2'))
    assert json.loads(response.data)['data'] == []

    response = client.get('/api/attendance/event/Science%20Fair', headers=headers('parent'))
    assert len(json.loads(response.data)['data']) == 1


def test_student_history_out_of_scope(client, seed, headers):
    response = client.get(f'/api/attendance/student/{seed.bob}', headers=headers('teacher1'))
    assert response.status_code == 403

    response = client.get(f'/api/attendance/student/{seed.alice}', headers=headers('teacher1'))
    assert response.status_code == 200


def test_check(client, seed, headers):
    client.post('/api/attendance/scan', json={'qr_code': 'abc-123'}, headers=headers('teacher1'))

    response = client.get(
        f'/api/attendance/check?student_id={seed.alice}&event_name=Science%20Fair', headers=headers('teacher1')
    )
    assert json.loads(response.data)['data']['exists'] is True

    response = client.get('/api/attendance/check', headers=headers('teacher1'))
    assert response.status_code == 400


def test_delete_record(client, seed, headers):
    response = client.post('/api/attendance/scan', json={'qr_code': 'abc-123'}, headers=headers('teacher1'))
    record_id = json.loads(response.data)['data']['record_id']

    assert client.delete(f'/api/attendance/{record_id}', headers=headers('teacher1')).status_code == 403
    assert client.delete(f'/api/attendance/{record_id}', headers=headers('admin2')).status_code == 403
    assert client.delete(f'/api/attendance/{record_id}', headers=headers('admin1')).status_code == 200
    assert client.delete(f'/api/attendance/{record_id}', headers=headers('admin1')).status_code == 404

    db.session.expire_all()
    assert db.session.get(AttendanceRecord, record_id) is None


def test_scan_unencodable_code(client, seed, headers):
    response = client.post('/api/attendance/scan', data='{"qr_code": "\\ud800"}',
                           content_type='application/json', headers=headers('teacher1'))
    assert response.status_code == 404
    assert json.loads(response.data)['code'] == 'student_not_found'
