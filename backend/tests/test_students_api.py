"""Student management endpoints."""
import json

import pytest

from school_attendance.exceptions import StudentNotFound
from school_attendance.services.student_service import StudentService

NEW_STUDENT = {'name': 'Carol White', 'group': 'A2', 'course': 1, 'specialty': 'Biology'}


def test_list_is_scoped(client, seed, headers):
    response = client.get('/api/students', headers=headers('teacher1'))
    assert [s['id'] for s in json.loads(response.data)['data']] == [seed.alice]

    response = client.get('/api/students', headers=headers('main_admin'))
    assert len(json.loads(response.data)['data']) == 2

    response = client.get('/api/students', headers=headers('parent'))
    assert [s['id'] for s in json.loads(response.data)['data']] == [seed.alice]


def test_get_out_of_scope(client, seed, headers):
    assert client.get(f'/api/students/{seed.bob}', headers=headers('admin1')).status_code == 403
    assert client.get('/api/students/999', headers=headers('admin1')).status_code == 404


def test_lookup_by_qr(client, seed, headers):
    response = client.get('/api/students/qr/abc-123', headers=headers('teacher1'))
    assert response.status_code == 200
    assert json.loads(response.data)['data']['name'] == 'Alice Smith'

    assert client.get('/api/students/qr/xyz-789', headers=headers('teacher1')).status_code == 403
    assert client.get('/api/students/qr/nope', headers=headers('teacher1')).status_code == 404
    assert client.get('/api/students/qr/abc-123', headers=headers('parent')).status_code == 403


def test_school_admin_creates_in_own_school(client, seed, headers):
    response = client.post('/api/students', json=dict(NEW_STUDENT, school_id=seed.s2), headers=headers('admin1'))

    assert response.status_code == 201
    data = json.loads(response.data)['data']
    assert data['school_id'] == seed.s1
    assert data['qr_code']


def test_create_with_explicit_qr(client, seed, headers):
    response = client.post('/api/students', json=dict(NEW_STUDENT, qr_code='carol-qr'), headers=headers('admin1'))
    assert json.loads(response.data)['data']['qr_code'] == 'carol-qr'

    response = client.post('/api/students', json=dict(NEW_STUDENT, qr_code='abc-123'), headers=headers('admin1'))
    assert response.status_code == 409
    assert json.loads(response.data)['code'] == 'duplicate_qr_code'


def test_create_validation(client, seed, headers):
    response = client.post('/api/students', json=dict(NEW_STUDENT, course=5), headers=headers('admin1'))
    assert response.status_code == 400

    response = client.post('/api/students', json={'name': 'Carol'}, headers=headers('admin1'))
    assert response.status_code == 400

    response = client.post('/api/students', json=NEW_STUDENT, headers=headers('main_admin'))
    assert response.status_code == 400


def test_teacher_cannot_create(client, seed, headers):
    response = client.post('/api/students', json=NEW_STUDENT, headers=headers('teacher1'))
    assert response.status_code == 403


def test_update(client, seed, headers):
    response = client.put(f'/api/students/{seed.alice}', json={'group': 'A9'}, headers=headers('admin1'))
    assert response.status_code == 200
    assert json.loads(response.data)['data']['group'] == 'A9'

    response = client.put(f'/api/students/{seed.alice}', json={'qr_code': 'new'}, headers=headers('admin1'))
    assert response.status_code == 400

    response = client.put(f'/api/students/{seed.alice}', json={'school_id': seed.s2}, headers=headers('admin1'))
    assert response.status_code == 400

    response = client.put(f'/api/students/{seed.bob}', json={'group': 'B9'}, headers=headers('admin1'))
    assert response.status_code == 403


def test_main_admin_moves_student(client, seed, headers):
    response = client.put(f'/api/students/{seed.alice}', json={'school_id': seed.s2}, headers=headers('main_admin'))
    assert json.loads(response.data)['data']['school_id'] == seed.s2


def test_delete(client, seed, headers):
    assert client.delete(f'/api/students/{seed.bob}', headers=headers('admin1')).status_code == 403
    assert client.delete(f'/api/students/{seed.alice}', headers=headers('admin1')).status_code == 200
    assert client.get(f'/api/students/{seed.alice}', headers=headers('admin1')).status_code == 404


def test_lookup_by_unencodable_qr(seed, identity_for):
    with pytest.raises(StudentNotFound):
        StudentService.get_by_qr('\ud800', identity_for('teacher1'))
