"""Event endpoints."""
import json


def test_list_is_scoped(client, seed, headers):
    response = client.get('/api/events', headers=headers('teacher2'))
    assert [e['id'] for e in json.loads(response.data)['data']] == [seed.match]

    response = client.get('/api/events', headers=headers('parent'))
    assert [e['id'] for e in json.loads(response.data)['data']] == [seed.fair]


def test_current_active(client, seed, headers):
    response = client.get('/api/events/active/current', headers=headers('teacher1'))
    data = json.loads(response.data)['data']
    assert data['name'] == 'Science Fair'
    assert data['date'] == '2024-05-01'

    response = client.get('/api/events/active/current', headers=headers('teacher2'))
    assert response.status_code == 200
    assert json.loads(response.data).get('data') is None


def test_toggle(client, seed, headers):
    response = client.put(f'/api/events/{seed.match}/active', json={'is_active': True}, headers=headers('teacher2'))
    assert response.status_code == 200
    assert json.loads(response.data)['data']['is_active'] is True

    response = client.get('/api/events/active', headers=headers('main_admin'))
    assert {e['id'] for e in json.loads(response.data)['data']} == {seed.fair, seed.match}


def test_toggle_validation_and_scope(client, seed, headers):
    url = f'/api/events/{seed.match}/active'
    assert client.put(url, json={'is_active': 'yes'}, headers=headers('teacher2')).status_code == 400
    assert client.put(url, json={'is_active': True}, headers=headers('teacher1')).status_code == 403
    assert client.put(url, json={'is_active': True}, headers=headers('parent')).status_code == 403
    assert client.put('/api/events/999/active', json={'is_active': True},
                      headers=headers('teacher1')).status_code == 404


def test_create(client, seed, headers):
    response = client.post('/api/events', json={
        'name': 'Chess Match', 'date': '2024-07-01', 'is_active': True
    }, headers=headers('teacher2'))
    assert response.status_code == 201
    data = json.loads(response.data)['data']
    assert data['school_id'] == seed.s2
    assert data['teacher_id'] == seed.teacher2

    response = client.post('/api/events', json={'name': 'Chess Match', 'date': '2024-07-02'},
                           headers=headers('teacher1'))
    assert response.status_code == 409
    assert json.loads(response.data)['code'] == 'duplicate_event'


def test_delete(client, seed, headers):
    assert client.delete(f'/api/events/{seed.fair}', headers=headers('teacher1')).status_code == 403
    assert client.delete(f'/api/events/{seed.fair}', headers=headers('admin2')).status_code == 403
    assert client.delete(f'/api/events/{seed.fair}', headers=headers('admin1')).status_code == 200
    assert client.get(f'/api/events/{seed.fair}', headers=headers('admin1')).status_code == 404
