#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
사용자 관리 API 테스트
"""

from easypickup.common.models import db, User, UserActivity


def test_list_users_pagination(client, admin, make_user, admin_headers):
    for index in range(12):
        make_user(f'partner{index:02d}', company='일룸' if index % 2 else '한샘')

    response = client.get('/api/users?page=2&limit=5', headers=admin_headers)
    body = response.get_json()
    assert response.status_code == 200
    assert len(body['users']) == 5
    assert body['pagination'] == {'page': 2, 'limit': 5, 'total': 13, 'totalPages': 3}


def test_list_users_search_and_role_filter(client, admin, make_user, admin_headers):
    make_user('hanssem', company='한샘')
    make_user('iloom', company='일룸')
    make_user('boss', role='manager')

    body = client.get('/api/users?search=일룸', headers=admin_headers).get_json()
    assert [user['username'] for user in body['users']] == ['iloom']

    body = client.get('/api/users?role=manager', headers=admin_headers).get_json()
    assert [user['username'] for user in body['users']] == ['boss']


def test_create_user_rules(client, admin_headers, manager_headers, partner):
    payload = {'username': 'created', 'password': 'abcd', 'name': '생성', 'role': 'manager'}
    assert client.post('/api/users', json=payload, headers=manager_headers).status_code == 403

    response = client.post('/api/users', json=payload, headers=admin_headers)
    assert response.status_code == 201
    assert db.session.get(User, response.get_json()['userId']).role == 'manager'

    duplicate = dict(payload, username='partner1')
    assert client.post('/api/users', json=duplicate, headers=admin_headers).status_code == 400

    bad_role = dict(payload, username='other', role='driver')
    assert client.post('/api/users', json=bad_role, headers=admin_headers).status_code == 400


def test_update_user(client, admin_headers, partner):
    response = client.put(f'/api/users/{partner.id}', json={'is_active': 'false', 'company': '일룸'},
                          headers=admin_headers)
    assert response.status_code == 200
    user = response.get_json()['user']
    assert user['is_active'] is False
    assert user['company'] == '일룸'

    assert client.put(f'/api/users/{partner.id}', json={}, headers=admin_headers).status_code == 400
    assert client.put('/api/users/9999', json={'name': 'x'}, headers=admin_headers).status_code == 404


def test_update_user_logs_activity(client, admin, admin_headers, partner):
    client.put(f'/api/users/{partner.id}', json={'phone': '010-0000-0000'}, headers=admin_headers)

    activity = UserActivity.query.filter_by(action='update_user').one()
    assert activity.user_id == admin.id
    assert activity.target_id == partner.id

    response = client.get('/api/users/activities/logs?action=update_user', headers=admin_headers)
    logs = response.get_json()['activities']
    assert logs[0]['username'] == 'admin'
    assert logs[0]['details'] == {'updated_fields': ['phone']}


def test_delete_user(client, admin, admin_headers, partner):
    response = client.delete(f'/api/users/{admin.id}', headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()['message'] == '자기 자신은 삭제할 수 없습니다.'

    assert client.delete(f'/api/users/{partner.id}', headers=admin_headers).status_code == 200
    assert db.session.get(User, partner.id) is None
    assert client.delete(f'/api/users/{partner.id}', headers=admin_headers).status_code == 404


def test_update_own_profile(client, partner_headers):
    response = client.put('/api/users/profile', headers=partner_headers, json={
        'name': '한샘 물류',
        'default_sender_name': '한샘 물류센터',
        'default_sender_address': '경기도 이천시 마장면'
    })
    body = response.get_json()
    assert response.status_code == 200
    assert body['user']['default_sender_name'] == '한샘 물류센터'

    assert client.put('/api/users/profile', headers=partner_headers, json={'name': ''}).status_code == 400
    response = client.put('/api/users/profile', headers=partner_headers, json={'name': 'a', 'password': '12'})
    assert response.status_code == 400


def test_driver_cannot_use_user_profile(client, driver_headers):
    response = client.put('/api/users/profile', headers=driver_headers, json={'name': '기사'})
    assert response.status_code == 403
