#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
인증 API 테스트
회원가입, 로그인(사용자/기사), 토큰 검증, 역할 제한
"""

import bcrypt

from easypickup.common.models import db, User


def test_register_and_login(client):
    response = client.post('/api/auth/register', json={
        'username': 'newpartner', 'password': 'abcd1234', 'name': '신규 파트너', 'company': '일룸'
    })
    assert response.status_code == 201
    assert response.get_json()['userId']

    response = client.post('/api/auth/login', json={'username': 'newpartner', 'password': 'abcd1234'})
    body = response.get_json()
    assert response.status_code == 200
    assert body['message'] == '로그인 성공'
    assert body['user']['role'] == 'user'
    assert body['token']
    assert 'password' not in body['user']


def test_register_validation(client, partner):
    assert client.post('/api/auth/register', json={'username': 'x'}).status_code == 400
    response = client.post('/api/auth/register', json={'username': 'short', 'password': '123', 'name': '짧음'})
    assert response.status_code == 400
    response = client.post('/api/auth/register', json={'username': 'partner1', 'password': '1234', 'name': '중복'})
    assert response.status_code == 409


def test_register_ignores_role_for_anonymous(client):
    response = client.post('/api/auth/register', json={
        'username': 'sneaky', 'password': '1234', 'name': '권한요청', 'role': 'admin'
    })
    assert response.status_code == 201
    assert User.query.filter_by(username='sneaky').first().role == 'user'


def test_admin_can_register_with_role(client, admin_headers):
    response = client.post('/api/auth/register', headers=admin_headers, json={
        'username': 'mgr', 'password': '1234', 'name': '매니저', 'role': 'manager'
    })
    assert response.status_code == 201
    assert User.query.filter_by(username='mgr').first().role == 'manager'


def test_check_username(client, partner):
    assert client.get('/api/auth/check-username/partner1').get_json()['available'] is False
    assert client.get('/api/auth/check-username/someone').get_json()['available'] is True


def test_login_failures(client, make_user):
    make_user('sleeping', is_active=False)
    response = client.post('/api/auth/login', json={'username': 'nobody', 'password': 'x'})
    assert response.status_code == 401
    response = client.post('/api/auth/login', json={'username': 'sleeping', 'password': 'pass1234'})
    assert response.status_code == 401
    assert client.post('/api/auth/login', json={}).status_code == 400


def test_driver_login(client, driver):
    response = client.post('/api/auth/login', json={'username': 'driver1', 'password': 'pass1234'})
    body = response.get_json()
    assert response.status_code == 200
    assert body['user']['role'] == 'driver'
    assert body['user']['id'] == driver.id


def test_legacy_bcrypt_password_is_rehashed(client, partner):
    partner.password = bcrypt.hashpw(b'legacy-pw', bcrypt.gensalt()).decode().replace('$2b$', '$2y$', 1)
    db.session.commit()

    response = client.post('/api/auth/login', json={'username': 'partner1', 'password': 'legacy-pw'})
    assert response.status_code == 200

    refreshed = db.session.get(User, partner.id)
    assert not refreshed.password.startswith('$2')
    assert refreshed.verify_password('legacy-pw')


def test_me_with_token(client, partner, partner_headers):
    response = client.get('/api/auth/me', headers=partner_headers)
    body = response.get_json()
    assert response.status_code == 200
    assert body['authenticated'] is True
    assert body['user']['username'] == 'partner1'


def test_me_rejects_deactivated_account(client, partner, partner_headers):
    partner.is_active = False
    db.session.commit()
    assert client.get('/api/auth/me', headers=partner_headers).status_code == 401


def test_token_errors(client):
    assert client.get('/api/auth/me').status_code == 401
    response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})
    assert response.status_code == 403
    assert response.get_json()['message'] == '유효하지 않은 토큰입니다.'


def test_session_login_is_remembered(client, partner):
    client.post('/api/auth/login', json={'username': 'partner1', 'password': 'pass1234'})
    response = client.get('/api/auth/me')
    assert response.status_code == 200
    assert response.get_json()['user']['username'] == 'partner1'

    client.post('/api/auth/logout')
    assert client.get('/api/auth/me').status_code == 401


def test_role_guard(client, partner_headers, manager_headers):
    assert client.get('/api/users', headers=partner_headers).status_code == 403
    assert client.get('/api/users', headers=manager_headers).status_code == 200
