#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
관리자 테스트 도구 / 스키마 조회 API 테스트
"""

from easypickup.common.models import User, Driver, Delivery, STATUS_RECEIVED
from easypickup.common.migrations import LATEST_VERSION
from easypickup.services.fixtures import SEED_PASSWORD


def test_tools_require_admin(client, manager_headers):
    assert client.get('/api/test/connection', headers=manager_headers).status_code == 403
    assert client.post('/api/test/create-driver').status_code == 401


def test_connection_and_api_status(client, admin_headers):
    body = client.get('/api/test/connection', headers=admin_headers).get_json()
    assert body['connected'] is True
    assert body['dialect'] == 'sqlite'

    body = client.get('/api/test/api-status', headers=admin_headers).get_json()
    assert body['count'] == len(body['routes'])
    assert any(route['rule'] == '/api/deliveries' for route in body['routes'])


def test_create_random_accounts(client, admin_headers):
    response = client.post('/api/test/create-driver', headers=admin_headers)
    assert response.status_code == 201
    driver = response.get_json()['driver']
    assert driver['defaultPassword'] == SEED_PASSWORD

    login = client.post('/api/auth/login', json={'username': driver['username'], 'password': SEED_PASSWORD})
    assert login.status_code == 200

    response = client.post('/api/test/create-3-partners', headers=admin_headers)
    assert len(response.get_json()['users']) == 3
    assert client.get('/api/test/partners', headers=admin_headers).get_json()['count'] == 3


def test_create_delivery_needs_partner_and_driver(client, admin_headers):
    response = client.post('/api/test/create-delivery', headers=admin_headers)
    assert response.status_code == 400

    client.post('/api/test/create-partner', headers=admin_headers)
    assert client.post('/api/test/create-delivery', headers=admin_headers).status_code == 400

    client.post('/api/test/create-driver', headers=admin_headers)
    response = client.post('/api/test/create-delivery', headers=admin_headers, json={'visit_date': '2030-04-01'})
    body = response.get_json()['delivery']
    assert response.status_code == 201
    assert body['visit_date'] == '2030-04-01'
    assert body['driver_id'] == Driver.query.one().id


def test_create_custom_delivery(client, admin_headers):
    response = client.post('/api/test/create-custom-delivery', headers=admin_headers, json={
        'receiver_name': '이테스트', 'status': STATUS_RECEIVED, 'floor_count': '5'
    })
    body = response.get_json()['delivery']
    assert response.status_code == 201
    assert body['customer_name'] == '이테스트'
    assert body['floor_count'] == 5
    assert body['tracking_number'].startswith('MD')

    response = client.post('/api/test/create-custom-delivery', headers=admin_headers, json={'status': 'done'})
    assert response.status_code == 400


def test_bulk_delete(client, admin, admin_headers, make_user, make_driver, make_delivery):
    make_user('p1')
    make_driver('d1')
    make_delivery()

    assert client.delete('/api/test/partners', headers=admin_headers).get_json()['deletedCount'] == 1
    assert client.delete('/api/test/drivers', headers=admin_headers).get_json()['deletedCount'] == 1
    assert client.delete('/api/test/deliveries', headers=admin_headers).get_json()['deletedCount'] == 1

    assert User.query.count() == 1
    assert Driver.query.count() == 0
    assert Delivery.query.count() == 0


def test_schema_endpoints(client, admin_headers, partner_headers):
    body = client.get('/api/schema', headers=partner_headers).get_json()
    assert body['schemaVersion'] == LATEST_VERSION
    assert 'deliveries' in [table['name'] for table in body['tables']]

    body = client.get('/api/schema/table/deliveries', headers=partner_headers).get_json()
    assert 'tracking_number' in [column['name'] for column in body['columns']]
    assert client.get('/api/schema/table/nope', headers=partner_headers).status_code == 404

    body = client.get('/api/test/db-schema', headers=admin_headers).get_json()
    assert body['database']['schemaVersion'] == LATEST_VERSION

    body = client.get('/api/test/table-relationships', headers=admin_headers).get_json()
    assert len(body['relationships']) > 0
