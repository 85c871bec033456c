#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
사용자 상세정보 API 테스트
"""


def test_user_detail_crud(client, partner, partner_headers):
    url = f'/api/user-detail/{partner.id}'

    assert client.get(url, headers=partner_headers).status_code == 404

    response = client.post(url, headers=partner_headers, json={
        'role': 'user', 'detail': {'warehouse': '이천', 'pallets': 3}
    })
    assert response.status_code == 201
    assert response.get_json()['data']['detail'] == {'warehouse': '이천', 'pallets': 3}

    assert client.post(url, headers=partner_headers, json={'role': 'user', 'detail': {'a': 1}}).status_code == 409

    response = client.put(url, headers=partner_headers, json={'detail': {'warehouse': '용인'}})
    body = response.get_json()['data']
    assert body['detail'] == {'warehouse': '용인'}
    assert body['role'] == 'user'

    assert client.delete(url, headers=partner_headers).status_code == 200
    assert client.delete(url, headers=partner_headers).status_code == 404


def test_put_creates_missing_detail(client, partner, partner_headers):
    url = f'/api/user-detail/{partner.id}'
    assert client.put(url, headers=partner_headers, json={'detail': {'a': 1}}).status_code == 400

    response = client.put(url, headers=partner_headers, json={'role': 'user', 'detail': {'a': 1}})
    assert response.status_code == 201


def test_user_detail_validation(client, partner, partner_headers):
    assert client.post(f'/api/user-detail/{partner.id}', headers=partner_headers,
                       json={'role': 'user'}).status_code == 400
    assert client.post('/api/user-detail/9999', headers=partner_headers,
                       json={'role': 'user', 'detail': {'a': 1}}).status_code == 404
    assert client.get(f'/api/user-detail/{partner.id}').status_code == 401
