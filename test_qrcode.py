#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
QR 코드 상품 API 테스트
"""

from easypickup.common.models import db, QRCodeProduct


def test_register_and_lookup(client, admin_headers, driver_headers):
    response = client.post('/api/qrcode/product', headers=admin_headers, json={
        'qr_code': 'EASY100', 'product_name': '수납장', 'weight': '12.5', 'size': '800x400x1800'
    })
    body = response.get_json()
    assert response.status_code == 201
    assert body['product']['quantity'] == 1
    assert body['product']['weight'] == 12.5

    response = client.get('/api/qrcode/product/EASY100', headers=driver_headers)
    assert response.status_code == 200
    assert response.get_json()['product']['product_name'] == '수납장'


def test_register_validation(client, admin_headers, partner_headers):
    payload = {'qr_code': 'EASY100', 'product_name': '수납장'}
    assert client.post('/api/qrcode/product', headers=partner_headers, json=payload).status_code == 403
    assert client.post('/api/qrcode/product', headers=admin_headers, json={'qr_code': 'X'}).status_code == 400

    client.post('/api/qrcode/product', headers=admin_headers, json=payload)
    response = client.post('/api/qrcode/product', headers=admin_headers, json=payload)
    assert response.status_code == 400
    assert response.get_json()['error'] == '이미 등록된 QR 코드입니다'


def test_unknown_qr_code(client, driver_headers):
    response = client.get('/api/qrcode/product/NOPE', headers=driver_headers)
    assert response.status_code == 404
    assert response.get_json()['success'] is False


def test_list_ordered_by_code(client, driver_headers):
    for code in ('EASY003', 'EASY001', 'EASY002'):
        db.session.add(QRCodeProduct(qr_code=code, product_name=f'상품 {code}', quantity=2))
    db.session.commit()

    products = client.get('/api/qrcode/products', headers=driver_headers).get_json()['products']
    assert [item['qr_code'] for item in products] == ['EASY001', 'EASY002', 'EASY003']
