#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
상품 / 상품 사진 API 테스트
"""

import io
import os

import pytest

from easypickup.common.models import db, Product, ProductPhoto
from easypickup.products.photos import build_photo_filename, upload_dir


@pytest.fixture
def product(partner):
    item = Product(user_id=partner.id, name='4인용 식탁', maincode='TBL', subcode='01', weight=35)
    db.session.add(item)
    db.session.commit()
    return item


def _image(name='table.jpg', size=128):
    return (io.BytesIO(b'\xff\xd8' + b'0' * size), name, 'image/jpeg')


def test_create_and_list_products(client, partner_headers):
    response = client.post('/api/products', headers=partner_headers, json={
        'name': '3인용 소파', 'maincode': 'SOFA', 'weight': '42.5', 'memo': '가죽'
    })
    assert response.status_code == 201
    product_id = response.get_json()['productId']

    body = client.get('/api/products', headers=partner_headers).get_json()
    assert body['total'] == 1
    assert body['products'][0]['id'] == product_id
    assert body['products'][0]['weight'] == 42.5

    assert client.post('/api/products', headers=partner_headers, json={'name': ' '}).status_code == 400
    assert client.post('/api/products', headers=partner_headers,
                       json={'name': '의자', 'cost1': '비쌈'}).status_code == 400


def test_products_are_scoped_to_owner(client, product, make_user, admin_headers, auth_header):
    other_headers = auth_header(make_user('partner2'))

    assert client.get('/api/products', headers=other_headers).get_json()['total'] == 0
    assert client.get(f'/api/products/{product.id}', headers=other_headers).status_code == 404
    assert client.put(f'/api/products/{product.id}', headers=other_headers, json={'name': 'x'}).status_code == 404
    assert client.delete(f'/api/products/{product.id}', headers=other_headers).status_code == 404

    assert client.get(f'/api/products/{product.id}', headers=admin_headers).status_code == 200


def test_search_products(client, product, partner_headers):
    body = client.get('/api/products?search=TBL', headers=partner_headers).get_json()
    assert body['total'] == 1

    body = client.get('/api/products/search?q=식탁', headers=partner_headers).get_json()
    assert [item['name'] for item in body['products']] == ['4인용 식탁']
    assert client.get('/api/products/search', headers=partner_headers).status_code == 400


def test_update_product(client, product, partner_headers):
    response = client.put(f'/api/products/{product.id}', headers=partner_headers,
                          json={'name': '6인용 식탁', 'size': '1800x900'})
    body = response.get_json()['product']
    assert body['name'] == '6인용 식탁'
    assert body['size'] == '1800x900'
    assert body['maincode'] is None

    assert client.put(f'/api/products/{product.id}', headers=partner_headers, json={}).status_code == 400


def test_build_photo_filename():
    assert build_photo_filename(7, '../식탁 사진.JPG', now_ms=1700000000000) == '1700000000000_7_photo.JPG'
    assert build_photo_filename(7, 'my table.png', now_ms=1) == '1_7_my_table.png'


def test_upload_photo(client, app, product, partner_headers):
    response = client.post('/api/product-photos/upload', headers=partner_headers,
                           data={'product_id': str(product.id), 'photo': _image()},
                           content_type='multipart/form-data')
    body = response.get_json()
    assert response.status_code == 201
    assert body['photo']['original_name'] == 'table.jpg'
    assert body['photo']['file_size'] == 130

    saved = os.path.join(app.config['UPLOAD_FOLDER'], body['photo']['filename'])
    assert os.path.exists(saved)

    assert body['photo']['url'] == f"/api/product-photos/files/{body['photo']['filename']}"
    served = client.get(body['photo']['url'])
    assert served.status_code == 200
    assert served.data == b'\xff\xd8' + b'0' * 128
    served.close()

    photos = client.get(f'/api/product-photos/product/{product.id}', headers=partner_headers).get_json()['photos']
    assert len(photos) == 1

    assert client.delete(f"/api/product-photos/{body['photo']['id']}", headers=partner_headers).status_code == 200
    assert not os.path.exists(saved)


def test_upload_photo_validation(client, app, product, partner_headers):
    url = '/api/product-photos/upload'

    response = client.post(url, headers=partner_headers, data={'photo': _image()},
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.get_json()['message'] == '상품 ID가 필요합니다.'

    response = client.post(url, headers=partner_headers, content_type='multipart/form-data', data={
        'product_id': str(product.id), 'photo': (io.BytesIO(b'hello'), 'note.txt', 'text/plain')
    })
    assert response.status_code == 400

    app.config['MAX_PHOTO_SIZE'] = 64
    response = client.post(url, headers=partner_headers, content_type='multipart/form-data',
                           data={'product_id': str(product.id), 'photo': _image(size=100)})
    assert response.status_code == 413
    assert ProductPhoto.query.count() == 0


def test_upload_photo_for_other_partners_product(client, product, make_user, auth_header):
    headers = auth_header(make_user('partner2'))
    response = client.post('/api/product-photos/upload', headers=headers, content_type='multipart/form-data',
                           data={'product_id': str(product.id), 'photo': _image()})
    assert response.status_code == 404


def test_delete_product_removes_photos(client, app, product, partner_headers):
    body = client.post('/api/product-photos/upload', headers=partner_headers, content_type='multipart/form-data',
                       data={'product_id': str(product.id), 'photo': _image()}).get_json()
    saved = os.path.join(app.config['UPLOAD_FOLDER'], body['photo']['filename'])

    assert client.delete(f'/api/products/{product.id}', headers=partner_headers).status_code == 200
    assert ProductPhoto.query.count() == 0
    assert Product.query.count() == 0
    assert not os.path.exists(saved)


def test_upload_dir_is_relative_to_project_root(app, tmp_path):
    app.root_path = str(tmp_path / 'project' / 'easypickup')
    app.config['UPLOAD_FOLDER'] = os.path.join('uploads', 'products')

    assert upload_dir() == str(tmp_path / 'project' / 'uploads' / 'products')
    assert os.path.isdir(upload_dir())


def test_missing_photo_file(client):
    assert client.get('/api/product-photos/files/nope.jpg').status_code == 404
