#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
테스트 공통 픽스처
SQLite 메모리 DB 로 테스트마다 새 앱 생성
"""

import pytest

from easypickup import create_app
from easypickup.common.models import db, User, Driver, Delivery, STATUS_RECEIVED
from easypickup.common.middleware import create_access_token
from easypickup.common.database import generate_unique_tracking_number


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', {
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'REQUEST_TYPE_FILE': str(tmp_path / 'request_type.txt'),
        'SESSION_FILE_DIR': str(tmp_path / 'sessions'),
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(username, role='user', password='pass1234', **fields):
        fields.setdefault('name', username)
        user = User(username=username, role=role, is_active=fields.pop('is_active', True), **fields)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def make_driver(app):
    def _make(username, password='pass1234', **fields):
        fields.setdefault('name', username)
        driver = Driver(username=username, is_active=fields.pop('is_active', True), **fields)
        driver.set_password(password)
        db.session.add(driver)
        db.session.commit()
        return driver
    return _make


@pytest.fixture
def make_delivery(app):
    def _make(**fields):
        values = {
            'sender_name': '한샘',
            'sender_address': '서울특별시 강남구 테헤란로 152',
            'customer_name': '홍길동',
            'customer_phone': '010-1234-5678',
            'customer_address': '경기도 성남시 분당구 판교역로 235',
            'status': STATUS_RECEIVED,
        }
        values.update(fields)
        delivery = Delivery(tracking_number=generate_unique_tracking_number(), **values)
        db.session.add(delivery)
        db.session.commit()
        return delivery
    return _make


def bearer(account):
    return {'Authorization': f'Bearer {create_access_token(account.to_token_payload())}'}


@pytest.fixture
def admin(make_user):
    return make_user('admin', role='admin')


@pytest.fixture
def manager(make_user):
    return make_user('manager1', role='manager')


@pytest.fixture
def partner(make_user):
    return make_user('partner1', role='user', company='한샘')


@pytest.fixture
def driver(make_driver):
    return make_driver('driver1', phone='010-1111-2222', vehicle_number='12가3456')


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def manager_headers(manager):
    return bearer(manager)


@pytest.fixture
def partner_headers(partner):
    return bearer(partner)


@pytest.fixture
def driver_headers(driver):
    return bearer(driver)


@pytest.fixture
def auth_header(app):
    return bearer
