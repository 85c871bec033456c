#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
공통 모듈 테스트
재시도 실행, 운송장 번호, 컬럼 값 변환, 비밀번호 해시, 날짜/페이지네이션 유틸
"""

from datetime import datetime, date
from decimal import Decimal

import bcrypt
import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from easypickup import create_app
from easypickup.common.database import (
    execute_with_retry, is_transient_error, generate_tracking_number, generate_unique_tracking_number,
    coerce_column_value,
)
from easypickup.common.models import Delivery
from easypickup.common.ratelimit import is_internal_address
from easypickup.common.security import hash_password, verify_password, is_legacy_hash
from easypickup.common.utils import (
    is_valid_date_string, parse_date, parse_datetime, format_db_datetime, build_pagination, load_json_text,
)


def _flaky(failures):
    calls = {'count': 0}

    def func():
        calls['count'] += 1
        if calls['count'] <= failures:
            raise OperationalError('SELECT 1', {}, Exception('connection lost'))
        return 'ok'
    return func, calls


def test_retry_recovers_from_transient_errors(app):
    func, calls = _flaky(2)
    assert execute_with_retry(func, delay=0) == 'ok'
    assert calls['count'] == 3


def test_retry_gives_up(app):
    func, calls = _flaky(5)
    with pytest.raises(OperationalError):
        execute_with_retry(func, max_retries=2, delay=0, backoff='exponential')
    assert calls['count'] == 2


def test_retry_does_not_retry_other_errors(app):
    calls = []

    def func():
        calls.append(1)
        raise KeyError('boom')

    with pytest.raises(KeyError):
        execute_with_retry(func, delay=0)
    assert len(calls) == 1


def test_retry_does_not_retry_integrity_errors(app):
    calls = []

    def func():
        calls.append(1)
        raise IntegrityError('INSERT INTO deliveries', {}, Exception('Duplicate entry'))

    with pytest.raises(IntegrityError):
        execute_with_retry(func, delay=0)
    assert len(calls) == 1


def test_retry_on_invalidated_connection(app):
    calls = []

    def func():
        calls.append(1)
        if len(calls) == 1:
            raise DBAPIError('SELECT 1', {}, Exception('server has gone away'), connection_invalidated=True)
        return 'ok'

    assert execute_with_retry(func, delay=0) == 'ok'
    assert len(calls) == 2
    assert is_transient_error(OperationalError('SELECT 1', {}, Exception('timeout')))
    assert not is_transient_error(DBAPIError('SELECT 1', {}, Exception('syntax')))


def test_tracking_number_format():
    assert generate_tracking_number(datetime(2030, 1, 2, 3, 4, 5, 678000)) == 'MD20300102030405678'


def test_unique_tracking_number_skips_existing(app, make_delivery):
    delivery = make_delivery()
    assert generate_unique_tracking_number() != delivery.tracking_number


def test_coerce_column_value():
    assert coerce_column_value(Delivery, 'floor_count', '3') == 3
    assert coerce_column_value(Delivery, 'floor_count', '') is None
    assert coerce_column_value(Delivery, 'fragile', 'Y') is True
    assert coerce_column_value(Delivery, 'fragile', 0) is False
    assert coerce_column_value(Delivery, 'visit_date', '2030-05-01') == date(2030, 5, 1)
    assert coerce_column_value(Delivery, 'delivery_fee', '15000.5') == Decimal('15000.5')
    assert coerce_column_value(Delivery, 'main_memo', '') == ''

    with pytest.raises(ValueError):
        coerce_column_value(Delivery, 'delivery_fee', '만원')
    with pytest.raises(ValueError):
        coerce_column_value(Delivery, 'floor_count', '삼층')


def test_password_hashing():
    hashed = hash_password('secret')
    assert hashed != 'secret'
    assert verify_password(hashed, 'secret')
    assert not verify_password(hashed, 'wrong')
    assert not is_legacy_hash(hashed)


@pytest.mark.parametrize('prefix', ['$2a$', '$2b$', '$2y$'])
def test_legacy_bcrypt_hashes(prefix):
    hashed = bcrypt.hashpw(b'legacy', bcrypt.gensalt()).decode()
    hashed = prefix + hashed[4:]
    assert is_legacy_hash(hashed)
    assert verify_password(hashed, 'legacy')
    assert not verify_password(hashed, 'other')


def test_plain_text_password_is_rejected():
    assert not verify_password('secret', 'secret')
    assert not verify_password(None, 'secret')


def test_date_helpers():
    assert is_valid_date_string('2030-02-28')
    assert not is_valid_date_string('2030-02-30')
    assert not is_valid_date_string('2030-2-28')
    assert parse_date('2030-02-28T10:00:00') == date(2030, 2, 28)
    assert parse_date('nope') is None
    assert parse_datetime('2030-01-01T00:00:00Z') == datetime(2030, 1, 1, 9, 0)
    assert parse_datetime('invalid') is None
    assert format_db_datetime(datetime(2030, 1, 1, 9, 0, 5)) == '2030-01-01 09:00:05'


def test_build_pagination():
    assert build_pagination(1, 10, 0) == {'page': 1, 'limit': 10, 'total': 0, 'totalPages': 0}
    assert build_pagination(3, 10, 21)['totalPages'] == 3


def test_load_json_text():
    assert load_json_text('["a"]') == ['a']
    assert load_json_text('not json', default='x') == 'x'
    assert load_json_text(None, default=[]) == []


def test_index_and_health(client):
    assert client.get('/health').get_json()['status'] == 'OK'
    assert client.get('/').get_json()['endpoints']['deliveries'] == '/api/deliveries'
    assert '/api/deliveries' in client.get('/debug').get_json()['availableRoutes']
    assert client.get('/nope').status_code == 404


def test_rate_limit_by_forwarded_ip(tmp_path):
    app = create_app('testing', {
        'RATELIMIT_DEFAULT': '2 per minute',
        'SESSION_FILE_DIR': str(tmp_path / 'sessions'),
    })
    client = app.test_client()
    headers = {'X-Forwarded-For': '203.0.113.7, 10.0.0.1'}

    assert client.get('/health', headers=headers).status_code == 200
    assert client.get('/health', headers=headers).status_code == 200

    response = client.get('/health', headers=headers)
    assert response.status_code == 429
    assert response.get_json() == {
        'error': 'Too Many Requests',
        'message': '요청이 너무 많습니다. 잠시 후 다시 시도해주세요.',
        'retryAfter': '15분 후 재시도 가능'
    }

    assert client.get('/health', headers={'X-Forwarded-For': '203.0.113.8'}).status_code == 200
    for _ in range(3):
        assert client.get('/health').status_code == 200


@pytest.mark.parametrize('ip, internal', [
    ('127.0.0.1', True),
    ('::1', True),
    ('192.168.0.10', True),
    ('172.17.0.2', True),
    ('203.0.113.7', False),
    ('', False),
])
def test_internal_addresses_skip_rate_limit(ip, internal):
    assert is_internal_address(ip) is internal
