#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
배송 완료/연기/취소 처리 테스트 (기사 앱)
"""

from datetime import timedelta

import pytest

from easypickup.common.models import (
    db, Delivery, STATUS_DISPATCHED, STATUS_DELIVERED, STATUS_COLLECTED, STATUS_ACTION_COMPLETED,
    STATUS_POSTPONED, STATUS_CANCELLED, STATUS_ORDER_CANCELLED,
)
from easypickup.common.utils import kst_today
from easypickup.deliveries.lifecycle import completion_status_for


@pytest.fixture
def assigned(driver, make_delivery):
    return make_delivery(driver_id=driver.id, status=STATUS_DISPATCHED, request_type='일반')


def _future(days=3):
    return (kst_today() + timedelta(days=days)).strftime('%Y-%m-%d')


@pytest.mark.parametrize('request_type, expected', [
    ('일반', STATUS_DELIVERED),
    ('회수', STATUS_COLLECTED),
    ('조처', STATUS_ACTION_COMPLETED),
    ('조치', STATUS_ACTION_COMPLETED),
    (None, STATUS_DELIVERED),
])
def test_completion_status_for(request_type, expected):
    assert completion_status_for(request_type) == expected


def test_complete_delivery(client, assigned, driver_headers):
    response = client.post(f'/api/deliveries/complete/{assigned.id}', headers=driver_headers, json={
        'driverNotes': '현관 앞 설치 완료',
        'customerRequestedCompletion': True,
        'completedAt': '2030-01-02T03:04:05Z',
        'action_date': '2030-01-02',
        'action_time': '12:04'
    })
    body = response.get_json()
    assert response.status_code == 200
    assert body['data']['previousStatus'] == STATUS_DISPATCHED
    assert body['data']['newStatus'] == STATUS_DELIVERED
    assert body['data']['completedAt'] == '2030-01-02 12:04:05'

    delivery = db.session.get(Delivery, assigned.id)
    assert delivery.status == STATUS_DELIVERED
    assert delivery.driver_notes == '현관 앞 설치 완료'
    assert delivery.customer_requested_completion is True
    assert delivery.furniture_company_requested_completion is False
    assert delivery.action_time == '12:04'


def test_complete_parses_string_flags(client, assigned, driver_headers):
    response = client.post(f'/api/deliveries/complete/{assigned.id}', headers=driver_headers, json={
        'customerRequestedCompletion': 'false',
        'furnitureCompanyRequestedCompletion': 'true'
    })
    body = response.get_json()
    assert response.status_code == 200
    assert body['data']['customerRequestedCompletion'] is False
    assert body['data']['furnitureCompanyRequestedCompletion'] is True

    delivery = db.session.get(Delivery, assigned.id)
    assert delivery.customer_requested_completion is False
    assert delivery.furniture_company_requested_completion is True


def test_complete_keeps_notes_when_not_given(client, driver, make_delivery, driver_headers):
    delivery = make_delivery(driver_id=driver.id, request_type='회수', driver_notes='기존 메모')

    body = client.post(f'/api/deliveries/complete/{delivery.id}', headers=driver_headers, json={}).get_json()
    assert body['data']['newStatus'] == STATUS_COLLECTED
    assert db.session.get(Delivery, delivery.id).driver_notes == '기존 메모'


def test_complete_rejects_cancelled(client, driver, make_delivery, driver_headers):
    delivery = make_delivery(driver_id=driver.id, status=STATUS_ORDER_CANCELLED)
    response = client.post(f'/api/deliveries/complete/{delivery.id}', headers=driver_headers, json={})
    assert response.status_code == 400
    assert response.get_json()['error'] == '취소된 배송은 완료 처리할 수 없습니다.'


def test_complete_other_drivers_delivery(client, make_driver, make_delivery, driver_headers):
    other = make_driver('driver2')
    delivery = make_delivery(driver_id=other.id)
    response = client.post(f'/api/deliveries/complete/{delivery.id}', headers=driver_headers, json={})
    assert response.status_code == 404
    assert response.get_json() == {'success': False, 'error': '해당 배송을 찾을 수 없습니다.'}


def test_postpone_delivery(client, assigned, driver_headers):
    date = _future()
    response = client.post(f'/api/deliveries/postpone/{assigned.id}', headers=driver_headers, json={
        'postponeDate': date, 'postponeReason': '고객 부재'
    })
    assert response.status_code == 200
    assert response.get_json()['data']['newVisitDate'] == date

    delivery = db.session.get(Delivery, assigned.id)
    assert delivery.status == STATUS_POSTPONED
    assert delivery.visit_date.strftime('%Y-%m-%d') == date
    assert delivery.driver_notes == f'배송연기 ({date}): 고객 부재'


@pytest.mark.parametrize('payload, message', [
    ({'postponeDate': '2030-01-01'}, '연기 날짜와 사유를 입력해주세요.'),
    ({'postponeDate': '2030/01/01', 'postponeReason': '부재'}, '올바른 날짜 형식이 아닙니다. (YYYY-MM-DD)'),
    ({'postponeDate': '2030-02-30', 'postponeReason': '부재'}, '올바른 날짜 형식이 아닙니다. (YYYY-MM-DD)'),
])
def test_postpone_validation(client, assigned, driver_headers, payload, message):
    response = client.post(f'/api/deliveries/postpone/{assigned.id}', headers=driver_headers, json=payload)
    assert response.status_code == 400
    assert response.get_json()['error'] == message


def test_postpone_requires_future_date(client, assigned, driver_headers):
    today = kst_today().strftime('%Y-%m-%d')
    response = client.post(f'/api/deliveries/postpone/{assigned.id}', headers=driver_headers, json={
        'postponeDate': today, 'postponeReason': '부재'
    })
    assert response.status_code == 400
    assert response.get_json()['error'] == '연기 날짜는 오늘 이후로 설정해주세요.'


def test_postpone_completed_delivery(client, driver, make_delivery, driver_headers):
    delivery = make_delivery(driver_id=driver.id, status=STATUS_DELIVERED)
    response = client.post(f'/api/deliveries/postpone/{delivery.id}', headers=driver_headers, json={
        'postponeDate': _future(), 'postponeReason': '부재'
    })
    assert response.status_code == 400
    assert response.get_json()['error'] == '이미 완료된 배송은 연기할 수 없습니다.'


def test_delay_by_tracking_number_appends_note(client, driver, make_delivery, driver_headers):
    delivery = make_delivery(driver_id=driver.id, status=STATUS_DISPATCHED, driver_notes='1차 방문')
    date = _future(5)

    response = client.post(f'/api/deliveries/delay/{delivery.tracking_number}', headers=driver_headers, json={
        'delayDate': date, 'action_date': '2030-01-01', 'action_time': '09:30'
    })
    body = response.get_json()
    assert response.status_code == 200
    assert body['data']['delayReason'] is None

    delivery = db.session.get(Delivery, delivery.id)
    assert delivery.status == STATUS_POSTPONED
    assert delivery.driver_notes == f'1차 방문\n배송연기 ({date})'
    assert delivery.action_date == '2030-01-01'


def test_delay_unknown_tracking_number(client, driver_headers, driver):
    response = client.post('/api/deliveries/delay/MD00000000000000000', headers=driver_headers,
                           json={'delayDate': _future()})
    assert response.status_code == 404
    assert client.post('/api/deliveries/delay/MD0', headers=driver_headers, json={}).status_code == 400


def test_cancel_delivery(client, assigned, driver_headers):
    response = client.post(f'/api/deliveries/cancel/{assigned.id}', headers=driver_headers,
                           json={'cancelReason': '  고객 요청  '})
    body = response.get_json()
    assert response.status_code == 200
    assert body['data']['cancelReason'] == '고객 요청'

    delivery = db.session.get(Delivery, assigned.id)
    assert delivery.status == STATUS_CANCELLED
    assert delivery.cancel_status == 1
    assert delivery.canceled_at is not None
    assert delivery.driver_notes == f"배송취소 ({body['data']['canceledAt']}): 고객 요청"

    response = client.post(f'/api/deliveries/cancel/{assigned.id}', headers=driver_headers,
                           json={'cancelReason': '다시'})
    assert response.status_code == 400
    assert response.get_json()['error'] == '이미 취소된 배송입니다.'


def test_cancel_guards(client, driver, make_delivery, driver_headers):
    done = make_delivery(driver_id=driver.id, status=STATUS_ACTION_COMPLETED)

    response = client.post(f'/api/deliveries/cancel/{done.id}', headers=driver_headers, json={'cancelReason': ' '})
    assert response.get_json()['error'] == '취소 사유를 입력해주세요.'

    response = client.post(f'/api/deliveries/cancel/{done.id}', headers=driver_headers,
                           json={'cancelReason': '변심'})
    assert response.status_code == 400
    assert response.get_json()['error'] == '이미 완료된 배송은 취소할 수 없습니다.'


def test_lifecycle_requires_auth(client, assigned):
    assert client.post(f'/api/deliveries/complete/{assigned.id}', json={}).status_code == 401
