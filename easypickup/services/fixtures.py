#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
테스트용 랜덤 데이터 생성
관리자 테스트 도구(/api/test)와 seed 스크립트에서 사용
"""

import random
from datetime import timedelta

from easypickup.common.models import (
    db, User, Driver, Delivery, DEFAULT_REQUEST_TYPES,
    STATUS_RECEIVED, STATUS_WAREHOUSED, STATUS_LOADED, STATUS_DELIVERED,
    STATUS_RETURN_RECEIVED, STATUS_PICKUP_COMPLETED,
)
from easypickup.common.database import generate_unique_tracking_number
from easypickup.common.utils import kst_today

SEED_PASSWORD = 'password123'

LAST_NAMES = ['김', '이', '박', '최', '정', '강', '조', '윤', '장', '임', '한', '오', '서', '신', '권']
FIRST_NAMES = ['민수', '영희', '철수', '수지', '정훈', '미영', '성호', '지은', '동현', '소영', '현우', '지영', '태민']
VEHICLE_TYPES = ['소형트럭', '1톤트럭', '2.5톤트럭', '5톤트럭', '탑차', '밴']
DELIVERY_AREAS = ['서울 전지역', '경기 남부', '경기 북부', '인천 전지역', '강남구', '서초구', '송파구']
COMPANIES = ['한샘', '이케아', '까사미아', '일룸', '에넥스', '현대리바트', '시디즈']
CONSTRUCTION_TYPES = ['조립', '설치', '단순배송', '철거후설치', '수거']
BUILDING_TYPES = ['아파트', '빌라', '단독주택', '오피스텔', '상가', '사무실']
PRODUCT_NAMES = ['소파', '침대', '책상', '의자', '옷장', '식탁', '서랍장', '책장']
VISIT_TIMES = ['09:00-12:00', '13:00-16:00', '16:00-18:00', '10:00-14:00', '14:00-18:00']
ADDRESSES = [
    '서울특별시 강남구 테헤란로 152',
    '서울특별시 서초구 서초대로 396',
    '경기도 성남시 분당구 판교역로 235',
    '인천광역시 연수구 컨벤시아대로 165',
    '서울특별시 송파구 올림픽로 300',
]
RANDOM_STATUSES = [
    STATUS_RECEIVED, STATUS_WAREHOUSED, STATUS_LOADED, STATUS_DELIVERED,
    STATUS_RETURN_RECEIVED, STATUS_PICKUP_COMPLETED,
]


def random_name():
    return random.choice(LAST_NAMES) + random.choice(FIRST_NAMES)


def random_phone():
    return f'010-{random.randint(1000, 9999)}-{random.randint(1000, 9999)}'


def _unique_username(model, prefix, attempts=10):
    for _ in range(attempts):
        username = f'{prefix}{random.randint(1000, 9999)}'
        if not model.query.filter_by(username=username).first():
            return username
    raise RuntimeError('사용자명 생성에 실패했습니다. 다시 시도해주세요.')


def create_random_driver():
    username = _unique_username(Driver, 'driver')
    driver = Driver(
        username=username,
        name=random_name(),
        phone=random_phone(),
        email=f'{username}@delivery.com',
        vehicle_type=random.choice(VEHICLE_TYPES),
        vehicle_number=f"{random.randint(10, 99)}{random.choice('가나다라마바사아자하')}{random.randint(1000, 9999)}",
        cargo_capacity=random.choice([500, 1000, 2500, 5000]),
        delivery_area=random.choice(DELIVERY_AREAS),
        is_active=True
    )
    driver.set_password(SEED_PASSWORD)
    db.session.add(driver)
    db.session.commit()
    return driver


def create_random_partner():
    username = _unique_username(User, 'partner')
    company = random.choice(COMPANIES)
    user = User(
        username=username,
        name=random_name(),
        email=f'{username}@partner.com',
        phone=random_phone(),
        company=company,
        role='user',
        is_active=True,
        default_sender_name=company,
        default_sender_company=company,
        default_sender_phone=random_phone(),
        default_sender_address=random.choice(ADDRESSES)
    )
    user.set_password(SEED_PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


def delivery_defaults(partner=None, driver=None):
    """랜덤 배송 필드 (파트너/기사 정보 반영)"""
    sender_name = (partner.default_sender_name or partner.company or partner.name) if partner else random_name()
    return {
        'sender_name': sender_name,
        'sender_phone': partner.phone if partner else random_phone(),
        'sender_address': (partner.default_sender_address if partner else None) or random.choice(ADDRESSES),
        'customer_name': random_name(),
        'customer_phone': random_phone(),
        'customer_address': random.choice(ADDRESSES),
        'request_type': random.choice(DEFAULT_REQUEST_TYPES),
        'construction_type': random.choice(CONSTRUCTION_TYPES),
        'visit_date': kst_today() + timedelta(days=random.randint(0, 29)),
        'visit_time': random.choice(VISIT_TIMES),
        'furniture_company': random.choice(COMPANIES),
        'building_type': random.choice(BUILDING_TYPES),
        'floor_count': random.randint(1, 20),
        'elevator_available': random.random() > 0.3,
        'ladder_truck': random.random() > 0.8,
        'product_name': random.choice(PRODUCT_NAMES),
        'weight': random.randint(1, 100),
        'status': random.choice(RANDOM_STATUSES),
        'user_id': partner.id if partner else None,
        'driver_id': driver.id if driver else None,
    }


def create_delivery(fields):
    delivery = Delivery(tracking_number=generate_unique_tracking_number(), **fields)
    db.session.add(delivery)
    db.session.commit()
    return delivery


def create_random_delivery(partner=None, driver=None, overrides=None):
    fields = delivery_defaults(partner, driver)
    fields.update(overrides or {})
    return create_delivery(fields)
