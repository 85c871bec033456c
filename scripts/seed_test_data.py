#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
개발용 테스트 데이터 생성
관리자/매니저 계정, 파트너사, 기사, 샘플 배송
"""

import os
import sys
import argparse
from pathlib import Path

# 프로젝트 루트 디렉토리를 Python 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from easypickup import create_app
from easypickup.common.models import db, User, create_default_data
from easypickup.services.fixtures import (
    SEED_PASSWORD, create_random_partner, create_random_driver, create_random_delivery,
)


def ensure_manager():
    manager = User.query.filter_by(username='manager').first()
    if manager is None:
        manager = User(username='manager', name='매니저', role='manager', is_active=True)
        manager.set_password(SEED_PASSWORD)
        db.session.add(manager)
        db.session.commit()
    return manager


def seed(partner_count=3, driver_count=3, delivery_count=10):
    create_default_data()
    ensure_manager()

    partners = [create_random_partner() for _ in range(partner_count)]
    drivers = [create_random_driver() for _ in range(driver_count)]

    deliveries = []
    for index in range(delivery_count):
        partner = partners[index % len(partners)] if partners else None
        driver = drivers[index % len(drivers)] if drivers else None
        deliveries.append(create_random_delivery(partner, driver))

    return partners, drivers, deliveries


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='테스트 데이터 생성')
    parser.add_argument('--partners', type=int, default=3)
    parser.add_argument('--drivers', type=int, default=3)
    parser.add_argument('--deliveries', type=int, default=10)
    args = parser.parse_args()

    app = create_app(os.environ.get('FLASK_ENV', 'development'))
    with app.app_context():
        try:
            partners, drivers, deliveries = seed(args.partners, args.drivers, args.deliveries)
            print(f"✅ 파트너사 {len(partners)}명, 기사 {len(drivers)}명, 배송 {len(deliveries)}건 생성")
            print(f"🔑 테스트 계정 비밀번호: {SEED_PASSWORD}")
        except Exception as e:
            db.session.rollback()
            print(f"❌ 테스트 데이터 생성 실패: {e}")
            sys.exit(1)
