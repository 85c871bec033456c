#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
스키마 마이그레이션 / 데이터 정리 스크립트 테스트
"""

import pandas as pd
import pytest

from easypickup.common.migrations import apply_migrations, current_version, LATEST_VERSION
from easypickup.common.models import (
    db, User, FPrice, QRCodeProduct, RequestType, SchemaMigration, Delivery,
    STATUS_DELIVERED, STATUS_CANCELLED, DEFAULT_REQUEST_TYPES, create_default_data,
)
from easypickup.services.price_table import read_price_file, import_price_frame
from scripts.seed_qrcode import seed_qrcode_products, SAMPLE_PRODUCTS
from scripts.seed_test_data import seed
from scripts.update_user_roles import normalize_user_roles


def test_migrations_applied_once(app):
    assert current_version() == LATEST_VERSION
    assert apply_migrations() == []
    assert RequestType.query.count() == len(DEFAULT_REQUEST_TYPES)


def test_legacy_status_migration(app, make_delivery):
    delivered = make_delivery(status='delivered')
    cancelled = make_delivery(status='delivery_cancelled')
    SchemaMigration.query.filter_by(version=2).delete()
    db.session.commit()

    assert apply_migrations() == [2]
    db.session.expire_all()
    assert db.session.get(Delivery, delivered.id).status == STATUS_DELIVERED
    assert db.session.get(Delivery, cancelled.id).status == STATUS_CANCELLED


def test_default_admin_created_once(app):
    admin = create_default_data('init-pass')
    assert admin.verify_password('init-pass')
    assert create_default_data() is None
    assert User.query.filter_by(role='admin').count() == 1


def test_price_import_csv(app, tmp_path):
    path = tmp_path / 'f_price.csv'
    pd.DataFrame([
        {'카테고리': '침대', '사이즈': 'Q', '내림비': '30,000', '계단(2층)': 10000, '수익률(62)': 5000},
        {'카테고리': '', '사이즈': 'S', '내림비': 1000},
        {'카테고리': '소파', '사이즈': None, '내림비': 25000.0},
    ]).to_csv(path, index=False, encoding='utf-8-sig')

    df = read_price_file(path)
    assert 'narim_cost' in df.columns

    saved, failed = import_price_frame(df)
    assert (saved, failed) == (2, 1)

    bed = FPrice.lookup('침대', 'Q')
    assert bed.narim_cost == 30000
    assert bed.stair_2f == 10000
    assert bed.profit_62 == 5000
    assert FPrice.query.filter_by(category='소파').one().size is None


def test_price_import_replace(app, tmp_path):
    path = tmp_path / 'f_price.xlsx'
    pd.DataFrame([{'카테고리': '식탁', '사이즈': '4인', '내림비': 20000}]).to_excel(path, index=False)

    import_price_frame(read_price_file(path))
    import_price_frame(read_price_file(path), replace=True)
    assert FPrice.query.count() == 1


def test_price_file_validation(app, tmp_path):
    with pytest.raises(ValueError):
        read_price_file(tmp_path / 'prices.txt')

    path = tmp_path / 'prices.csv'
    pd.DataFrame([{'사이즈': 'Q'}]).to_csv(path, index=False)
    with pytest.raises(ValueError):
        read_price_file(path)


def test_normalize_user_roles(app, make_user):
    make_user('legacy1', role='partner')
    make_user('legacy2', role='driver')
    make_user('boss', role='manager')

    assert normalize_user_roles() == 2
    roles = {user.username: user.role for user in User.query.all()}
    assert roles == {'legacy1': 'user', 'legacy2': 'user', 'boss': 'manager'}


def test_seed_qrcode_products_is_idempotent(app):
    seed_qrcode_products()
    seed_qrcode_products()
    assert QRCodeProduct.query.count() == len(SAMPLE_PRODUCTS)
    assert QRCodeProduct.query.filter_by(qr_code='EASY003').one().quantity == 2


def test_seed_test_data(app):
    partners, drivers, deliveries = seed(partner_count=2, driver_count=1, delivery_count=4)
    assert len(partners) == 2
    assert len(deliveries) == 4
    assert {delivery.driver_id for delivery in deliveries} == {drivers[0].id}
    assert User.query.filter_by(username='manager').one().role == 'manager'
