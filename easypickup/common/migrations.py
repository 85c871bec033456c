#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
스키마 버전 관리
schema_migrations 테이블에 적용 버전을 기록하고, 미적용 단계만 순서대로 실행
"""

import logging

from sqlalchemy import inspect

from easypickup.common.models import (
    db, SchemaMigration, Delivery, FPrice, RequestType, DEFAULT_REQUEST_TYPES,
    STATUS_RECEIVED, STATUS_LOADED, STATUS_DELIVERED, STATUS_ORDER_CANCELLED,
    STATUS_DISPATCHED, STATUS_PICKUP_COMPLETED, STATUS_ACTION_COMPLETED,
    STATUS_CANCELLED, STATUS_POSTPONED,
)

logger = logging.getLogger(__name__)

# 레거시 영문 상태값 -> 한글 상태값
LEGACY_STATUS_MAP = {
    'pending': STATUS_RECEIVED,
    'in_transit': STATUS_LOADED,
    'delivered': STATUS_DELIVERED,
    'cancelled': STATUS_ORDER_CANCELLED,
    'order_received': STATUS_RECEIVED,
    'dispatch_completed': STATUS_DISPATCHED,
    'delivery_completed': STATUS_DELIVERED,
    'collection_completed': STATUS_PICKUP_COMPLETED,
    'processing_completed': STATUS_ACTION_COMPLETED,
    'delivery_cancelled': STATUS_CANCELLED,
    'delivery_postponed': STATUS_POSTPONED,
}


def _create_tables():
    db.create_all()


def _normalize_legacy_statuses():
    for legacy, korean in LEGACY_STATUS_MAP.items():
        updated = Delivery.query.filter_by(status=legacy).update({'status': korean}, synchronize_session=False)
        if updated:
            logger.info(f"🔄 배송 상태 변환: {legacy} -> {korean} ({updated}건)")


def _ensure_f_price_index():
    indexes = {index['name'] for index in inspect(db.engine).get_indexes(FPrice.__tablename__)}
    if 'idx_f_price_category_size' not in indexes:
        db.Index('idx_f_price_category_size', FPrice.category, FPrice.size).create(db.engine)


def _seed_request_types():
    for order, name in enumerate(DEFAULT_REQUEST_TYPES, start=1):
        if not RequestType.query.filter_by(name=name).first():
            db.session.add(RequestType(name=name, sort_order=order, is_active=True))


# (버전, 설명, 실행 함수) - 순서 변경 금지, 새 단계는 뒤에 추가
MIGRATIONS = [
    (1, 'create base tables', _create_tables),
    (2, 'normalize legacy delivery statuses', _normalize_legacy_statuses),
    (3, 'index f_price(category, size)', _ensure_f_price_index),
    (4, 'seed default request types', _seed_request_types),
]

LATEST_VERSION = MIGRATIONS[-1][0]


def applied_versions():
    if not inspect(db.engine).has_table(SchemaMigration.__tablename__):
        return set()
    return {row.version for row in SchemaMigration.query.all()}


def apply_migrations():
    """미적용 마이그레이션 실행, 적용된 버전 목록 반환"""
    SchemaMigration.__table__.create(db.engine, checkfirst=True)
    done = applied_versions()
    applied = []

    for version, description, upgrade in MIGRATIONS:
        if version in done:
            continue
        try:
            upgrade()
            db.session.add(SchemaMigration(version=version, description=description))
            db.session.commit()
            applied.append(version)
            logger.info(f"✅ 스키마 v{version} 적용: {description}")
        except Exception as e:
            db.session.rollback()
            logger.error(f"❌ 스키마 v{version} 적용 실패: {e}")
            raise

    return applied


def current_version():
    done = applied_versions()
    return max(done) if done else 0
