#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DB 실행 보조 함수
- 일시적 DB 오류 재시도 (execute_with_retry)
- 운송장 번호 생성
"""

import logging
import time
from decimal import Decimal, InvalidOperation

from flask import current_app, has_app_context
from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from easypickup.common.models import db, Delivery
from easypickup.common.utils import kst_now, parse_date, parse_datetime

logger = logging.getLogger(__name__)


def is_transient_error(error):
    """연결 끊김 등 재시도 가능한 오류 여부 (무결성 위반은 제외)"""
    if isinstance(error, IntegrityError):
        return False
    if isinstance(error, OperationalError):
        return True
    return isinstance(error, DBAPIError) and bool(error.connection_invalidated)


def _config(key, default):
    if has_app_context():
        return current_app.config.get(key, default)
    return default


def execute_with_retry(func, max_retries=None, delay=None, backoff='linear'):
    """
    DB 작업 재시도 실행

    Args:
        func: 인자 없는 호출 가능 객체
        max_retries: 최대 시도 횟수 (기본 DB_RETRY_COUNT=3)
        delay: 기본 대기 시간(초). linear 는 delay*attempt, exponential 은 delay*2**attempt
    """
    max_retries = max_retries or _config('DB_RETRY_COUNT', 3)
    delay = _config('DB_RETRY_DELAY', 1.0) if delay is None else delay

    for attempt in range(1, max_retries + 1):
        try:
            return func()
        except DBAPIError as e:
            db.session.rollback()
            if not is_transient_error(e):
                raise
            logger.warning(f"🔄 DB 쿼리 실행 실패 (시도 {attempt}/{max_retries}): {e}")

            if attempt == max_retries:
                raise

            wait = delay * (2 ** attempt) if backoff == 'exponential' else delay * attempt
            if wait:
                time.sleep(wait)


def generate_tracking_number(now=None):
    """운송장 번호: MD + YYYYMMDDHHmmss + 밀리초 3자리 (KST)"""
    now = now or kst_now()
    return f"MD{now.strftime('%Y%m%d%H%M%S')}{now.microsecond // 1000:03d}"


def generate_unique_tracking_number(max_attempts=5):
    """중복되지 않는 운송장 번호 생성"""
    tracking_number = generate_tracking_number()
    for _ in range(max_attempts):
        if not Delivery.query.filter_by(tracking_number=tracking_number).first():
            return tracking_number
        time.sleep(0.001)
        tracking_number = generate_tracking_number()
    raise RuntimeError('운송장 번호 생성에 실패했습니다.')


def coerce_column_value(model, field, value):
    """
    요청 값을 컬럼 타입에 맞게 변환

    빈 문자열은 문자열 컬럼이 아니면 None 으로 저장한다.
    """
    column = model.__table__.columns[field]
    column_type = column.type

    if value is None:
        return None
    if isinstance(column_type, Date):
        return parse_date(value)
    if isinstance(column_type, DateTime):
        return parse_datetime(value)
    if isinstance(column_type, Boolean):
        if isinstance(value, str):
            return value.strip().lower() in ('1', 'true', 'y', 'yes', 'on')
        return bool(value)
    if value == "" and not isinstance(column_type, String):
        return None
    if isinstance(column_type, Integer):
        return int(value)
    if isinstance(column_type, Numeric):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"{field}: 숫자 형식이 아닙니다.")
    return value
