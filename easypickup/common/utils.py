#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
공통 유틸리티
한국 시간(KST) 계산, 날짜 파싱, 페이지네이션 파라미터
"""

import json
import math
import re
from datetime import datetime, date, time, timedelta
from decimal import Decimal

import pytz

KST = pytz.timezone('Asia/Seoul')

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def kst_now():
    """현재 한국 시간 (DB 저장용 naive datetime)"""
    return datetime.now(KST).replace(tzinfo=None)


def kst_today():
    """오늘 날짜 (KST)"""
    return datetime.now(KST).date()


def kst_tomorrow():
    return kst_today() + timedelta(days=1)


def format_db_datetime(value):
    """'YYYY-MM-DD HH:MM:SS' 형식 문자열"""
    return value.strftime('%Y-%m-%d %H:%M:%S') if value else None


def is_valid_date_string(value):
    """YYYY-MM-DD 형식 + 실제 존재하는 날짜인지 확인"""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, '%Y-%m-%d')
        return True
    except ValueError:
        return False


def parse_date(value):
    """문자열/datetime 을 date 로 변환 (실패 시 None)"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()
    except ValueError:
        return None


def parse_datetime(value):
    """ISO 문자열을 KST naive datetime 으로 변환"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip().replace('Z', '+00:00')
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(KST).replace(tzinfo=None)
    return dt


def serialize_value(value):
    """JSON 응답용 값 변환"""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.strftime('%Y-%m-%d')
    if isinstance(value, time):
        return value.strftime('%H:%M:%S')
    if isinstance(value, Decimal):
        return float(value)
    return value


def load_json_text(value, default=None):
    """JSON 문자열 파싱 (실패 시 default)"""
    if value is None or value == '':
        return default
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return default


def get_pagination_args(request, default_limit=10, max_limit=200):
    """page/limit 쿼리 파라미터 파싱"""
    try:
        page = max(int(request.args.get('page', 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(request.args.get('limit', default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    limit = min(max(limit, 1), max_limit)
    return page, limit


def build_pagination(page, limit, total):
    return {
        'page': page,
        'limit': limit,
        'total': total or 0,
        'totalPages': math.ceil((total or 0) / limit) if limit else 0
    }
