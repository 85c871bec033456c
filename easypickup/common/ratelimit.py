#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
요청 속도 제한 (Flask-Limiter)
프록시 환경에서는 X-Forwarded-For 첫 번째 IP 를 클라이언트로 사용
"""

from flask import request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

INTERNAL_ADDRESSES = ('127.0.0.1', '::1')
PRIVATE_PREFIXES = ('192.168', '172.')


def client_ip():
    forwarded_for = request.headers.get('X-Forwarded-For', '')
    if forwarded_for:
        first_ip = forwarded_for.split(',')[0].strip()
        if first_ip:
            return first_ip
    return get_remote_address() or 'unknown'


def is_internal_address(ip):
    if not ip:
        return False
    return ip in INTERNAL_ADDRESSES or any(prefix in ip for prefix in PRIVATE_PREFIXES)


def skip_internal_requests():
    """로컬/사설망 요청은 제한 제외"""
    return is_internal_address(client_ip())


def init_limiter(app):
    """앱별 Limiter 생성 (RATELIMIT_DEFAULT, RATELIMIT_STORAGE_URI)"""
    limiter = Limiter(
        client_ip,
        app=app,
        default_limits=[app.config['RATELIMIT_DEFAULT']],
        storage_uri=app.config['RATELIMIT_STORAGE_URI']
    )
    limiter.request_filter(skip_internal_requests)
    return limiter
