#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
비밀번호 해시 처리
신규 해시는 werkzeug, 레거시 bcrypt($2a/$2b/$2y) 해시는 검증 후 재해시
"""

import logging

import bcrypt
from werkzeug.security import generate_password_hash, check_password_hash

logger = logging.getLogger(__name__)

BCRYPT_PREFIXES = ('$2a$', '$2b$', '$2y$')


def hash_password(password):
    return generate_password_hash(password)


def is_legacy_hash(stored_hash):
    return bool(stored_hash) and stored_hash.startswith(BCRYPT_PREFIXES)


def verify_password(stored_hash, password):
    """저장된 해시와 입력 비밀번호 비교 (평문 비교 없음)"""
    if not stored_hash or password is None:
        return False

    if is_legacy_hash(stored_hash):
        # PHP 계열 $2y$ 는 bcrypt 라이브러리에서 $2b$ 와 동일
        normalized = '$2b$' + stored_hash[4:]
        try:
            return bcrypt.checkpw(password.encode('utf-8'), normalized.encode('utf-8'))
        except ValueError as e:
            logger.warning(f"⚠️ bcrypt 해시 검증 실패: {e}")
            return False

    try:
        return check_password_hash(stored_hash, password)
    except (ValueError, TypeError):
        # 해시 형식이 아닌 값 (평문 등) 은 인증 실패 처리
        logger.warning("⚠️ 알 수 없는 비밀번호 해시 형식")
        return False
