"""
인증 미들웨어
JWT Bearer 토큰 + 레거시 세션(Flask-Login) 사용자 컨텍스트 관리, 역할 기반 접근 제어
"""
import json
import logging
from datetime import timedelta
from functools import wraps

import jwt
from flask import request, session, g, jsonify, current_app
from flask_login import current_user

from easypickup.common.models import db, User, Driver, UserActivity
from easypickup.common.utils import kst_now, KST

logger = logging.getLogger(__name__)

AUTH_ROLES_MANAGER = ('admin', 'manager')


def create_access_token(payload):
    """사용자 정보로 JWT 발급 (기본 30일)"""
    now = kst_now()
    expires = now + timedelta(days=current_app.config.get('JWT_EXPIRES_DAYS', 30))
    claims = dict(payload)
    claims['iat'] = int(KST.localize(now).timestamp())
    claims['exp'] = int(KST.localize(expires).timestamp())
    return jwt.encode(claims, current_app.config['JWT_SECRET'], algorithm='HS256')


def decode_access_token(token):
    """JWT 검증 (실패 시 jwt.InvalidTokenError)"""
    return jwt.decode(token, current_app.config['JWT_SECRET'], algorithms=['HS256'])


class AuthMiddleware:
    """요청별 사용자 컨텍스트 설정"""

    def __init__(self, app=None):
        self.app = app
        if app:
            self.init_app(app)

    def init_app(self, app):
        """Flask 앱에 미들웨어 등록"""
        app.before_request(self.before_request)

    def before_request(self):
        """Authorization 헤더 -> 세션 순서로 사용자 확인"""
        g.current_user = None
        g.auth_source = None
        g.token_error = None

        auth_header = request.headers.get('Authorization', '')
        if auth_header:
            parts = auth_header.split(' ', 1)
            token = parts[1].strip() if len(parts) == 2 and parts[0].lower() == 'bearer' else ''
            if not token:
                g.token_error = 'missing'
                return
            try:
                g.current_user = decode_access_token(token)
                g.auth_source = 'token'
            except jwt.InvalidTokenError as e:
                current_app.logger.warning(f"⚠️ JWT 검증 실패: {e}")
                g.token_error = 'invalid'
            return

        # 레거시 세션 (Flask-Login)
        if current_user and current_user.is_authenticated:
            g.current_user = session.get('user') or current_user.to_token_payload()
            g.auth_source = 'session'


auth_middleware = AuthMiddleware()

# =============================================================================
# 데코레이터 함수들
# =============================================================================


def get_current_user():
    return getattr(g, 'current_user', None)


def _auth_error():
    """인증 실패 응답 (없으면 None)"""
    token_error = getattr(g, 'token_error', None)
    if token_error == 'invalid':
        return jsonify({'error': 'Forbidden', 'message': '유효하지 않은 토큰입니다.'}), 403
    if not get_current_user():
        return jsonify({'error': 'Unauthorized', 'message': '인증 토큰이 필요합니다.'}), 401
    return None


def require_auth(f):
    """로그인(토큰 또는 세션) 필요"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        error = _auth_error()
        if error:
            return error
        return f(*args, **kwargs)
    return decorated_function


def require_role(*roles):
    """특정 역할 필요 데코레이터"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            error = _auth_error()
            if error:
                return error
            if get_current_user().get('role') not in roles:
                return jsonify({'error': 'Forbidden', 'message': '접근 권한이 없습니다.'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


require_admin = require_role('admin')
require_manager = require_role(*AUTH_ROLES_MANAGER)


def is_admin():
    user = get_current_user()
    return bool(user) and user.get('role') == 'admin'


def log_user_activity(user_id, action, target_type=None, target_id=None, details=None):
    """사용자 활동 기록 (실패해도 요청은 계속 진행)"""
    try:
        activity = UserActivity(
            user_id=user_id,
            action=action,
            target_type=target_type,
            target_id=target_id,
            details=json.dumps(details, ensure_ascii=False, default=str) if details is not None else None,
            ip_address=request.headers.get('X-Forwarded-For', request.remote_addr),
            user_agent=(request.headers.get('User-Agent') or '')[:500]
        )
        db.session.add(activity)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.warning(f"⚠️ 활동 로그 기록 실패 ({action}): {e}")


def load_account(payload):
    """토큰/세션 사용자 정보로 DB 계정 조회 (users 또는 drivers)"""
    if not payload or payload.get('id') is None:
        return None
    model = Driver if payload.get('role') == 'driver' else User
    return db.session.get(model, int(payload['id']))
