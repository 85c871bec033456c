#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Flask 애플리케이션 팩토리
배송접수 웹앱 API (EasyPickup)
"""

import os
import logging
import tempfile
import urllib.parse
from datetime import datetime, timedelta

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_login import LoginManager
from flask_session import Session
from redis import Redis
from sqlalchemy import text

load_dotenv()

APP_VERSION = '1.0.0'
SERVICE_NAME = 'easypickup-api'

DEFAULT_CORS_ORIGINS = [
    'http://localhost:5173',
    'https://localhost:5173',
    'https://ep.easypickup.kr',
]


def _database_uri():
    if os.environ.get('DATABASE_URL'):
        return os.environ['DATABASE_URL']
    password = urllib.parse.quote_plus(os.environ.get('DB_PASSWORD', ''))
    return (
        f"mysql+pymysql://{os.environ.get('DB_USER', 'easypickup')}:{password}"
        f"@{os.environ.get('DB_HOST', 'localhost')}:{os.environ.get('DB_PORT', '3306')}"
        f"/{os.environ.get('DB_NAME', 'easypickup')}?charset=utf8mb4"
    )


# 설정 클래스
class Config:
    SECRET_KEY = os.environ.get('SESSION_SECRET') or os.environ.get('SECRET_KEY') or 'easypickup-session-secret'
    JWT_SECRET = os.environ.get('JWT_SECRET', 'easypicks-jwt-secret-2024')
    JWT_EXPIRES_DAYS = int(os.environ.get('JWT_EXPIRES_DAYS', 30))

    # 데이터베이스 설정
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_size': 5, 'pool_recycle': 280, 'pool_pre_ping': True}
    DB_RETRY_COUNT = int(os.environ.get('DB_RETRY_COUNT', 3))
    DB_RETRY_DELAY = 1.0

    # 세션 설정
    SESSION_TYPE = os.environ.get('SESSION_TYPE', 'filesystem')
    SESSION_FILE_DIR = os.environ.get('SESSION_FILE_DIR', './flask_session')
    SESSION_PERMANENT = True
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_USE_SIGNER = True
    SESSION_KEY_PREFIX = 'easypickup_session:'
    SESSION_COOKIE_NAME = 'sessionId'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False

    # Redis 설정 (SESSION_TYPE=redis 일 때)
    REDIS_URL = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')

    CORS_ORIGINS = DEFAULT_CORS_ORIGINS + ([os.environ['CORS_ORIGIN']] if os.environ.get('CORS_ORIGIN') else [])
    CORS_ALLOW_LOCALHOST = True

    # 파일 업로드
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join('uploads', 'products'))
    MAX_PHOTO_SIZE = 5 * 1024 * 1024
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024

    REQUEST_TYPE_FILE = os.environ.get('REQUEST_TYPE_FILE', 'request_type.txt')
    KAKAO_REST_API_KEY = os.environ.get('KAKAO_REST_API_KEY')

    # 요청 제한 (15분당 10000회)
    RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', '10000 per 15 minutes')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

    # 실시간 알림 (Socket.IO)
    SOCKETIO_CORS_ORIGINS = os.environ.get('SOCKETIO_CORS_ORIGINS', '*')
    SOCKETIO_ASYNC_MODE = 'threading'
    SOCKETIO_MESSAGE_QUEUE = os.environ.get('SOCKETIO_MESSAGE_QUEUE')

    CREATE_DEFAULT_ADMIN = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_SAMESITE = 'None'
    CORS_ALLOW_LOCALHOST = False


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SESSION_TYPE = 'filesystem'
    SESSION_FILE_DIR = os.path.join(tempfile.gettempdir(), 'easypickup_test_session')
    DB_RETRY_DELAY = 0
    CREATE_DEFAULT_ADMIN = False
    KAKAO_REST_API_KEY = None
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), 'easypickup_test_uploads')
    REQUEST_TYPE_FILE = os.path.join(tempfile.gettempdir(), 'easypickup_test_request_type.txt')
    RATELIMIT_STORAGE_URI = 'memory://'
    SOCKETIO_MESSAGE_QUEUE = None


config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}

# 확장 모듈들
from easypickup.common.models import db, init_db, create_default_data

login_manager = LoginManager()
session_store = Session()


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if not any(isinstance(h, logging.StreamHandler) for h in logging.getLogger().handlers):
        logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')
    logging.getLogger('easypickup').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_name='development', config_overrides=None):
    """Flask 애플리케이션 팩토리"""
    app = Flask(__name__)

    # 설정 로드
    app.config.from_object(config_by_name.get(config_name, DevelopmentConfig))
    if config_overrides:
        app.config.update(config_overrides)

    _configure_logging(app)

    if app.config['SESSION_TYPE'] == 'redis':
        app.config['SESSION_REDIS'] = Redis.from_url(app.config['REDIS_URL'])

    # 확장 모듈 초기화
    db.init_app(app)
    login_manager.init_app(app)
    session_store.init_app(app)

    allowed_origins = list(app.config['CORS_ORIGINS'])
    if app.config.get('CORS_ALLOW_LOCALHOST'):
        allowed_origins.append(r'^https?://localhost(:\d+)?$')
    CORS(
        app,
        origins=allowed_origins,
        supports_credentials=True,
        methods=['GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization']
    )

    with app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
            init_db()
            if app.config.get('CREATE_DEFAULT_ADMIN'):
                admin = create_default_data()
                if admin:
                    app.logger.info("👤 기본 관리자 계정(admin) 생성")
            app.logger.info("✅ 데이터베이스 연결 및 스키마 확인 완료")
        except Exception as e:
            app.logger.error(f"❌ 데이터베이스 초기화 실패: {e}")

    # 요청 제한 / 실시간 알림
    from easypickup.common.ratelimit import init_limiter
    init_limiter(app)

    from easypickup.services.realtime import init_socketio
    init_socketio(app)

    # 인증 미들웨어 (세션/토큰 사용자 컨텍스트)
    from easypickup.common.middleware import auth_middleware
    auth_middleware.init_app(app)

    @app.before_request
    def log_request():
        app.logger.debug(f"{request.method} {request.path}")

    # 블루프린트 등록
    from easypickup.auth import bp as auth_bp
    app.register_blueprint(auth_bp)

    from easypickup.users import bp as users_bp
    app.register_blueprint(users_bp)

    from easypickup.drivers import bp as drivers_bp
    app.register_blueprint(drivers_bp)

    from easypickup.deliveries import bp as deliveries_bp
    app.register_blueprint(deliveries_bp)

    from easypickup.delivery_details import bp as delivery_details_bp
    app.register_blueprint(delivery_details_bp)

    from easypickup.products import bp as products_bp, photos_bp
    app.register_blueprint(products_bp)
    app.register_blueprint(photos_bp)

    from easypickup.qrcode import bp as qrcode_bp
    app.register_blueprint(qrcode_bp)

    from easypickup.request_types import bp as request_types_bp
    app.register_blueprint(request_types_bp)

    from easypickup.settings import bp as settings_bp
    app.register_blueprint(settings_bp)

    from easypickup.user_detail import bp as user_detail_bp
    app.register_blueprint(user_detail_bp)

    from easypickup.debug import bp as debug_bp, schema_bp
    app.register_blueprint(debug_bp)
    app.register_blueprint(schema_bp)

    from easypickup.exports import bp as exports_bp
    app.register_blueprint(exports_bp)

    # 에러 핸들러
    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'error': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method Not Allowed', 'message': '허용되지 않은 요청 방식입니다.'}), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({'error': 'Payload Too Large', 'message': '파일 크기는 5MB 이하여야 합니다.'}), 413

    @app.errorhandler(429)
    def too_many_requests(error):
        return jsonify({
            'error': 'Too Many Requests',
            'message': '요청이 너무 많습니다. 잠시 후 다시 시도해주세요.',
            'retryAfter': '15분 후 재시도 가능'
        }), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({
            'error': 'Internal Server Error',
            'message': str(error) if app.debug else 'Something went wrong!'
        }), 500

    @app.route('/')
    def index():
        """API 안내"""
        return jsonify({
            'message': '배송접수 웹앱 API',
            'version': APP_VERSION,
            'endpoints': {
                'auth': '/api/auth',
                'deliveries': '/api/deliveries',
                'users': '/api/users',
                'drivers': '/api/drivers',
                'schema': '/api/schema',
                'test': '/api/test',
                'products': '/api/products'
            }
        })

    @app.route('/health')
    def health():
        """헬스 체크 엔드포인트"""
        return jsonify({
            'status': 'OK',
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'service': SERVICE_NAME,
            'version': APP_VERSION
        })

    @app.route('/debug')
    def debug_info():
        """배포 확인용"""
        prefixes = sorted({
            '/'.join(rule.rule.split('/')[:3])
            for rule in app.url_map.iter_rules()
            if rule.rule.startswith('/api/')
        })
        return jsonify({
            'environment': config_name,
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'availableRoutes': prefixes
        })

    return app


# Flask-Login 사용자 로더
@login_manager.user_loader
def load_user(user_id):
    """'user:<id>' / 'driver:<id>' 형식 세션 ID 로드"""
    from easypickup.common.models import User, Driver
    kind, _, raw_id = str(user_id).partition(':')
    if not raw_id.isdigit():
        return None
    model = Driver if kind == 'driver' else User
    account = db.session.get(model, int(raw_id))
    if account is None or not account.is_active:
        return None
    return account


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'error': 'Unauthorized', 'message': '로그인이 필요합니다.'}), 401
