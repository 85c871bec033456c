"""
관리자 테스트 도구 / 스키마 조회 모듈
"""
from flask import Blueprint

bp = Blueprint('debug', __name__, url_prefix='/api/test')
schema_bp = Blueprint('schema', __name__, url_prefix='/api/schema')

from easypickup.debug import routes, schema
