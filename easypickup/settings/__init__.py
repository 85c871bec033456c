"""
설정 파일 모듈 (request_type.txt)
"""
from flask import Blueprint

bp = Blueprint('settings', __name__, url_prefix='/api/config')

from easypickup.settings import routes
