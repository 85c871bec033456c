"""
의뢰 종류 관리 모듈
"""
from flask import Blueprint

bp = Blueprint('request_types', __name__, url_prefix='/api/request-types')

from easypickup.request_types import routes
