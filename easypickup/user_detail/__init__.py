"""
사용자 상세정보 모듈
"""
from flask import Blueprint

bp = Blueprint('user_detail', __name__, url_prefix='/api/user-detail')

from easypickup.user_detail import routes
