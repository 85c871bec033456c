"""
사용자 관리 모듈
"""
from flask import Blueprint

bp = Blueprint('users', __name__, url_prefix='/api/users')

from easypickup.users import routes
