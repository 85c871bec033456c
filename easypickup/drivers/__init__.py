"""
기사 관리 모듈
"""
from flask import Blueprint

bp = Blueprint('drivers', __name__, url_prefix='/api/drivers')

from easypickup.drivers import routes
