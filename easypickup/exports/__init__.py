"""
엑셀/CSV 내보내기 모듈
"""
from flask import Blueprint

bp = Blueprint('exports', __name__, url_prefix='/api/exports')

from easypickup.exports import routes
