"""
QR 코드 상품 모듈
"""
from flask import Blueprint

bp = Blueprint('qrcode', __name__, url_prefix='/api/qrcode')

from easypickup.qrcode import routes
