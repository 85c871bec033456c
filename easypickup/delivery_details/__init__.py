"""
배송 상세 정보 모듈 (detail_type 별 JSON 값 저장)
"""
from flask import Blueprint

bp = Blueprint('delivery_details', __name__, url_prefix='/api/delivery-details')

from easypickup.delivery_details import routes
