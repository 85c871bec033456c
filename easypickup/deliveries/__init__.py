"""
배송 관리 모듈
접수/조회/수정, 완료·연기·취소 처리, 배송 상품 목록
"""
from flask import Blueprint

bp = Blueprint('deliveries', __name__, url_prefix='/api/deliveries')

from easypickup.deliveries import routes, lifecycle, products
