"""
상품 관리 모듈
파트너 상품 CRUD, 상품 사진 업로드
"""
from flask import Blueprint

bp = Blueprint('products', __name__, url_prefix='/api/products')
photos_bp = Blueprint('product_photos', __name__, url_prefix='/api/product-photos')

from easypickup.products import routes, photos
