"""
QR 코드 상품 조회/등록 API
"""
from flask import request, jsonify, current_app

from easypickup.qrcode import bp
from easypickup.common.models import db, QRCodeProduct
from easypickup.common.database import coerce_column_value
from easypickup.common.middleware import require_auth, require_admin


@bp.route('/product/<qr_code>', methods=['GET'])
@require_auth
def get_product_by_qr_code(qr_code):
    """QR 코드로 상품 조회"""
    try:
        product = QRCodeProduct.query.filter_by(qr_code=qr_code).first()
        if product is None:
            return jsonify({'success': False, 'error': 'QR 코드에 해당하는 상품을 찾을 수 없습니다'}), 404
        return jsonify({'success': True, 'product': product.to_dict()})

    except Exception as e:
        current_app.logger.error(f"❌ QR 코드 조회 오류: {e}")
        return jsonify({'success': False, 'error': '서버 오류가 발생했습니다'}), 500


@bp.route('/product', methods=['POST'])
@require_admin
def create_qr_code_product():
    """QR 코드 상품 등록 (관리자)"""
    try:
        data = request.get_json(silent=True) or {}
        qr_code = (data.get('qr_code') or '').strip()
        product_name = (data.get('product_name') or '').strip()

        if not qr_code or not product_name:
            return jsonify({'success': False, 'error': 'QR 코드와 상품명은 필수입니다'}), 400

        if QRCodeProduct.query.filter_by(qr_code=qr_code).first():
            return jsonify({'success': False, 'error': '이미 등록된 QR 코드입니다'}), 400

        product = QRCodeProduct(
            qr_code=qr_code,
            product_name=product_name,
            quantity=coerce_column_value(QRCodeProduct, 'quantity', data.get('quantity')) or 1,
            weight=coerce_column_value(QRCodeProduct, 'weight', data.get('weight')),
            size=data.get('size'),
            description=data.get('description')
        )
        db.session.add(product)
        db.session.commit()

        current_app.logger.info(f"🏷️ QR 코드 상품 등록: {qr_code} ({product_name})")
        return jsonify({
            'success': True,
            'message': 'QR 코드 상품이 등록되었습니다',
            'product': product.to_dict()
        }), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ QR 코드 등록 오류: {e}")
        return jsonify({'success': False, 'error': '서버 오류가 발생했습니다'}), 500


@bp.route('/products', methods=['GET'])
@require_auth
def list_qr_code_products():
    try:
        products = QRCodeProduct.query.order_by(QRCodeProduct.qr_code.asc()).all()
        return jsonify({'success': True, 'products': [product.to_dict() for product in products]})
    except Exception as e:
        current_app.logger.error(f"❌ QR 코드 목록 조회 오류: {e}")
        return jsonify({'success': False, 'error': '서버 오류가 발생했습니다'}), 500
