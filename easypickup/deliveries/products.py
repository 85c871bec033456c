"""
배송별 상품 라인 API
"""
from flask import request, jsonify, current_app

from easypickup.deliveries import bp
from easypickup.deliveries.helpers import find_delivery, not_found
from easypickup.common.models import db, DeliveryProduct
from easypickup.common.database import execute_with_retry
from easypickup.common.middleware import require_auth, get_current_user

LINE_FIELDS = ('product_weight', 'total_weight', 'product_size', 'box_size')


def build_product_lines(delivery_id, items):
    """요청 상품 목록 -> DeliveryProduct (상품코드 없는 항목 제외)"""
    lines = []
    for item in items:
        if not isinstance(item, dict):
            continue
        code = item.get('product_code') or item.get('productCode')
        if not code:
            continue
        line = DeliveryProduct(delivery_id=delivery_id, product_code=str(code))
        for field in LINE_FIELDS:
            value = item.get(field)
            if value is not None and value != '':
                setattr(line, field, str(value))
        lines.append(line)
    return lines


@bp.route('/<int:delivery_id>/products', methods=['GET'])
@require_auth
def list_delivery_products(delivery_id):
    try:
        if find_delivery(get_current_user(), delivery_id) is None:
            return not_found(success_shape=True)

        products = execute_with_retry(
            lambda: DeliveryProduct.query.filter_by(delivery_id=delivery_id)
            .order_by(DeliveryProduct.id.asc()).all()
        )
        return jsonify({'success': True, 'products': [product.to_dict() for product in products]})

    except Exception as e:
        current_app.logger.error(f"❌ 배송 상품 조회 오류: {e}")
        return jsonify({'success': False, 'error': '배송 상품 조회 중 오류가 발생했습니다.', 'details': str(e)}), 500


@bp.route('/<int:delivery_id>/products', methods=['POST'])
@require_auth
def replace_delivery_products(delivery_id):
    """상품 목록 전체 교체 (삭제 + 일괄 등록을 한 트랜잭션으로)"""
    try:
        data = request.get_json(silent=True) or {}
        items = data.get('products')
        if not isinstance(items, list):
            return jsonify({'success': False, 'error': 'products 배열이 필요합니다.'}), 400

        if find_delivery(get_current_user(), delivery_id) is None:
            return not_found(success_shape=True)

        def _replace():
            DeliveryProduct.query.filter_by(delivery_id=delivery_id).delete(synchronize_session=False)
            lines = build_product_lines(delivery_id, items)
            db.session.add_all(lines)
            db.session.commit()
            return lines

        lines = execute_with_retry(_replace)
        current_app.logger.info(f"📦 배송 {delivery_id} 상품 {len(lines)}건 저장")

        return jsonify({
            'success': True,
            'message': '상품 정보가 저장되었습니다.',
            'count': len(lines),
            'products': [line.to_dict() for line in lines]
        })

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송 상품 저장 오류: {e}")
        return jsonify({'success': False, 'error': '배송 상품 저장 중 오류가 발생했습니다.', 'details': str(e)}), 500


@bp.route('/<int:delivery_id>/products/<int:product_id>', methods=['DELETE'])
@require_auth
def delete_delivery_product(delivery_id, product_id):
    try:
        if find_delivery(get_current_user(), delivery_id) is None:
            return not_found(success_shape=True)

        def _delete():
            deleted = DeliveryProduct.query.filter_by(
                id=product_id, delivery_id=delivery_id
            ).delete(synchronize_session=False)
            db.session.commit()
            return deleted

        if not execute_with_retry(_delete):
            return jsonify({'success': False, 'error': '해당 상품을 찾을 수 없습니다.'}), 404

        return jsonify({'success': True, 'message': '상품이 삭제되었습니다.'})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송 상품 삭제 오류: {e}")
        return jsonify({'success': False, 'error': '배송 상품 삭제 중 오류가 발생했습니다.', 'details': str(e)}), 500
