"""
배송 상세 정보 API
"""
from flask import request, jsonify, current_app

from easypickup.delivery_details import bp
from easypickup.common.models import db, DeliveryDetail, dumps_json
from easypickup.common.middleware import require_auth, get_current_user
from easypickup.common.utils import load_json_text
from easypickup.deliveries.helpers import find_delivery, not_found


@bp.route('/<int:delivery_id>', methods=['GET'])
@require_auth
def get_delivery_details(delivery_id):
    """배송 상세 정보 목록"""
    try:
        if find_delivery(get_current_user(), delivery_id) is None:
            return not_found(success_shape=True)

        details = DeliveryDetail.query.filter_by(delivery_id=delivery_id) \
            .order_by(DeliveryDetail.created_at.asc(), DeliveryDetail.id.asc()).all()

        current_app.logger.info(f"📋 배송 {delivery_id} 상세 정보 {len(details)}건 조회")
        return jsonify({
            'success': True,
            'deliveryId': delivery_id,
            'count': len(details),
            'details': [detail.to_dict() for detail in details]
        })

    except Exception as e:
        current_app.logger.error(f"❌ 배송 상세 정보 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '배송 상세 정보 조회 중 오류가 발생했습니다.'}), 500


@bp.route('/<int:delivery_id>/products', methods=['GET'])
@require_auth
def get_delivery_detail_products(delivery_id):
    """detail_type='products' 행의 상품 배열을 펼쳐서 반환"""
    try:
        if find_delivery(get_current_user(), delivery_id) is None:
            return not_found(success_shape=True)

        rows = DeliveryDetail.query.filter_by(delivery_id=delivery_id, detail_type='products') \
            .order_by(DeliveryDetail.created_at.asc(), DeliveryDetail.id.asc()).all()

        products = []
        for row in rows:
            value = load_json_text(row.detail_value)
            if value is None:
                current_app.logger.warning(f"⚠️ 상품 JSON 파싱 실패: detail {row.id}")
                continue
            if isinstance(value, list):
                products.extend(value)
            else:
                products.append(value)

        return jsonify({
            'success': True,
            'deliveryId': delivery_id,
            'count': len(products),
            'products': products
        })

    except Exception as e:
        current_app.logger.error(f"❌ 배송 제품 정보 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '배송 제품 정보 조회 중 오류가 발생했습니다.'}), 500


@bp.route('', methods=['POST'])
@require_auth
def create_delivery_detail():
    """배송 상세 정보 생성"""
    try:
        data = request.get_json(silent=True) or {}
        delivery_id = data.get('deliveryId')
        detail_type = data.get('detailType')

        if not delivery_id or not detail_type:
            return jsonify({'error': 'Bad Request', 'message': 'deliveryId와 detailType은 필수입니다.'}), 400

        delivery_id = int(delivery_id)
        if find_delivery(get_current_user(), delivery_id) is None:
            return not_found(success_shape=True)

        detail = DeliveryDetail(
            delivery_id=delivery_id,
            detail_type=detail_type,
            detail_value=dumps_json(data.get('detailValue'))
        )
        db.session.add(detail)
        db.session.commit()

        return jsonify({
            'success': True,
            'message': '배송 상세 정보가 생성되었습니다.',
            'detailId': detail.id,
            'deliveryId': detail.delivery_id,
            'detailType': detail_type
        }), 201

    except ValueError:
        db.session.rollback()
        return jsonify({'error': 'Bad Request', 'message': 'deliveryId는 숫자여야 합니다.'}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송 상세 정보 생성 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '배송 상세 정보 생성 중 오류가 발생했습니다.'}), 500
