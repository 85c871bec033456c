"""
배송 모듈 공통 함수
"""
from flask import jsonify

from easypickup.common.models import db, Delivery
from easypickup.common.database import execute_with_retry

# 접수 시 요청 필드명 -> 컬럼명 (레거시 폼 호환)
FIELD_ALIASES = {
    'receiver_name': 'customer_name',
    'receiver_phone': 'customer_phone',
    'receiver_email': 'customer_email',
    'receiver_address': 'customer_address',
    'receiver_zipcode': 'customer_zipcode',
    'has_elevator': 'elevator_available',
    'can_use_ladder_truck': 'ladder_truck',
    'preferred_delivery_date': 'visit_date',
    'is_fragile': 'fragile',
    'is_frozen': 'frozen',
    'insurance_amount': 'insurance_value',
}

# 접수 시 저장 가능한 선택 컬럼
CREATE_FIELDS = (
    'sender_phone', 'sender_email', 'sender_company', 'sender_zipcode',
    'customer_email', 'customer_zipcode',
    'request_type', 'construction_type', 'shipment_type', 'visit_date', 'visit_time',
    'furniture_company', 'main_memo', 'emergency_contact',
    'building_type', 'floor_count', 'elevator_available', 'ladder_truck', 'disposal',
    'room_movement', 'wall_construction',
    'product_name', 'product_sku', 'product_quantity', 'seller_info', 'furniture_product_code',
    'product_weight', 'product_size', 'box_size', 'weight',
    'furniture_requests', 'delivery_memo', 'special_instructions',
    'fragile', 'frozen', 'requires_signature', 'insurance_value', 'cod_amount', 'delivery_fee',
    'estimated_delivery',
)

# PUT /:id 로 수정 가능한 컬럼
UPDATE_FIELDS = (
    'tracking_number', 'sender_name', 'sender_phone', 'sender_address',
    'weight', 'status', 'driver_id',
    'request_type', 'construction_type', 'shipment_type', 'visit_date', 'visit_time',
    'furniture_company', 'main_memo', 'emergency_contact',
    'customer_name', 'customer_phone', 'customer_address',
    'building_type', 'floor_count', 'elevator_available',
    'ladder_truck', 'disposal', 'room_movement', 'wall_construction',
    'product_name', 'furniture_product_code', 'product_weight', 'product_size',
    'box_size', 'furniture_requests', 'driver_notes',
    'installation_photos', 'customer_signature',
    'delivery_fee', 'special_instructions', 'fragile', 'insurance_value', 'cod_amount',
    'estimated_delivery', 'actual_delivery', 'delivery_attempts', 'last_location', 'detail_notes',
    'action_date', 'action_time',
)


def normalize_aliases(data):
    """receiver_* 등 별칭 필드를 컬럼명으로 변환 (컬럼명 값 우선)"""
    normalized = dict(data)
    for alias, column in FIELD_ALIASES.items():
        if alias in data and not normalized.get(column):
            normalized[column] = data[alias]
    return normalized


def visible_deliveries(user):
    """역할별 조회 범위 (기사: 배정분, 파트너: 본인 접수분)"""
    query = Delivery.query
    role = user.get('role')
    if role == 'driver':
        query = query.filter(Delivery.driver_id == user.get('id'))
    elif role == 'user':
        query = query.filter(Delivery.user_id == user.get('id'))
    return query


def find_delivery(user, delivery_id):
    return execute_with_retry(
        lambda: visible_deliveries(user).filter(Delivery.id == delivery_id).first()
    )


def find_delivery_by_tracking(user, tracking_number):
    return execute_with_retry(
        lambda: visible_deliveries(user).filter(Delivery.tracking_number == tracking_number).first()
    )


def commit_with_retry(delivery_id, mutate):
    """배송 행을 다시 읽어 변경 후 커밋 (재시도 시 변경 재적용)"""
    def _apply():
        delivery = db.session.get(Delivery, delivery_id)
        mutate(delivery)
        db.session.commit()
        return delivery
    return execute_with_retry(_apply)


def not_found(success_shape=False):
    if success_shape:
        return jsonify({'success': False, 'error': '해당 배송을 찾을 수 없습니다.'}), 404
    return jsonify({'error': 'Not Found', 'message': '배송 정보를 찾을 수 없거나 접근 권한이 없습니다.'}), 404
