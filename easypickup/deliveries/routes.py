"""
배송 접수/조회/수정 API
"""
from flask import request, jsonify, current_app
from sqlalchemy.exc import IntegrityError

from easypickup.deliveries import bp
from easypickup.deliveries.helpers import (
    CREATE_FIELDS, UPDATE_FIELDS, normalize_aliases, visible_deliveries,
    find_delivery, commit_with_retry, not_found,
)
from easypickup.common.models import (
    db, Delivery, Driver, DELIVERY_STATUSES, COMPLETED_STATUSES, dumps_json,
    STATUS_RECEIVED, STATUS_DISPATCHED, STATUS_LOADED,
)
from easypickup.common.database import (
    execute_with_retry, generate_unique_tracking_number, coerce_column_value,
)
from easypickup.common.middleware import require_auth, get_current_user
from easypickup.common.utils import (
    kst_today, kst_tomorrow, parse_date, get_pagination_args, build_pagination,
)
from easypickup.services.geocoding import get_geocoding_client
from easypickup.services.realtime import broadcast_delivery_event

REQUIRED_CREATE_FIELDS = (
    ('sender_name', 'sender_name'),
    ('sender_address', 'sender_address'),
    ('customer_name', 'receiver/customer_name'),
    ('customer_phone', 'receiver/customer_phone'),
    ('customer_address', 'receiver/customer_address'),
)


def _join_address(address, detail):
    return f'{address} {detail}' if detail else address


@bp.route('', methods=['POST'])
@require_auth
def create_delivery():
    """배송 접수"""
    try:
        raw = request.get_json(silent=True) or {}
        data = normalize_aliases(raw)
        user = get_current_user()

        missing = [label for field, label in REQUIRED_CREATE_FIELDS if not data.get(field)]
        if missing:
            return jsonify({
                'error': 'Bad Request',
                'message': f"필수 필드가 누락되었습니다: {', '.join(missing)}",
                'receivedFields': list(raw.keys())
            }), 400

        def _create():
            delivery = Delivery(
                tracking_number=generate_unique_tracking_number(),
                sender_name=data['sender_name'],
                sender_address=_join_address(data['sender_address'], data.get('sender_detail_address')),
                customer_name=data['customer_name'],
                customer_phone=data['customer_phone'],
                customer_address=_join_address(
                    data['customer_address'],
                    data.get('receiver_detail_address') or data.get('customer_detail_address')
                ),
                status=STATUS_RECEIVED,
                request_type=data.get('request_type') or '배송접수',
                user_id=user['id'] if user.get('role') != 'driver' else None,
            )
            for field in CREATE_FIELDS:
                if field in data and field != 'request_type':
                    setattr(delivery, field, coerce_column_value(Delivery, field, data[field]))
            db.session.add(delivery)
            db.session.commit()
            return delivery

        delivery = execute_with_retry(_create)

        current_app.logger.info(f"🚚 배송 접수 완료: {delivery.tracking_number} (by {user.get('username')})")
        return jsonify({
            'message': '배송 접수가 완료되었습니다.',
            'orderId': delivery.id,
            'trackingNumber': delivery.tracking_number,
            'status': delivery.status
        }), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': 'Bad Request', 'message': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송 접수 생성 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '배송 접수 처리 중 오류가 발생했습니다.'}), 500


@bp.route('', methods=['GET'])
@require_auth
def list_deliveries():
    """배송 목록 (역할별 범위, 상태 필터)"""
    try:
        user = get_current_user()
        page, limit = get_pagination_args(request)
        status = request.args.get('status')

        query = visible_deliveries(user)
        if status and status != 'all':
            query = query.filter(Delivery.status == status)

        pagination = execute_with_retry(
            lambda: query.order_by(Delivery.created_at.desc(), Delivery.id.desc()).paginate(
                page=page, per_page=limit, error_out=False
            )
        )

        return jsonify({
            'deliveries': [delivery.to_list_dict() for delivery in pagination.items],
            'pagination': build_pagination(page, limit, pagination.total)
        })

    except Exception as e:
        current_app.logger.error(f"❌ 배송 목록 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '배송 목록 조회 중 오류가 발생했습니다.'}), 500


@bp.route('/track/<tracking_number>', methods=['GET'])
def track_delivery(tracking_number):
    """운송장 번호로 배송 추적 (공개)"""
    try:
        delivery = execute_with_retry(lambda: Delivery.get_by_tracking_number(tracking_number))
        if delivery is None:
            return jsonify({'error': 'Not Found', 'message': '해당 운송장 번호를 찾을 수 없습니다.'}), 404

        history = [{
            'status': STATUS_RECEIVED,
            'timestamp': delivery.created_at.isoformat() if delivery.created_at else None,
            'location': '집하점',
            'description': '배송 접수가 완료되었습니다.'
        }]
        updated_at = delivery.updated_at.isoformat() if delivery.updated_at else None

        if delivery.status in (STATUS_LOADED, STATUS_DISPATCHED) + COMPLETED_STATUSES:
            history.append({
                'status': '배송중',
                'timestamp': updated_at,
                'location': '배송 중',
                'description': '상품이 배송 중입니다.'
            })
        if delivery.status in COMPLETED_STATUSES:
            history.append({
                'status': delivery.status,
                'timestamp': updated_at,
                'location': '수취인',
                'description': '배송이 완료되었습니다.'
            })

        return jsonify({
            'trackingNumber': delivery.tracking_number,
            'currentStatus': delivery.status,
            'orderInfo': {
                'senderName': delivery.sender_name,
                'recipientAddress': delivery.customer_address,
                'productName': delivery.product_name,
                'customerName': delivery.customer_name,
                'visitDate': delivery.visit_date.strftime('%Y-%m-%d') if delivery.visit_date else None,
                'visitTime': delivery.visit_time
            },
            'statusHistory': history
        })

    except Exception as e:
        current_app.logger.error(f"❌ 배송 추적 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '배송 추적 중 오류가 발생했습니다.'}), 500


@bp.route('/<int:delivery_id>', methods=['GET'])
@require_auth
def get_delivery(delivery_id):
    """배송 상세"""
    try:
        delivery = find_delivery(get_current_user(), delivery_id)
        if delivery is None:
            return not_found()
        return jsonify({'delivery': delivery.to_dict()})
    except Exception as e:
        current_app.logger.error(f"❌ 배송 상세 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '배송 상세 조회 중 오류가 발생했습니다.'}), 500


@bp.route('/<int:delivery_id>/status', methods=['PATCH'])
@require_auth
def update_delivery_status(delivery_id):
    """배송 상태만 변경"""
    try:
        status = (request.get_json(silent=True) or {}).get('status')
        if status not in DELIVERY_STATUSES:
            return jsonify({'error': 'Bad Request', 'message': '유효하지 않은 상태값입니다.'}), 400

        if find_delivery(get_current_user(), delivery_id) is None:
            return not_found()

        def _mutate(delivery):
            delivery.status = status

        delivery = commit_with_retry(delivery_id, _mutate)
        current_app.logger.info(f"🚚 배송 상태 변경: {delivery.tracking_number} -> {status}")
        broadcast_delivery_event('delivery_status_updated', {
            'id': delivery.id,
            'status': status,
            'delivery': delivery.to_dict()
        })

        return jsonify({'message': '배송 상태가 성공적으로 업데이트되었습니다.', 'delivery': delivery.to_dict()})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송 상태 업데이트 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '상태 업데이트 중 오류가 발생했습니다.'}), 500


def build_delivery_changes(delivery, data):
    """
    PUT 요청 본문 -> 컬럼 변경 목록

    기사 배정 시 상태 '배차완료', 방문일이 없거나 오늘 이전이면 내일로 설정하고
    출발지-도착지 거리를 계산한다. 배정 해제 시 상태는 '접수완료'.
    """
    changes = {}
    for key, value in data.items():
        if key not in UPDATE_FIELDS:
            continue
        if key == 'installation_photos' and value not in (None, ''):
            value = dumps_json(value)
        elif key == 'driver_id' and value == '':
            value = None
        changes[key] = value

    if 'status' in changes and changes['status'] not in DELIVERY_STATUSES:
        raise ValueError('유효하지 않은 상태값입니다.')

    if 'driver_id' in data and data['driver_id'] not in (None, ''):
        driver_id = int(data['driver_id'])
        if db.session.get(Driver, driver_id) is None:
            raise ValueError('존재하지 않는 기사입니다.')
        changes['driver_id'] = driver_id
        changes['status'] = STATUS_DISPATCHED

        current_visit = parse_date(changes['visit_date']) if 'visit_date' in changes else delivery.visit_date
        if current_visit is None or current_visit <= kst_today():
            changes['visit_date'] = kst_tomorrow().strftime('%Y-%m-%d')
            current_app.logger.info(f"[기사 배정] visit_date 자동 설정: {changes['visit_date']}")

        sender_address = changes.get('sender_address', delivery.sender_address)
        customer_address = changes.get('customer_address', delivery.customer_address)
        if sender_address and customer_address:
            changes['distance'] = get_geocoding_client().calculate_distance(sender_address, customer_address)

    elif 'driver_id' in data:
        changes['status'] = STATUS_RECEIVED

    return changes


@bp.route('/<int:delivery_id>', methods=['PUT'])
@require_auth
def update_delivery(delivery_id):
    """배송 정보 수정 (허용 필드만)"""
    try:
        delivery = find_delivery(get_current_user(), delivery_id)
        if delivery is None:
            return not_found()

        data = request.get_json(silent=True) or {}
        changes = build_delivery_changes(delivery, data)
        if not changes:
            return jsonify({'error': 'Bad Request', 'message': '업데이트할 필드가 없습니다.'}), 400

        coerced = {field: coerce_column_value(Delivery, field, value) for field, value in changes.items()}

        def _mutate(target):
            for field, value in coerced.items():
                setattr(target, field, value)

        delivery = commit_with_retry(delivery_id, _mutate)
        current_app.logger.info(f"🚚 배송 정보 수정: {delivery.tracking_number} ({', '.join(sorted(coerced))})")

        return jsonify({'message': '배송 정보가 성공적으로 업데이트되었습니다.', 'delivery': delivery.to_dict()})

    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning(f"⚠️ 배송 {delivery_id} 수정 거부: 중복된 운송장 번호")
        return jsonify({'error': 'Bad Request', 'message': '이미 사용 중인 운송장 번호입니다.'}), 400
    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': 'Bad Request', 'message': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송 {delivery_id} 업데이트 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '배송 정보 업데이트 중 오류가 발생했습니다.'}), 500
