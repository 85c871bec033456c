"""
관리자 테스트 도구 API
연결 확인, 테스트 데이터 생성/삭제
"""
import time

from flask import request, jsonify, current_app
from sqlalchemy import text

from easypickup.debug import bp
from easypickup.deliveries.helpers import CREATE_FIELDS, normalize_aliases
from easypickup.common.models import db, User, Driver, Delivery, DELIVERY_STATUSES
from easypickup.common.database import coerce_column_value
from easypickup.common.middleware import require_admin
from easypickup.services.fixtures import (
    SEED_PASSWORD, create_random_driver, create_random_partner,
    create_random_delivery, delivery_defaults, create_delivery,
)

CUSTOM_DELIVERY_FIELDS = CREATE_FIELDS + (
    'sender_name', 'sender_address', 'customer_name', 'customer_phone', 'customer_address',
    'status', 'driver_id', 'user_id',
)


def _partners_query():
    return User.query.filter(User.role == 'user', User.username != 'admin')


def _server_error(message, e):
    current_app.logger.error(f"❌ {message}: {e}")
    return jsonify({'error': 'Internal Server Error', 'message': f'{message} 중 오류가 발생했습니다.'}), 500


@bp.route('/connection', methods=['GET'])
@require_admin
def connection_check():
    """DB 연결 확인 (SELECT 1 + 응답 시간)"""
    started = time.perf_counter()
    try:
        db.session.execute(text('SELECT 1'))
        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        return jsonify({'connected': True, 'latencyMs': latency_ms, 'dialect': db.engine.dialect.name})
    except Exception as e:
        current_app.logger.error(f"❌ DB 연결 확인 실패: {e}")
        return jsonify({'connected': False, 'error': str(e)}), 503


@bp.route('/api-status', methods=['GET'])
@require_admin
def api_status():
    """등록된 API 라우트 목록"""
    routes = sorted(
        ({
            'rule': rule.rule,
            'methods': sorted(rule.methods - {'HEAD', 'OPTIONS'}),
            'endpoint': rule.endpoint
        } for rule in current_app.url_map.iter_rules() if rule.rule.startswith('/api/')),
        key=lambda item: item['rule']
    )
    return jsonify({'status': 'OK', 'count': len(routes), 'routes': routes})


@bp.route('/partners', methods=['GET'])
@require_admin
def list_partners():
    try:
        partners = _partners_query().order_by(User.id.desc()).all()
        return jsonify({
            'partners': [partner.to_dict() for partner in partners],
            'count': len(partners),
            'message': '파트너사 목록을 성공적으로 조회했습니다.'
        })
    except Exception as e:
        return _server_error('파트너사 목록 조회', e)


@bp.route('/partners', methods=['DELETE'])
@require_admin
def delete_partners():
    try:
        deleted = _partners_query().delete(synchronize_session=False)
        db.session.commit()
        current_app.logger.info(f"🗑️ 테스트 파트너사 {deleted}명 삭제")
        return jsonify({'deletedCount': deleted, 'message': f'{deleted}개의 파트너사 사용자가 성공적으로 삭제되었습니다.'})
    except Exception as e:
        db.session.rollback()
        return _server_error('파트너사 삭제', e)


@bp.route('/drivers', methods=['GET'])
@require_admin
def list_drivers():
    try:
        drivers = Driver.query.order_by(Driver.id.desc()).all()
        return jsonify({
            'drivers': [driver.to_dict() for driver in drivers],
            'count': len(drivers),
            'message': '기사 목록을 성공적으로 조회했습니다.'
        })
    except Exception as e:
        return _server_error('기사 목록 조회', e)


@bp.route('/drivers', methods=['DELETE'])
@require_admin
def delete_drivers():
    try:
        deleted = Driver.query.delete(synchronize_session=False)
        db.session.commit()
        current_app.logger.info(f"🗑️ 테스트 기사 {deleted}명 삭제")
        return jsonify({'deletedCount': deleted, 'message': f'{deleted}개의 기사가 성공적으로 삭제되었습니다.'})
    except Exception as e:
        db.session.rollback()
        return _server_error('기사 삭제', e)


@bp.route('/deliveries', methods=['GET'])
@require_admin
def list_deliveries():
    try:
        deliveries = Delivery.query.order_by(Delivery.id.desc()).all()
        return jsonify({
            'deliveries': [delivery.to_list_dict() for delivery in deliveries],
            'count': len(deliveries),
            'message': '배송 목록을 성공적으로 조회했습니다.'
        })
    except Exception as e:
        return _server_error('배송 목록 조회', e)


@bp.route('/deliveries', methods=['DELETE'])
@require_admin
def delete_deliveries():
    try:
        deleted = Delivery.query.delete(synchronize_session=False)
        db.session.commit()
        current_app.logger.info(f"🗑️ 테스트 배송 {deleted}건 삭제")
        return jsonify({'deletedCount': deleted, 'message': f'{deleted}개의 배송이 성공적으로 삭제되었습니다.'})
    except Exception as e:
        db.session.rollback()
        return _server_error('배송 삭제', e)


@bp.route('/create-driver', methods=['POST'])
@require_admin
def create_driver():
    try:
        driver = create_random_driver()
        data = driver.to_dict()
        data['defaultPassword'] = SEED_PASSWORD
        return jsonify({'message': '기사가 성공적으로 생성되었습니다.', 'driver': data}), 201
    except Exception as e:
        db.session.rollback()
        return _server_error('기사 생성', e)


@bp.route('/create-partner', methods=['POST'])
@require_admin
def create_partner():
    try:
        partner = create_random_partner()
        data = partner.to_dict()
        data['defaultPassword'] = SEED_PASSWORD
        return jsonify({'message': '파트너사 사용자가 성공적으로 생성되었습니다.', 'user': data}), 201
    except Exception as e:
        db.session.rollback()
        return _server_error('파트너사 사용자 생성', e)


@bp.route('/create-3-partners', methods=['POST'])
@require_admin
def create_three_partners():
    try:
        partners = [create_random_partner() for _ in range(3)]
        return jsonify({
            'message': f'{len(partners)}명의 파트너사가 성공적으로 생성되었습니다.',
            'users': [partner.to_dict() for partner in partners],
            'defaultPassword': SEED_PASSWORD
        }), 201
    except Exception as e:
        db.session.rollback()
        return _server_error('파트너사 생성', e)


@bp.route('/create-delivery', methods=['POST'])
@require_admin
def create_random_test_delivery():
    """최근 파트너사/기사로 랜덤 배송 생성"""
    try:
        partner = _partners_query().order_by(User.id.desc()).first()
        if partner is None:
            return jsonify({'error': 'Bad Request', 'message': '파트너사가 존재하지 않습니다. 먼저 파트너사를 추가해주세요.'}), 400

        driver = Driver.query.order_by(Driver.id.desc()).first()
        if driver is None:
            return jsonify({'error': 'Bad Request', 'message': '기사가 존재하지 않습니다. 먼저 기사를 추가해주세요.'}), 400

        overrides = {}
        visit_date = (request.get_json(silent=True) or {}).get('visit_date')
        if visit_date:
            overrides['visit_date'] = coerce_column_value(Delivery, 'visit_date', visit_date)

        delivery = create_random_delivery(partner, driver, overrides)
        return jsonify({'message': '배송이 성공적으로 생성되었습니다.', 'delivery': delivery.to_dict()}), 201

    except Exception as e:
        db.session.rollback()
        return _server_error('배송 생성', e)


@bp.route('/create-custom-delivery', methods=['POST'])
@require_admin
def create_custom_delivery():
    """요청 값 + 랜덤 기본값으로 배송 생성"""
    try:
        data = normalize_aliases(request.get_json(silent=True) or {})

        if data.get('status') and data['status'] not in DELIVERY_STATUSES:
            return jsonify({'error': 'Bad Request', 'message': '유효하지 않은 상태값입니다.'}), 400

        fields = delivery_defaults()
        for field in CUSTOM_DELIVERY_FIELDS:
            if data.get(field) not in (None, ''):
                fields[field] = coerce_column_value(Delivery, field, data[field])

        delivery = create_delivery(fields)
        return jsonify({'message': '커스텀 배송이 성공적으로 생성되었습니다.', 'delivery': delivery.to_dict()}), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': 'Bad Request', 'message': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        return _server_error('커스텀 배송 생성', e)
