"""
기사 관리 API
"""
from flask import request, jsonify, current_app

from easypickup.drivers import bp
from easypickup.common.models import db, Driver, Delivery, COMPLETED_STATUSES, CANCELLED_STATUSES
from easypickup.common.database import coerce_column_value
from easypickup.common.middleware import require_auth, require_manager


@bp.route('', methods=['GET'])
@require_auth
def list_drivers():
    """기사 목록"""
    try:
        drivers = Driver.query.order_by(Driver.created_at.desc(), Driver.id.desc()).all()
        return jsonify({'success': True, 'drivers': [driver.to_dict() for driver in drivers]})
    except Exception as e:
        current_app.logger.error(f"❌ 기사 목록 조회 실패: {e}")
        return jsonify({'success': False, 'message': '기사 목록 조회 중 오류가 발생했습니다.', 'error': str(e)}), 500


@bp.route('/search', methods=['GET'])
@require_auth
def search_drivers():
    """기사 검색 (이름/아이디/연락처/차량번호)"""
    try:
        keyword = (request.args.get('q') or '').strip()
        if not keyword:
            return jsonify({'success': False, 'message': '검색어를 입력해주세요.'}), 400

        pattern = f'%{keyword}%'
        drivers = Driver.query.filter(db.or_(
            Driver.name.like(pattern),
            Driver.username.like(pattern),
            Driver.phone.like(pattern),
            Driver.vehicle_number.like(pattern)
        )).order_by(Driver.name.asc()).all()

        return jsonify({'success': True, 'drivers': [driver.to_dict() for driver in drivers]})
    except Exception as e:
        current_app.logger.error(f"❌ 기사 검색 실패: {e}")
        return jsonify({'success': False, 'message': '기사 검색 중 오류가 발생했습니다.', 'error': str(e)}), 500


@bp.route('/<int:driver_id>', methods=['GET'])
@require_auth
def get_driver(driver_id):
    """기사 상세"""
    try:
        driver = db.session.get(Driver, driver_id)
        if driver is None:
            return jsonify({'success': False, 'message': '기사를 찾을 수 없습니다.'}), 404
        return jsonify({'success': True, 'driver': driver.to_dict()})
    except Exception as e:
        current_app.logger.error(f"❌ 기사 정보 조회 실패: {e}")
        return jsonify({'success': False, 'message': '기사 정보 조회 중 오류가 발생했습니다.', 'error': str(e)}), 500


@bp.route('', methods=['POST'])
@require_manager
def create_driver():
    """기사 등록"""
    try:
        data = request.get_json(silent=True) or {}
        username = (data.get('username') or '').strip()
        password = data.get('password') or ''
        name = (data.get('name') or '').strip()

        if not username or not password or not name:
            return jsonify({'success': False, 'message': '사용자명, 비밀번호, 이름은 필수입니다.'}), 400

        if Driver.query.filter_by(username=username).first():
            return jsonify({'success': False, 'message': '이미 존재하는 사용자명입니다.'}), 409

        driver = Driver(username=username, name=name, is_active=True)
        driver.set_password(password)
        for field in Driver.EDITABLE_FIELDS:
            if field != 'name' and field in data:
                setattr(driver, field, coerce_column_value(Driver, field, data[field]))
        if driver.is_active is None:
            driver.is_active = True

        db.session.add(driver)
        db.session.commit()

        current_app.logger.info(f"✅ 기사 등록: {username}")
        return jsonify({'success': True, 'message': '기사가 성공적으로 등록되었습니다.', 'driver': driver.to_dict()}), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'success': False, 'message': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 기사 등록 실패: {e}")
        return jsonify({'success': False, 'message': '기사 등록 중 오류가 발생했습니다.', 'error': str(e)}), 500


@bp.route('/<int:driver_id>', methods=['PUT'])
@require_manager
def update_driver(driver_id):
    """기사 정보 수정"""
    try:
        driver = db.session.get(Driver, driver_id)
        if driver is None:
            return jsonify({'success': False, 'message': '기사를 찾을 수 없습니다.'}), 404

        data = request.get_json(silent=True) or {}

        if 'username' in data and data['username'] != driver.username:
            username = (data['username'] or '').strip()
            if not username:
                return jsonify({'success': False, 'message': '사용자명은 비워둘 수 없습니다.'}), 400
            if Driver.query.filter(Driver.username == username, Driver.id != driver.id).first():
                return jsonify({'success': False, 'message': '이미 존재하는 사용자명입니다.'}), 409
            driver.username = username

        if data.get('password'):
            driver.set_password(data['password'])

        for field in Driver.EDITABLE_FIELDS:
            if field in data:
                setattr(driver, field, coerce_column_value(Driver, field, data[field]))

        db.session.commit()
        return jsonify({'success': True, 'message': '기사 정보가 수정되었습니다.', 'driver': driver.to_dict()})

    except ValueError as e:
        db.session.rollback()
        return jsonify({'success': False, 'message': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 기사 수정 실패: {e}")
        return jsonify({'success': False, 'message': '기사 수정 중 오류가 발생했습니다.', 'error': str(e)}), 500


@bp.route('/<int:driver_id>', methods=['DELETE'])
@require_manager
def delete_driver(driver_id):
    """기사 삭제 (진행 중인 배송은 배정 해제)"""
    try:
        driver = db.session.get(Driver, driver_id)
        if driver is None:
            return jsonify({'success': False, 'message': '기사를 찾을 수 없습니다.'}), 404

        finished = COMPLETED_STATUSES + CANCELLED_STATUSES
        released = Delivery.query.filter(
            Delivery.driver_id == driver_id,
            Delivery.status.notin_(finished)
        ).update({'driver_id': None}, synchronize_session=False)

        db.session.delete(driver)
        db.session.commit()

        if released:
            current_app.logger.info(f"🚚 기사 삭제로 배송 {released}건 배정 해제 (driver_id={driver_id})")
        return jsonify({'success': True, 'message': '기사가 삭제되었습니다.', 'releasedDeliveries': released})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 기사 삭제 실패: {e}")
        return jsonify({'success': False, 'message': '기사 삭제 중 오류가 발생했습니다.', 'error': str(e)}), 500
