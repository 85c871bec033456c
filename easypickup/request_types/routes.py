"""
의뢰 종류 API (조회 공개, 변경은 관리자)
"""
from flask import request, jsonify, current_app
from sqlalchemy.exc import IntegrityError

from easypickup.request_types import bp
from easypickup.common.models import db, RequestType
from easypickup.common.database import coerce_column_value
from easypickup.common.middleware import require_admin


def _conflict():
    return jsonify({'success': False, 'error': 'Conflict', 'message': '이미 존재하는 의뢰타입 이름입니다.'}), 409


def _not_found():
    return jsonify({'success': False, 'error': 'Not Found', 'message': '의뢰타입을 찾을 수 없습니다.'}), 404


def _name_taken(name, exclude_id=None):
    query = RequestType.query.filter(RequestType.name == name)
    if exclude_id is not None:
        query = query.filter(RequestType.id != exclude_id)
    return query.first() is not None


@bp.route('', methods=['GET'])
def list_request_types():
    """활성 의뢰 종류 목록"""
    try:
        request_types = RequestType.get_active()
        return jsonify({
            'success': True,
            'data': [item.to_dict() for item in request_types],
            'message': '의뢰타입 목록을 성공적으로 조회했습니다.'
        })
    except Exception as e:
        current_app.logger.error(f"❌ 의뢰타입 목록 조회 오류: {e}")
        return jsonify({
            'success': False,
            'error': 'Internal Server Error',
            'message': '의뢰타입 목록 조회 중 오류가 발생했습니다.'
        }), 500


@bp.route('', methods=['POST'])
@require_admin
def create_request_type():
    try:
        data = request.get_json(silent=True) or {}
        name = (data.get('name') or '').strip()
        if not name:
            return jsonify({'success': False, 'error': 'Bad Request', 'message': '의뢰타입 이름은 필수입니다.'}), 400

        if _name_taken(name):
            return _conflict()

        item = RequestType(
            name=name,
            description=data.get('description') or None,
            sort_order=coerce_column_value(RequestType, 'sort_order', data.get('sort_order')) or 0,
            is_active=True
        )
        db.session.add(item)
        db.session.commit()

        current_app.logger.info(f"✅ 의뢰타입 생성: {name}")
        return jsonify({
            'success': True,
            'data': item.to_dict(),
            'message': '의뢰타입이 성공적으로 생성되었습니다.'
        }), 201

    except IntegrityError:
        db.session.rollback()
        return _conflict()
    except ValueError as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': 'Bad Request', 'message': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 의뢰타입 생성 오류: {e}")
        return jsonify({
            'success': False,
            'error': 'Internal Server Error',
            'message': '의뢰타입 생성 중 오류가 발생했습니다.'
        }), 500


@bp.route('/<int:type_id>', methods=['PUT'])
@require_admin
def update_request_type(type_id):
    """전달된 필드만 수정"""
    try:
        item = db.session.get(RequestType, type_id)
        if item is None:
            return _not_found()

        data = request.get_json(silent=True) or {}
        if data.get('name') is not None:
            name = str(data['name']).strip()
            if _name_taken(name, exclude_id=type_id):
                return _conflict()
            item.name = name
        for field in ('description', 'sort_order', 'is_active'):
            if data.get(field) is not None:
                setattr(item, field, coerce_column_value(RequestType, field, data[field]))
        db.session.commit()

        return jsonify({'success': True, 'data': item.to_dict(), 'message': '의뢰타입이 성공적으로 수정되었습니다.'})

    except IntegrityError:
        db.session.rollback()
        return _conflict()
    except ValueError as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': 'Bad Request', 'message': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 의뢰타입 수정 오류: {e}")
        return jsonify({
            'success': False,
            'error': 'Internal Server Error',
            'message': '의뢰타입 수정 중 오류가 발생했습니다.'
        }), 500


@bp.route('/<int:type_id>', methods=['DELETE'])
@require_admin
def delete_request_type(type_id):
    """비활성화 처리"""
    try:
        item = db.session.get(RequestType, type_id)
        if item is None:
            return _not_found()

        item.is_active = False
        db.session.commit()

        current_app.logger.info(f"🗑️ 의뢰타입 비활성화: {item.name}")
        return jsonify({'success': True, 'message': '의뢰타입이 성공적으로 삭제되었습니다.'})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 의뢰타입 삭제 오류: {e}")
        return jsonify({
            'success': False,
            'error': 'Internal Server Error',
            'message': '의뢰타입 삭제 중 오류가 발생했습니다.'
        }), 500
