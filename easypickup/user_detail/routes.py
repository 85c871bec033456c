"""
사용자 상세정보 API (역할별 JSON 부가정보)
"""
from flask import request, jsonify, current_app

from easypickup.user_detail import bp
from easypickup.common.models import db, User, UserDetail, dumps_json
from easypickup.common.middleware import require_auth


def _error(message, status_code, error=None):
    body = {'success': False, 'message': message}
    if error is not None:
        body['error'] = str(error)
    return jsonify(body), status_code


def _create_detail(user_id, role, detail):
    if db.session.get(User, user_id) is None:
        return _error('존재하지 않는 사용자입니다.', 404)

    item = UserDetail(user_id=user_id, role=role, detail=dumps_json(detail))
    db.session.add(item)
    db.session.commit()

    current_app.logger.info(f"✅ 사용자 상세정보 생성: user {user_id} ({role})")
    return jsonify({
        'success': True,
        'message': '사용자 상세정보가 성공적으로 생성되었습니다.',
        'data': item.to_dict()
    }), 201


@bp.route('/<int:user_id>', methods=['GET'])
@require_auth
def get_user_detail(user_id):
    try:
        item = UserDetail.query.filter_by(user_id=user_id).first()
        if item is None:
            return _error('사용자 상세정보가 없습니다.', 404)
        return jsonify({'success': True, 'message': '사용자 상세정보 조회 성공', 'data': item.to_dict()})

    except Exception as e:
        current_app.logger.error(f"❌ 사용자 상세정보 조회 오류: {e}")
        return _error('사용자 상세정보 조회 중 오류가 발생했습니다.', 500, e)


@bp.route('/<int:user_id>', methods=['POST'])
@require_auth
def create_user_detail(user_id):
    try:
        data = request.get_json(silent=True) or {}
        role = data.get('role')
        detail = data.get('detail')

        if not role or not detail:
            return _error('role과 detail은 필수 입력값입니다.', 400)

        if UserDetail.query.filter_by(user_id=user_id).first():
            return _error('이미 상세정보가 존재합니다. 업데이트를 사용하세요.', 409)

        return _create_detail(user_id, role, detail)

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 사용자 상세정보 생성 오류: {e}")
        return _error('사용자 상세정보 생성 중 오류가 발생했습니다.', 500, e)


@bp.route('/<int:user_id>', methods=['PUT'])
@require_auth
def update_user_detail(user_id):
    """상세정보 수정 (없으면 생성)"""
    try:
        data = request.get_json(silent=True) or {}
        role = data.get('role')
        detail = data.get('detail')

        if not detail:
            return _error('detail은 필수 입력값입니다.', 400)

        item = UserDetail.query.filter_by(user_id=user_id).first()
        if item is None:
            if not role:
                return _error('role과 detail은 필수 입력값입니다.', 400)
            return _create_detail(user_id, role, detail)

        if role:
            item.role = role
        item.detail = dumps_json(detail)
        db.session.commit()

        return jsonify({
            'success': True,
            'message': '사용자 상세정보가 성공적으로 업데이트되었습니다.',
            'data': item.to_dict()
        })

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 사용자 상세정보 업데이트 오류: {e}")
        return _error('사용자 상세정보 업데이트 중 오류가 발생했습니다.', 500, e)


@bp.route('/<int:user_id>', methods=['DELETE'])
@require_auth
def delete_user_detail(user_id):
    try:
        item = UserDetail.query.filter_by(user_id=user_id).first()
        if item is None:
            return _error('삭제할 상세정보가 존재하지 않습니다.', 404)

        db.session.delete(item)
        db.session.commit()
        return jsonify({'success': True, 'message': '사용자 상세정보가 성공적으로 삭제되었습니다.'})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 사용자 상세정보 삭제 오류: {e}")
        return _error('사용자 상세정보 삭제 중 오류가 발생했습니다.', 500, e)
