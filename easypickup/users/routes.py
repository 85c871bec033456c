"""
사용자 관리 API
"""
from flask import request, jsonify, current_app

from easypickup.users import bp
from easypickup.common.models import db, User, UserActivity, USER_ROLES
from easypickup.common.middleware import (
    require_auth, require_admin, require_manager, get_current_user, is_admin, log_user_activity
)
from easypickup.common.utils import get_pagination_args, build_pagination

UPDATABLE_FIELDS = ('name', 'email', 'phone', 'company') + User.PROFILE_FIELDS
MIN_PASSWORD_LENGTH = 4


def _coerce_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'y', 'yes', 'on')
    return bool(value)


@bp.route('', methods=['GET'])
@require_manager
def list_users():
    """사용자 목록 (검색/역할 필터/페이지네이션)"""
    try:
        page, limit = get_pagination_args(request)
        search = (request.args.get('search') or '').strip()
        role = request.args.get('role')

        query = User.query
        if search:
            pattern = f'%{search}%'
            query = query.filter(db.or_(
                User.username.like(pattern),
                User.name.like(pattern),
                User.company.like(pattern)
            ))
        if role:
            query = query.filter(User.role == role)

        pagination = query.order_by(User.created_at.desc(), User.id.desc()).paginate(
            page=page, per_page=limit, error_out=False
        )

        return jsonify({
            'users': [user.to_dict() for user in pagination.items],
            'pagination': build_pagination(page, limit, pagination.total)
        })

    except Exception as e:
        current_app.logger.error(f"❌ 사용자 목록 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '사용자 목록 조회 중 오류가 발생했습니다.'}), 500


@bp.route('/activities/logs', methods=['GET'])
@require_manager
def user_activities():
    """사용자 활동 로그"""
    try:
        page, limit = get_pagination_args(request, default_limit=20)

        query = db.session.query(UserActivity, User.username, User.name).outerjoin(
            User, UserActivity.user_id == User.id
        )
        if request.args.get('user_id'):
            query = query.filter(UserActivity.user_id == request.args.get('user_id', type=int))
        if request.args.get('action'):
            query = query.filter(UserActivity.action == request.args['action'])

        total = query.count()
        rows = query.order_by(UserActivity.created_at.desc(), UserActivity.id.desc()) \
            .offset((page - 1) * limit).limit(limit).all()

        activities = []
        for activity, username, user_name in rows:
            item = activity.to_dict(username=username)
            item['user_name'] = user_name
            activities.append(item)

        return jsonify({'activities': activities, 'pagination': build_pagination(page, limit, total)})

    except Exception as e:
        current_app.logger.error(f"❌ 활동 로그 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '활동 로그 조회 중 오류가 발생했습니다.'}), 500


@bp.route('/profile', methods=['PUT'])
@require_auth
def update_profile():
    """내 프로필 수정"""
    try:
        current = get_current_user()
        if current.get('role') == 'driver':
            return jsonify({'error': 'Forbidden', 'message': '기사 계정은 기사 정보 수정을 이용해주세요.'}), 403

        user = db.session.get(User, current['id'])
        if user is None:
            return jsonify({'error': 'Not Found', 'message': '사용자를 찾을 수 없습니다.'}), 404

        data = request.get_json(silent=True) or {}
        name = (data.get('name') or '').strip()
        if not name:
            return jsonify({'error': 'Bad Request', 'message': '이름은 필수입니다.'}), 400

        password = data.get('password')
        if password:
            if len(password) < MIN_PASSWORD_LENGTH:
                return jsonify({'error': 'Bad Request', 'message': '비밀번호는 최소 4자 이상이어야 합니다.'}), 400
            user.set_password(password)

        user.name = name
        for field in ('email', 'phone', 'company') + User.PROFILE_FIELDS:
            if field in data:
                setattr(user, field, data[field] or None)

        db.session.commit()
        log_user_activity(user.id, 'update_profile', 'user', user.id, {'fields': sorted(data.keys())})

        return jsonify({'message': '프로필이 성공적으로 업데이트되었습니다.', 'user': user.to_dict()})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 프로필 업데이트 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '프로필 업데이트 중 오류가 발생했습니다.'}), 500


@bp.route('/<int:user_id>', methods=['GET'])
@require_manager
def get_user(user_id):
    """사용자 상세"""
    try:
        user = db.session.get(User, user_id)
        if user is None:
            return jsonify({'error': 'Not Found', 'message': '사용자를 찾을 수 없습니다.'}), 404
        return jsonify({'user': user.to_dict()})
    except Exception as e:
        current_app.logger.error(f"❌ 사용자 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '사용자 조회 중 오류가 발생했습니다.'}), 500


@bp.route('', methods=['POST'])
@require_admin
def create_user():
    """사용자 생성 (관리자)"""
    try:
        data = request.get_json(silent=True) or {}
        username = (data.get('username') or '').strip()
        password = data.get('password') or ''
        name = (data.get('name') or '').strip()
        role = data.get('role') or 'user'

        if not username or not password or not name:
            return jsonify({'error': 'Bad Request', 'message': '사용자명, 비밀번호, 이름은 필수입니다.'}), 400

        if role not in USER_ROLES:
            return jsonify({'error': 'Bad Request', 'message': '유효하지 않은 권한입니다.'}), 400

        if User.query.filter_by(username=username).first():
            return jsonify({'error': 'Bad Request', 'message': '이미 존재하는 사용자명입니다.'}), 400

        user = User(username=username, name=name, role=role, is_active=True)
        user.set_password(password)
        for field in UPDATABLE_FIELDS:
            if field != 'name' and data.get(field):
                setattr(user, field, data[field])
        db.session.add(user)
        db.session.commit()

        log_user_activity(get_current_user()['id'], 'create_user', 'user', user.id, {
            'target_username': username,
            'target_name': name,
            'target_role': role
        })

        return jsonify({'message': '사용자가 성공적으로 생성되었습니다.', 'userId': user.id}), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 사용자 생성 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '사용자 생성 중 오류가 발생했습니다.'}), 500


@bp.route('/<int:user_id>', methods=['PUT'])
@require_admin
def update_user(user_id):
    """사용자 수정 (관리자)"""
    try:
        user = db.session.get(User, user_id)
        if user is None:
            return jsonify({'error': 'Not Found', 'message': '사용자를 찾을 수 없습니다.'}), 404

        data = request.get_json(silent=True) or {}
        changes = {}

        for field in UPDATABLE_FIELDS:
            if field in data:
                changes[field] = data[field]

        if is_admin():
            if 'role' in data:
                if data['role'] not in USER_ROLES:
                    return jsonify({'error': 'Bad Request', 'message': '유효하지 않은 권한입니다.'}), 400
                changes['role'] = data['role']
            if 'is_active' in data:
                changes['is_active'] = _coerce_bool(data['is_active'])

        if data.get('password'):
            if len(data['password']) < MIN_PASSWORD_LENGTH:
                return jsonify({'error': 'Bad Request', 'message': '비밀번호는 최소 4자 이상이어야 합니다.'}), 400
            user.set_password(data['password'])
            changes['password'] = '********'

        if not changes:
            return jsonify({'error': 'Bad Request', 'message': '업데이트할 필드가 없습니다.'}), 400

        for field, value in changes.items():
            if field != 'password':
                setattr(user, field, value)
        db.session.commit()

        log_user_activity(get_current_user()['id'], 'update_user', 'user', user.id, {
            'updated_fields': sorted(changes.keys())
        })

        return jsonify({'message': '사용자 정보가 성공적으로 업데이트되었습니다.', 'user': user.to_dict()})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 사용자 업데이트 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '사용자 업데이트 중 오류가 발생했습니다.'}), 500


@bp.route('/<int:user_id>', methods=['DELETE'])
@require_admin
def delete_user(user_id):
    """사용자 삭제 (관리자, 본인 제외)"""
    try:
        current = get_current_user()
        if current.get('id') == user_id:
            return jsonify({'error': 'Bad Request', 'message': '자기 자신은 삭제할 수 없습니다.'}), 400

        user = db.session.get(User, user_id)
        if user is None:
            return jsonify({'error': 'Not Found', 'message': '사용자를 찾을 수 없습니다.'}), 404

        deleted = {'target_username': user.username, 'target_name': user.name}
        db.session.delete(user)
        db.session.commit()

        log_user_activity(current['id'], 'delete_user', 'user', user_id, deleted)

        return jsonify({'message': '사용자가 성공적으로 삭제되었습니다.'})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 사용자 삭제 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '사용자 삭제 중 오류가 발생했습니다.'}), 500
