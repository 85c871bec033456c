from flask import Blueprint, request, jsonify, session, current_app
from flask_login import login_user, logout_user

from easypickup.common.models import db, User, Driver, USER_ROLES
from easypickup.common.database import execute_with_retry
from easypickup.common.middleware import (
    create_access_token, get_current_user, load_account, require_auth, is_admin
)
from easypickup.common.utils import kst_now

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

MIN_PASSWORD_LENGTH = 4


@auth_bp.route('/register', methods=['POST'])
def register():
    """회원가입"""
    try:
        data = request.get_json(silent=True) or {}
        username = (data.get('username') or '').strip()
        password = data.get('password') or ''
        name = (data.get('name') or '').strip()

        if not username or not password or not name:
            return jsonify({'error': 'Bad Request', 'message': '필수 필드가 누락되었습니다.'}), 400

        if len(password) < MIN_PASSWORD_LENGTH:
            return jsonify({'error': 'Bad Request', 'message': '비밀번호는 4자 이상이어야 합니다.'}), 400

        if User.query.filter_by(username=username).first():
            return jsonify({'error': 'Conflict', 'message': '이미 사용 중인 아이디입니다.'}), 409

        # 관리자만 역할 지정 가능
        role = 'user'
        if data.get('role') and is_admin():
            if data['role'] not in USER_ROLES:
                return jsonify({'error': 'Bad Request', 'message': '유효하지 않은 권한입니다.'}), 400
            role = data['role']

        user = User(
            username=username,
            name=name,
            phone=data.get('phone') or None,
            company=data.get('company') or None,
            email=data.get('email') or None,
            role=role,
            is_active=True
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()

        current_app.logger.info(f"✅ 회원가입 완료: {username}")
        return jsonify({'message': '회원가입이 완료되었습니다.', 'userId': user.id}), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 회원가입 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '회원가입 처리 중 오류가 발생했습니다.'}), 500


@auth_bp.route('/check-username/<username>')
def check_username(username):
    """아이디 중복 확인"""
    try:
        exists = User.query.filter_by(username=username).first() is not None
        return jsonify({
            'available': not exists,
            'message': '이미 사용 중인 아이디입니다.' if exists else '사용 가능한 아이디입니다.'
        })
    except Exception as e:
        current_app.logger.error(f"❌ 아이디 확인 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '아이디 확인 중 오류가 발생했습니다.'}), 500


@auth_bp.route('/login', methods=['POST'])
def login():
    """로그인 (users -> drivers 순서로 조회)"""
    try:
        data = request.get_json(silent=True) or {}
        username = (data.get('username') or '').strip()
        password = data.get('password') or ''

        if not username or not password:
            return jsonify({'error': 'Bad Request', 'message': '아이디와 비밀번호를 입력해주세요.'}), 400

        account = execute_with_retry(lambda: User.query.filter_by(username=username).first())
        if account is None:
            account = execute_with_retry(lambda: Driver.query.filter_by(username=username).first())

        if account is None or not account.verify_password(password):
            return jsonify({'error': 'Unauthorized', 'message': '아이디 또는 비밀번호가 올바르지 않습니다.'}), 401

        if not account.is_active:
            return jsonify({'error': 'Unauthorized', 'message': '비활성화된 계정입니다. 관리자에게 문의하세요.'}), 401

        # 레거시 bcrypt 해시는 로그인 성공 시 재해시
        if account.has_legacy_password:
            account.set_password(password)
            current_app.logger.info(f"🔄 레거시 비밀번호 해시 갱신: {username}")

        if isinstance(account, User):
            account.last_login = kst_now()
        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ 마지막 로그인 시간 업데이트 오류: {e}")

        payload = account.to_token_payload()
        token = create_access_token(payload)

        # 세션에도 저장 (기존 호환성 유지)
        login_user(account)
        session.permanent = True
        session['user'] = payload

        current_app.logger.info(f"✅ 로그인 성공: {username} ({payload['role']})")
        return jsonify({'message': '로그인 성공', 'user': payload, 'token': token})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 로그인 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '로그인 처리 중 오류가 발생했습니다.'}), 500


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """로그아웃"""
    logout_user()
    session.clear()
    return jsonify({'message': '로그아웃되었습니다.'})


@auth_bp.route('/me')
@require_auth
def me():
    """현재 로그인 사용자 (DB 최신 정보)"""
    try:
        account = execute_with_retry(lambda: load_account(get_current_user()))
        if account is None or not account.is_active:
            return jsonify({'error': 'Unauthorized', 'message': '유효하지 않은 사용자입니다.'}), 401

        return jsonify({'user': account.to_token_payload(), 'authenticated': True})

    except Exception as e:
        current_app.logger.error(f"❌ 사용자 정보 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '사용자 정보 조회 중 오류가 발생했습니다.'}), 500


@auth_bp.route('/profile')
@require_auth
def profile():
    """프로필 상세"""
    try:
        account = load_account(get_current_user())
        if account is None:
            return jsonify({'error': 'Not Found', 'message': '사용자를 찾을 수 없습니다.'}), 404
        return jsonify({'user': account.to_dict()})
    except Exception as e:
        current_app.logger.error(f"❌ 프로필 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '프로필 조회 중 오류가 발생했습니다.'}), 500
