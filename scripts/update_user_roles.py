#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
users.role 정리: admin/manager/user 외 값은 user 로 변경
"""

import os
import sys
from pathlib import Path

# 프로젝트 루트 디렉토리를 Python 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from easypickup import create_app
from easypickup.common.models import db, User, USER_ROLES


def normalize_user_roles():
    """알 수 없는 권한을 user 로 변경, 변경 건수 반환"""
    updated = User.query.filter(
        db.or_(User.role.is_(None), User.role.notin_(USER_ROLES))
    ).update({'role': 'user'}, synchronize_session=False)
    db.session.commit()
    return updated


if __name__ == '__main__':
    app = create_app(os.environ.get('FLASK_ENV', 'development'))
    with app.app_context():
        try:
            updated = normalize_user_roles()
            print(f"✅ 권한 정리 완료: {updated}건 변경")
            for (role,) in db.session.query(User.role).distinct().order_by(User.role):
                print(f"  - {role}")
        except Exception as e:
            db.session.rollback()
            print(f"❌ 권한 정리 실패: {e}")
            sys.exit(1)
