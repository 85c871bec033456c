#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
스키마 마이그레이션 적용 스크립트
미적용 버전만 순서대로 실행
"""

import os
import sys
import logging
from pathlib import Path

# 프로젝트 루트 디렉토리를 Python 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from easypickup import create_app
from easypickup.common.migrations import apply_migrations, current_version, LATEST_VERSION

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('create_tables.log', encoding='utf-8'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


def main():
    app = create_app(os.environ.get('FLASK_ENV', 'development'))

    with app.app_context():
        try:
            applied = apply_migrations()
            if applied:
                logger.info(f"✅ 마이그레이션 적용 완료: {applied}")
            else:
                logger.info("✅ 적용할 마이그레이션이 없습니다")
            logger.info(f"📋 현재 스키마 버전: {current_version()} / {LATEST_VERSION}")
            return True
        except Exception as e:
            logger.error(f"❌ 마이그레이션 실패: {e}")
            return False


if __name__ == '__main__':
    sys.exit(0 if main() else 1)
