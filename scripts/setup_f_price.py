#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
배송 단가표(f_price) 가져오기 스크립트

사용법:
    python scripts/setup_f_price.py f_price_data.xlsx --replace
"""

import os
import sys
import argparse
import logging
from pathlib import Path

# 프로젝트 루트 디렉토리를 Python 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from easypickup import create_app
from easypickup.common.models import FPrice
from easypickup.services.price_table import read_price_file, import_price_frame

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('setup_f_price.log', encoding='utf-8'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='f_price 단가표 가져오기')
    parser.add_argument('file', help='단가표 파일 (.xlsx / .csv / .json)')
    parser.add_argument('--replace', action='store_true', help='기존 단가 삭제 후 저장')
    args = parser.parse_args()

    app = create_app(os.environ.get('FLASK_ENV', 'development'))

    with app.app_context():
        try:
            df = read_price_file(args.file)
            logger.info(f"📄 {args.file}: {len(df)}행 읽음")

            saved, failed = import_price_frame(df, replace=args.replace)

            logger.info(f"📊 전체 단가 {FPrice.query.count()}건 (이번 저장 {saved}건, 실패 {failed}건)")
            for price in FPrice.query.limit(5).all():
                logger.info(f"  - {price.category} / {price.size}: 내림비 {price.narim_cost}")
            return True

        except Exception as e:
            logger.error(f"❌ 단가표 가져오기 실패: {e}")
            return False


if __name__ == '__main__':
    sys.exit(0 if main() else 1)
