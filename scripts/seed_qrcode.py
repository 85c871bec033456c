#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
QR 코드 테스트 상품 등록 (EASY001 ~ EASY005)
"""

import os
import sys
from decimal import Decimal
from pathlib import Path

# 프로젝트 루트 디렉토리를 Python 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from easypickup import create_app
from easypickup.common.models import db, QRCodeProduct

SAMPLE_PRODUCTS = [
    {'qr_code': 'EASY001', 'product_name': '삼성 갤럭시 스마트폰', 'quantity': 1,
     'weight': Decimal('0.2'), 'size': '15x7x1cm', 'description': '최신 갤럭시 스마트폰'},
    {'qr_code': 'EASY002', 'product_name': 'iPad Pro 12.9인치', 'quantity': 1,
     'weight': Decimal('0.7'), 'size': '28x21x1cm', 'description': '애플 태블릿'},
    {'qr_code': 'EASY003', 'product_name': '무선 블루투스 헤드폰', 'quantity': 2,
     'weight': Decimal('0.3'), 'size': '20x18x8cm', 'description': '노이즈 캔슬링 헤드폰'},
    {'qr_code': 'EASY004', 'product_name': '노트북 가방', 'quantity': 1,
     'weight': Decimal('0.8'), 'size': '40x30x10cm', 'description': '15인치 노트북 수납 가능'},
    {'qr_code': 'EASY005', 'product_name': '커피머신', 'quantity': 1,
     'weight': Decimal('3.5'), 'size': '35x25x40cm', 'description': '캡슐 커피머신'},
]


def seed_qrcode_products():
    """QR 코드 상품 등록 (이미 있으면 갱신)"""
    for item in SAMPLE_PRODUCTS:
        product = QRCodeProduct.query.filter_by(qr_code=item['qr_code']).first()
        if product is None:
            product = QRCodeProduct(qr_code=item['qr_code'])
            db.session.add(product)
        for field, value in item.items():
            setattr(product, field, value)
    db.session.commit()
    return len(SAMPLE_PRODUCTS)


if __name__ == '__main__':
    app = create_app(os.environ.get('FLASK_ENV', 'development'))
    with app.app_context():
        try:
            count = seed_qrcode_products()
            print(f"✅ QR 코드 상품 {count}건 등록 완료")
            for item in SAMPLE_PRODUCTS:
                print(f"  - {item['qr_code']}: {item['product_name']}")
        except Exception as e:
            db.session.rollback()
            print(f"❌ QR 코드 상품 등록 실패: {e}")
            sys.exit(1)
