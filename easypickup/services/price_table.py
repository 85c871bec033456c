#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
배송 단가표(f_price) 가져오기
엑셀/CSV/JSON 파일을 pandas 로 읽어 f_price 테이블에 저장
"""

import logging
from pathlib import Path

import pandas as pd

from easypickup.common.models import db, FPrice

logger = logging.getLogger(__name__)

# 원본 파일 헤더 -> 컬럼명
HEADER_MAP = {
    '카테고리': 'category',
    '상품 카테고리': 'category',
    '사이즈': 'size',
    '내림비': 'narim_cost',
    '계단(2층)': 'stair_2f',
    '계단(3층)': 'stair_3f',
    '계단(4층)': 'stair_4f',
    '기사(10%인상)': 'driver_10_increase',
    '미래': 'future_cost',
    '수익률(39)': 'profit_39',
    '제주도/전라도': 'jeju_jeonla',
    '수익률(62)': 'profit_62',
}


def read_price_file(path) -> pd.DataFrame:
    """확장자별로 읽고 헤더를 컬럼명으로 변환"""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in ('.xlsx', '.xls'):
        df = pd.read_excel(path)
    elif suffix == '.csv':
        df = pd.read_csv(path, encoding='utf-8-sig')
    elif suffix == '.json':
        df = pd.read_json(path)
    else:
        raise ValueError(f'지원하지 않는 파일 형식입니다: {suffix}')

    df.columns = [HEADER_MAP.get(str(column).strip(), str(column).strip()) for column in df.columns]
    if 'category' not in df.columns:
        raise ValueError('category(카테고리) 컬럼이 필요합니다.')
    return df


def _to_int(value):
    if value is None or pd.isna(value):
        return None
    if isinstance(value, str):
        value = value.replace(',', '').strip()
        if not value:
            return None
    return int(float(value))


def import_price_frame(df: pd.DataFrame, replace=False):
    """
    DataFrame 행을 f_price 에 저장

    Returns:
        (저장 건수, 실패 건수)
    """
    if replace:
        deleted = FPrice.query.delete(synchronize_session=False)
        logger.info(f"🗑️ 기존 단가 {deleted}건 삭제")

    saved, failed = 0, 0
    for index, row in df.iterrows():
        category = row.get('category')
        if category is None or pd.isna(category) or not str(category).strip():
            failed += 1
            continue
        try:
            size = row.get('size')
            price = FPrice(
                category=str(category).strip(),
                size=None if size is None or pd.isna(size) else str(size).strip()
            )
            for field in FPrice.PRICE_FIELDS:
                setattr(price, field, _to_int(row.get(field)))
            db.session.add(price)
            saved += 1
        except (TypeError, ValueError) as e:
            logger.warning(f"⚠️ {index + 1}행 변환 실패: {e}")
            failed += 1

    db.session.commit()
    logger.info(f"✅ 단가표 저장 완료: {saved}건 (실패 {failed}건)")
    return saved, failed
