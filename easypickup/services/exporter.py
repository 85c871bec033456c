#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
주문/통계 내보내기 (pandas + openpyxl)
"""

import logging
from io import BytesIO
from typing import Dict, List

import pandas as pd

logger = logging.getLogger(__name__)

ORDER_COLUMNS = [
    ('id', 'ID'),
    ('tracking_number', '운송장번호'),
    ('status', '상태'),
    ('request_type', '의뢰종류'),
    ('sender_name', '발송인'),
    ('sender_phone', '발송인 연락처'),
    ('sender_address', '발송인 주소'),
    ('customer_name', '고객명'),
    ('customer_phone', '고객 연락처'),
    ('customer_address', '고객 주소'),
    ('product_name', '상품명'),
    ('furniture_company', '가구사'),
    ('visit_date', '방문일'),
    ('visit_time', '방문시간'),
    ('driver_id', '기사 ID'),
    ('distance', '거리(km)'),
    ('created_at', '접수일시'),
]

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
CSV_MIMETYPE = 'text/csv; charset=utf-8'


def build_orders_frame(deliveries) -> pd.DataFrame:
    """배송 목록 -> 주문 DataFrame"""
    rows = []
    for delivery in deliveries:
        data = delivery.to_dict()
        rows.append({label: data.get(key) for key, label in ORDER_COLUMNS})
    return pd.DataFrame(rows, columns=[label for _, label in ORDER_COLUMNS])


def build_statistics_frames(deliveries) -> Dict[str, pd.DataFrame]:
    """상태별 / 일자별 집계"""
    records = [{
        'status': d.status,
        'date': d.created_at.strftime('%Y-%m-%d') if d.created_at else None,
    } for d in deliveries]
    df = pd.DataFrame(records, columns=['status', 'date'])

    if df.empty:
        by_status = pd.DataFrame(columns=['상태', '건수'])
        by_date = pd.DataFrame(columns=['일자', '건수'])
    else:
        by_status = df.groupby('status').size().reset_index(name='건수').rename(columns={'status': '상태'})
        by_status = by_status.sort_values('건수', ascending=False)
        by_date = df.dropna(subset=['date']).groupby('date').size().reset_index(name='건수')
        by_date = by_date.rename(columns={'date': '일자'}).sort_values('일자')

    return {'상태별': by_status, '일자별': by_date}


def _autofit_columns(worksheet):
    for column in worksheet.columns:
        max_length = 0
        column_letter = column[0].column_letter
        for cell in column:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))
        worksheet.column_dimensions[column_letter].width = min(max_length + 2, 50)


def frames_to_file(frames: Dict[str, pd.DataFrame], file_format: str = 'xlsx') -> bytes:
    """
    DataFrame 묶음을 파일 바이트로 변환

    csv 는 첫 번째 시트만 사용하며 Excel 호환을 위해 UTF-8 BOM 을 붙인다.
    """
    if file_format == 'csv':
        first: List[pd.DataFrame] = list(frames.values())[:1]
        return first[0].to_csv(index=False).encode('utf-8-sig')

    output = BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        for sheet_name, frame in frames.items():
            frame.to_excel(writer, sheet_name=sheet_name, index=False)
            _autofit_columns(writer.sheets[sheet_name])
    output.seek(0)
    return output.getvalue()
