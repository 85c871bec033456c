"""
주문/통계 내보내기 API (매니저 이상)
"""
from datetime import datetime, timedelta

from flask import request, jsonify, current_app, make_response

from easypickup.exports import bp
from easypickup.common.models import Delivery
from easypickup.common.database import execute_with_retry
from easypickup.common.middleware import require_manager
from easypickup.common.utils import kst_now, is_valid_date_string
from easypickup.services.exporter import (
    XLSX_MIMETYPE, CSV_MIMETYPE, build_orders_frame, build_statistics_frames, frames_to_file,
)

EXPORT_FORMATS = {'xlsx': XLSX_MIMETYPE, 'csv': CSV_MIMETYPE}


def filtered_deliveries(args):
    """startDate/endDate(접수일 기준)/status 필터 적용 목록"""
    query = Delivery.query
    start_date = args.get('startDate')
    end_date = args.get('endDate')

    for value in (start_date, end_date):
        if value and not is_valid_date_string(value):
            raise ValueError('올바른 날짜 형식이 아닙니다. (YYYY-MM-DD)')

    if start_date:
        query = query.filter(Delivery.created_at >= datetime.strptime(start_date, '%Y-%m-%d'))
    if end_date:
        query = query.filter(Delivery.created_at < datetime.strptime(end_date, '%Y-%m-%d') + timedelta(days=1))
    if args.get('status') and args['status'] != 'all':
        query = query.filter(Delivery.status == args['status'])

    return execute_with_retry(lambda: query.order_by(Delivery.created_at.desc(), Delivery.id.desc()).all())


def _file_response(content, prefix, file_format):
    filename = f"{prefix}_{kst_now().strftime('%Y%m%d_%H%M%S')}.{file_format}"
    response = make_response(content)
    response.headers['Content-Type'] = EXPORT_FORMATS[file_format]
    response.headers['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _export(prefix, build_frames):
    file_format = (request.args.get('format') or 'xlsx').lower()
    if file_format not in EXPORT_FORMATS:
        return jsonify({'error': 'Bad Request', 'message': 'format 은 xlsx 또는 csv 만 가능합니다.'}), 400

    try:
        deliveries = filtered_deliveries(request.args)
    except ValueError as e:
        return jsonify({'error': 'Bad Request', 'message': str(e)}), 400

    content = frames_to_file(build_frames(deliveries), file_format)
    current_app.logger.info(f"📥 {prefix} 내보내기: {len(deliveries)}건 ({file_format})")
    return _file_response(content, prefix, file_format)


@bp.route('/orders', methods=['GET'])
@require_manager
def export_orders():
    """주문 목록 다운로드"""
    try:
        return _export('orders', lambda deliveries: {'주문목록': build_orders_frame(deliveries)})
    except Exception as e:
        current_app.logger.error(f"❌ 주문 내보내기 실패: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': f'다운로드 중 오류가 발생했습니다: {str(e)}'}), 500


@bp.route('/statistics', methods=['GET'])
@require_manager
def export_statistics():
    """상태별/일자별 통계 다운로드"""
    try:
        return _export('statistics', build_statistics_frames)
    except Exception as e:
        current_app.logger.error(f"❌ 통계 내보내기 실패: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': f'다운로드 중 오류가 발생했습니다: {str(e)}'}), 500
