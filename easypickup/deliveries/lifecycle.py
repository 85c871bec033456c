"""
배송 완료/연기/취소 처리 (기사 앱)
"""
from flask import request, jsonify, current_app

from easypickup.deliveries import bp
from easypickup.deliveries.helpers import (
    find_delivery, find_delivery_by_tracking, commit_with_retry, not_found,
)
from easypickup.common.models import (
    db, Delivery, CANCELLED_STATUSES, STATUS_DELIVERED, STATUS_COLLECTED, STATUS_ACTION_COMPLETED,
    STATUS_POSTPONED, STATUS_CANCELLED,
)
from easypickup.common.database import coerce_column_value
from easypickup.common.middleware import require_auth, get_current_user
from easypickup.common.utils import (
    kst_now, kst_today, is_valid_date_string, parse_date, parse_datetime, format_db_datetime,
)
from easypickup.services.realtime import broadcast_delivery_event

# 의뢰종류별 완료 상태
COMPLETION_STATUS_BY_REQUEST_TYPE = {
    '회수': STATUS_COLLECTED,
    '조처': STATUS_ACTION_COMPLETED,
    '조치': STATUS_ACTION_COMPLETED,
}


def completion_status_for(request_type):
    return COMPLETION_STATUS_BY_REQUEST_TYPE.get(request_type, STATUS_DELIVERED)


def _fail(message, status_code=400):
    return jsonify({'success': False, 'error': message}), status_code


def _validate_future_date(value):
    """연기 날짜 검증 (형식 오류/오늘 이전이면 에러 메시지 반환)"""
    if not is_valid_date_string(value):
        return '올바른 날짜 형식이 아닙니다. (YYYY-MM-DD)'
    if parse_date(value) <= kst_today():
        return '연기 날짜는 오늘 이후로 설정해주세요.'
    return None


@bp.route('/complete/<int:delivery_id>', methods=['POST'])
@require_auth
def complete_delivery(delivery_id):
    """배송 완료 처리 (의뢰종류에 따라 배송완료/회수완료/조처완료)"""
    try:
        data = request.get_json(silent=True) or {}
        user = get_current_user()

        delivery = find_delivery(user, delivery_id)
        if delivery is None:
            return not_found(success_shape=True)

        if delivery.status in CANCELLED_STATUSES:
            return _fail('취소된 배송은 완료 처리할 수 없습니다.')

        previous_status = delivery.status
        new_status = completion_status_for(delivery.request_type)
        completed_at = parse_datetime(data.get('completedAt')) or kst_now()
        customer_requested = bool(coerce_column_value(
            Delivery, 'customer_requested_completion', data.get('customerRequestedCompletion')
        ))
        company_requested = bool(coerce_column_value(
            Delivery, 'furniture_company_requested_completion', data.get('furnitureCompanyRequestedCompletion')
        ))

        def _mutate(target):
            target.status = new_status
            if data.get('driverNotes'):
                target.driver_notes = data['driverNotes']
            target.customer_requested_completion = customer_requested
            target.furniture_company_requested_completion = company_requested
            target.completion_audio_file = data.get('completionAudioFile') or None
            target.actual_delivery = completed_at
            target.action_date = data.get('action_date')
            target.action_time = data.get('action_time')

        delivery = commit_with_retry(delivery_id, _mutate)

        current_app.logger.info(
            f"✅ 배송완료 처리: {delivery.tracking_number} {previous_status} -> {new_status} (by {user.get('username')})"
        )
        broadcast_delivery_event('delivery_completed', {
            'id': delivery.id,
            'status': new_status,
            'requestType': delivery.request_type,
            'completedAt': format_db_datetime(completed_at)
        })

        return jsonify({
            'success': True,
            'message': '배송이 성공적으로 완료되었습니다.',
            'data': {
                'deliveryId': delivery.id,
                'trackingNumber': delivery.tracking_number,
                'customerName': delivery.customer_name,
                'previousStatus': previous_status,
                'newStatus': new_status,
                'completedAt': format_db_datetime(completed_at),
                'customerRequestedCompletion': customer_requested,
                'furnitureCompanyRequestedCompletion': company_requested,
                'completionAudioFile': data.get('completionAudioFile')
            }
        })

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송완료 처리 오류: {e}")
        return jsonify({'success': False, 'error': '배송완료 처리 중 오류가 발생했습니다.', 'details': str(e)}), 500


@bp.route('/postpone/<int:delivery_id>', methods=['POST'])
@require_auth
def postpone_delivery(delivery_id):
    """배송 연기 (방문일 변경)"""
    try:
        data = request.get_json(silent=True) or {}
        postpone_date = data.get('postponeDate')
        postpone_reason = data.get('postponeReason')

        if not postpone_date or not postpone_reason:
            return _fail('연기 날짜와 사유를 입력해주세요.')

        error = _validate_future_date(postpone_date)
        if error:
            return _fail(error)

        delivery = find_delivery(get_current_user(), delivery_id)
        if delivery is None:
            return not_found(success_shape=True)

        if delivery.is_completed:
            return _fail('이미 완료된 배송은 연기할 수 없습니다.')

        previous_status = delivery.status

        def _mutate(target):
            target.status = STATUS_POSTPONED
            target.visit_date = parse_date(postpone_date)
            target.append_driver_note(f'배송연기 ({postpone_date}): {postpone_reason}')

        delivery = commit_with_retry(delivery_id, _mutate)
        current_app.logger.info(f"📅 배송연기 처리: {delivery.tracking_number} -> {postpone_date}")

        return jsonify({
            'success': True,
            'message': '배송이 성공적으로 연기되었습니다.',
            'data': {
                'deliveryId': delivery.id,
                'trackingNumber': delivery.tracking_number,
                'customerName': delivery.customer_name,
                'previousStatus': previous_status,
                'newStatus': STATUS_POSTPONED,
                'newVisitDate': postpone_date,
                'postponeReason': postpone_reason
            }
        })

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송연기 처리 오류: {e}")
        return jsonify({'success': False, 'error': '배송연기 처리 중 오류가 발생했습니다.', 'details': str(e)}), 500


@bp.route('/delay/<tracking_number>', methods=['POST'])
@require_auth
def delay_delivery(tracking_number):
    """운송장 번호 기준 배송 연기 (사유 선택)"""
    try:
        data = request.get_json(silent=True) or {}
        delay_date = data.get('delayDate')
        delay_reason = data.get('delayReason')

        if not delay_date:
            return _fail('연기 날짜를 입력해주세요.')

        error = _validate_future_date(delay_date)
        if error:
            return _fail(error)

        delivery = find_delivery_by_tracking(get_current_user(), tracking_number)
        if delivery is None:
            return not_found(success_shape=True)

        if delivery.is_completed:
            return _fail('이미 완료된 배송은 연기할 수 없습니다.')

        previous_status = delivery.status
        note = f'배송연기 ({delay_date}): {delay_reason}' if delay_reason else f'배송연기 ({delay_date})'

        def _mutate(target):
            target.status = STATUS_POSTPONED
            target.append_driver_note(note)
            target.action_date = data.get('action_date')
            target.action_time = data.get('action_time')

        delivery = commit_with_retry(delivery.id, _mutate)
        current_app.logger.info(
            f"📅 배송연기 처리: {tracking_number} (action {data.get('action_date')} {data.get('action_time')})"
        )

        return jsonify({
            'success': True,
            'message': '배송이 성공적으로 연기되었습니다.',
            'data': {
                'trackingNumber': tracking_number,
                'customerName': delivery.customer_name,
                'previousStatus': previous_status,
                'newStatus': STATUS_POSTPONED,
                'delayDate': delay_date,
                'delayReason': delay_reason or None
            }
        })

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송연기 처리 오류: {e}")
        return jsonify({'success': False, 'error': '배송연기 처리 중 오류가 발생했습니다.', 'details': str(e)}), 500


@bp.route('/cancel/<int:delivery_id>', methods=['POST'])
@require_auth
def cancel_delivery(delivery_id):
    """배송 취소"""
    try:
        data = request.get_json(silent=True) or {}
        cancel_reason = (data.get('cancelReason') or '').strip()

        if not cancel_reason:
            return _fail('취소 사유를 입력해주세요.')

        delivery = find_delivery(get_current_user(), delivery_id)
        if delivery is None:
            return not_found(success_shape=True)

        if delivery.canceled_at:
            return _fail('이미 취소된 배송입니다.')

        if delivery.is_completed:
            return _fail('이미 완료된 배송은 취소할 수 없습니다.')

        previous_status = delivery.status
        canceled_at = kst_now().replace(microsecond=0)
        canceled_text = format_db_datetime(canceled_at)

        def _mutate(target):
            target.cancel_status = 1
            target.cancel_reason = cancel_reason
            target.canceled_at = canceled_at
            target.status = STATUS_CANCELLED
            target.append_driver_note(f'배송취소 ({canceled_text}): {cancel_reason}')
            target.action_date = data.get('action_date')
            target.action_time = data.get('action_time')

        delivery = commit_with_retry(delivery_id, _mutate)
        current_app.logger.info(f"🚫 배송취소 처리: {delivery.tracking_number} ({cancel_reason})")
        broadcast_delivery_event('delivery_cancelled', {
            'id': delivery.id,
            'status': STATUS_CANCELLED,
            'cancelReason': cancel_reason,
            'timestamp': canceled_text
        })

        return jsonify({
            'success': True,
            'message': '배송이 성공적으로 취소되었습니다.',
            'data': {
                'deliveryId': delivery.id,
                'trackingNumber': delivery.tracking_number,
                'customerName': delivery.customer_name,
                'previousStatus': previous_status,
                'newStatus': STATUS_CANCELLED,
                'cancelReason': cancel_reason,
                'canceledAt': canceled_text
            }
        })

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 배송 취소 처리 오류: {e}")
        return jsonify({'success': False, 'error': '배송 취소 처리 중 오류가 발생했습니다.', 'details': str(e)}), 500
