#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
실시간 배송 알림 (Socket.IO)
- delivery_updates: 관리자/매니저 대시보드 채널
- driver_<id>: 기사별 알림 채널
"""

import logging
from datetime import datetime

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

logger = logging.getLogger(__name__)

DELIVERY_UPDATES_ROOM = 'delivery_updates'

socketio = SocketIO()


def _timestamp():
    return datetime.utcnow().isoformat() + 'Z'


def driver_channel(driver_id):
    return f'driver_{driver_id}'


def init_socketio(app):
    """Flask 앱에 Socket.IO 연결 (메시지 큐 설정 시 다중 워커 브로드캐스트)"""
    socketio.init_app(
        app,
        cors_allowed_origins=app.config.get('SOCKETIO_CORS_ORIGINS', '*'),
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE', 'threading'),
        message_queue=app.config.get('SOCKETIO_MESSAGE_QUEUE')
    )
    return socketio


def broadcast_delivery_event(event, payload):
    """delivery_updates 채널로 배송 이벤트 전송 (실패해도 요청은 계속)"""
    data = dict(payload)
    data.setdefault('timestamp', _timestamp())
    try:
        socketio.emit(event, data, to=DELIVERY_UPDATES_ROOM)
        logger.debug(f"📡 {event} 전송: {data.get('id')}")
    except Exception as e:
        logger.warning(f"⚠️ 실시간 알림 전송 실패 ({event}): {e}")


@socketio.on('connect')
def handle_connect(auth=None):
    logger.info(f"🔌 클라이언트 연결됨: {request.sid}")


@socketio.on('disconnect')
def handle_disconnect(*args):
    logger.info(f"🔌 클라이언트 연결 해제됨: {request.sid}")


@socketio.on('join_delivery_updates')
def handle_join_delivery_updates(*args):
    join_room(DELIVERY_UPDATES_ROOM)
    logger.info(f"📡 배송 업데이트 채널 참여: {request.sid}")


@socketio.on('join_driver_channel')
def handle_join_driver_channel(data=None):
    data = data if isinstance(data, dict) else {}
    driver_id = data.get('driverId')
    user_id = data.get('userId')

    if not driver_id or not user_id:
        logger.warning(f"❌ 기사 채널 참여 실패: 잘못된 데이터 {data}")
        emit('error', {'message': '기사 ID 또는 사용자 ID가 없습니다.'})
        return

    channel = driver_channel(driver_id)
    join_room(channel)
    logger.info(f"✅ 기사 채널 참여: 기사 {driver_id} (사용자 {user_id}) -> {channel}")
    emit('channel_joined', {
        'channel': channel,
        'message': '기사 알림 채널에 성공적으로 연결되었습니다.',
        'timestamp': _timestamp()
    })


@socketio.on('leave_driver_channel')
def handle_leave_driver_channel(data=None):
    driver_id = (data or {}).get('driverId') if isinstance(data, dict) else None
    if driver_id:
        leave_room(driver_channel(driver_id))
        logger.info(f"🚪 기사 채널 떠남: 기사 {driver_id}")


@socketio.on('update_delivery_status')
def handle_update_delivery_status(data=None):
    """기사 앱 상태 알림을 관리자 채널로 중계"""
    data = data if isinstance(data, dict) else {}
    socketio.emit('delivery_status_updated', {
        'deliveryId': data.get('deliveryId'),
        'status': data.get('status'),
        'location': data.get('location'),
        'message': data.get('message'),
        'timestamp': _timestamp(),
        'updatedBy': request.sid
    }, to=DELIVERY_UPDATES_ROOM)
