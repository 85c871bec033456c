#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
서비스 모듈
외부 연동 및 파일 생성 로직
"""

from .geocoding import GeocodingClient, haversine_km, get_geocoding_client
from .exporter import build_orders_frame, build_statistics_frames, frames_to_file
from .price_table import read_price_file, import_price_frame
from .realtime import socketio, init_socketio, broadcast_delivery_event

__all__ = [
    'GeocodingClient', 'haversine_km', 'get_geocoding_client',
    'build_orders_frame', 'build_statistics_frames', 'frames_to_file',
    'read_price_file', 'import_price_frame',
    'socketio', 'init_socketio', 'broadcast_delivery_event',
]
