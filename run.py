#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
EasyPickup 배송접수 API 실행 파일
"""

import os
from easypickup import create_app
from easypickup.services.realtime import socketio

# Flask 애플리케이션 생성
app = create_app(os.environ.get('FLASK_ENV', 'development'))

if __name__ == '__main__':
    # 개발 서버 실행 (Socket.IO 포함)
    socketio.run(
        app,
        host='0.0.0.0',
        port=int(os.environ.get('PORT', 3000)),
        debug=os.environ.get('FLASK_DEBUG', '0') == '1',
        allow_unsafe_werkzeug=True
    )
