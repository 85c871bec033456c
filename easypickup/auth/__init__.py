#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
인증 Blueprint
회원가입, 로그인(JWT + 세션), 로그아웃, 내 정보
"""

# routes.py에서 정의된 auth_bp를 import
from easypickup.auth.routes import auth_bp

# bp는 auth_bp의 별칭
bp = auth_bp
