#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
주소 좌표 변환 / 거리 계산 서비스
- Kakao 로컬 API (KAKAO_REST_API_KEY 설정 시)
- 미설정/실패 시 주요 지역 좌표표 사용
- 하버사인 공식 거리(km)
"""

import math
import logging
from typing import Dict, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371

# 서울시청
DEFAULT_COORDS = (37.5665, 126.9780)

REGION_COORDS: Dict[str, Tuple[float, float]] = {
    # 서울
    '서울': (37.5665, 126.9780),
    '강남': (37.5173, 127.0473),
    '강서': (37.5509, 126.8495),
    '종로': (37.5735, 126.9788),
    # 경기
    '광주': (37.4138, 127.2557),
    '초월': (37.4138, 127.2557),
    '성남': (37.4449, 127.1388),
    '수원': (37.2636, 127.0286),
    '안양': (37.3943, 126.9568),
    # 인천
    '인천': (37.4563, 126.7052),
    # 기타
    '부천': (37.5035, 126.7660),
    '의정부': (37.7381, 127.0334),
}


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """두 좌표 간 거리 (km, 소수점 2자리)"""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 2)


class GeocodingClient:
    """
    주소 -> 좌표 변환 클라이언트

    API 키가 없거나 호출이 실패하면 지역명 테이블로 근사 좌표를 반환한다.
    """

    KAKAO_URL = 'https://dapi.kakao.com/v2/local/search/address.json'

    def __init__(self, api_key: Optional[str] = None, timeout: int = 5):
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()

    def _kakao_geocode(self, address: str) -> Optional[Tuple[float, float]]:
        response = self.session.get(
            self.KAKAO_URL,
            params={'query': address},
            headers={'Authorization': f'KakaoAK {self.api_key}'},
            timeout=self.timeout
        )
        response.raise_for_status()
        documents = response.json().get('documents') or []
        if not documents:
            return None
        first = documents[0]
        return float(first['y']), float(first['x'])

    @staticmethod
    def region_lookup(address: str) -> Tuple[float, float]:
        """주소에서 가장 뒤에 나오는 지역명 좌표 (시 < 구 순으로 구체적)"""
        matches = [(address.rfind(region), region) for region in REGION_COORDS if region in address]
        if not matches:
            return DEFAULT_COORDS
        return REGION_COORDS[max(matches)[1]]

    def geocode(self, address: str) -> Tuple[float, float]:
        """주소 좌표 (위도, 경도)"""
        if self.api_key:
            try:
                coords = self._kakao_geocode(address)
                if coords:
                    return coords
                logger.warning(f"⚠️ 주소 검색 결과 없음: {address}")
            except (requests.RequestException, ValueError, KeyError) as e:
                logger.warning(f"⚠️ Kakao 지오코딩 실패, 지역 좌표 사용: {e}")
        return self.region_lookup(address or '')

    def calculate_distance(self, origin: str, destination: str) -> float:
        """두 주소 간 거리 (오류 시 0)"""
        try:
            lat1, lng1 = self.geocode(origin)
            lat2, lng2 = self.geocode(destination)
            return haversine_km(lat1, lng1, lat2, lng2)
        except Exception as e:
            logger.error(f"❌ 거리 계산 오류: {e}")
            return 0


def get_geocoding_client():
    """현재 앱 설정 기반 클라이언트"""
    from flask import current_app
    return GeocodingClient(api_key=current_app.config.get('KAKAO_REST_API_KEY'))
