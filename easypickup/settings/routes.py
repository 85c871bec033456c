"""
의뢰타입 설정 파일 API
파일 한 줄에 의뢰타입 하나
"""
import os

from flask import request, jsonify, current_app

from easypickup.settings import bp
from easypickup.common.models import DEFAULT_REQUEST_TYPES
from easypickup.common.middleware import require_admin


def request_type_file():
    path = current_app.config['REQUEST_TYPE_FILE']
    return path if os.path.isabs(path) else os.path.join(current_app.root_path, '..', path)


def read_request_types(path):
    with open(path, 'r', encoding='utf-8') as f:
        return [line.strip() for line in f if line.strip()]


def write_request_types(path, request_types):
    with open(path, 'w', encoding='utf-8') as f:
        f.write('\n'.join(request_types))


@bp.route('/request-types', methods=['GET'])
def get_request_types():
    """의뢰타입 목록 (파일 없으면 기본값으로 생성)"""
    try:
        path = request_type_file()
        if os.path.exists(path):
            return jsonify({
                'requestTypes': read_request_types(path),
                'message': '의뢰타입 목록을 성공적으로 조회했습니다.'
            })

        write_request_types(path, DEFAULT_REQUEST_TYPES)
        current_app.logger.info(f"📝 의뢰타입 파일 생성: {path}")
        return jsonify({
            'requestTypes': list(DEFAULT_REQUEST_TYPES),
            'message': '의뢰타입 파일을 생성하고 기본값을 반환했습니다.'
        })

    except Exception as e:
        current_app.logger.error(f"❌ 의뢰타입 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '의뢰타입 조회 중 오류가 발생했습니다.'}), 500


@bp.route('/request-types', methods=['PUT'])
@require_admin
def update_request_types():
    try:
        request_types = (request.get_json(silent=True) or {}).get('requestTypes')
        if not isinstance(request_types, list):
            return jsonify({'error': 'Bad Request', 'message': '의뢰타입은 배열 형태로 제공되어야 합니다.'}), 400

        valid_types = [str(item).strip() for item in request_types if item is not None and str(item).strip()]
        if not valid_types:
            return jsonify({'error': 'Bad Request', 'message': '최소 하나 이상의 의뢰타입이 필요합니다.'}), 400

        write_request_types(request_type_file(), valid_types)
        current_app.logger.info(f"📝 의뢰타입 파일 업데이트: {len(valid_types)}개")

        return jsonify({'requestTypes': valid_types, 'message': '의뢰타입이 성공적으로 업데이트되었습니다.'})

    except Exception as e:
        current_app.logger.error(f"❌ 의뢰타입 업데이트 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '의뢰타입 업데이트 중 오류가 발생했습니다.'}), 500
