"""
상품 사진 API
"""
import os
import time

from flask import request, jsonify, current_app, send_from_directory
from werkzeug.utils import secure_filename

from easypickup.products import photos_bp
from easypickup.common.models import db, Product, ProductPhoto
from easypickup.common.database import execute_with_retry
from easypickup.common.middleware import require_auth, get_current_user


def upload_dir():
    """UPLOAD_FOLDER 경로 (상대 경로는 프로젝트 루트 기준)"""
    project_root = os.path.dirname(current_app.root_path)
    path = os.path.join(project_root, current_app.config['UPLOAD_FOLDER'])
    os.makedirs(path, exist_ok=True)
    return path


def build_photo_filename(product_id, original_name, now_ms=None):
    """'{unix_ms}_{product_id}_{name}{ext}' 형식 저장 파일명"""
    now_ms = now_ms or int(time.time() * 1000)
    stem, ext = os.path.splitext(original_name or '')
    safe_stem = secure_filename(stem) or 'photo'
    safe_ext = secure_filename(ext.lstrip('.'))
    return f"{now_ms}_{product_id}_{safe_stem}{'.' + safe_ext if safe_ext else ''}"


def remove_photo_file(filename):
    path = os.path.join(upload_dir(), filename)
    if os.path.exists(path):
        try:
            os.remove(path)
        except OSError as e:
            current_app.logger.warning(f"⚠️ 사진 파일 삭제 실패: {filename} ({e})")


def _file_size(file):
    file.stream.seek(0, os.SEEK_END)
    size = file.stream.tell()
    file.stream.seek(0)
    return size


@photos_bp.route('/upload', methods=['POST'])
@require_auth
def upload_product_photo():
    """상품 사진 업로드 (이미지, 5MB 이하)"""
    saved_path = None
    try:
        user = get_current_user()
        product_id = request.form.get('product_id', type=int)
        if not product_id:
            return jsonify({'error': 'Bad Request', 'message': '상품 ID가 필요합니다.'}), 400

        file = request.files.get('photo')
        if file is None or not file.filename:
            return jsonify({'error': 'Bad Request', 'message': '업로드할 파일이 없습니다.'}), 400

        if not (file.mimetype or '').startswith('image/'):
            return jsonify({'error': 'Bad Request', 'message': '이미지 파일만 업로드 가능합니다.'}), 400

        size = _file_size(file)
        if size > current_app.config['MAX_PHOTO_SIZE']:
            return jsonify({'error': 'Payload Too Large', 'message': '파일 크기는 5MB 이하여야 합니다.'}), 413

        product = execute_with_retry(
            lambda: Product.visible_to(user).filter(Product.id == product_id).first()
        )
        if product is None:
            return jsonify({'error': 'Not Found', 'message': '상품을 찾을 수 없거나 접근 권한이 없습니다.'}), 404

        filename = build_photo_filename(product_id, file.filename)
        saved_path = os.path.join(upload_dir(), filename)
        file.save(saved_path)

        photo = ProductPhoto(
            product_id=product_id,
            filename=filename,
            original_name=file.filename,
            file_path=f"{current_app.config['UPLOAD_FOLDER']}/{filename}",
            file_size=size,
            mime_type=file.mimetype,
            uploaded_by=user['id']
        )
        db.session.add(photo)
        db.session.commit()

        current_app.logger.info(f"📷 상품 사진 업로드: product {product_id} -> {filename}")
        return jsonify({'success': True, 'message': '사진이 성공적으로 업로드되었습니다.', 'photo': photo.to_dict()}), 201

    except Exception as e:
        db.session.rollback()
        if saved_path and os.path.exists(saved_path):
            os.remove(saved_path)
        current_app.logger.error(f"❌ 상품 사진 업로드 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '사진 업로드 중 오류가 발생했습니다.'}), 500


@photos_bp.route('/files/<path:filename>', methods=['GET'])
def serve_product_photo(filename):
    """업로드된 사진 파일"""
    return send_from_directory(upload_dir(), filename)


@photos_bp.route('/product/<int:product_id>', methods=['GET'])
@require_auth
def list_product_photos(product_id):
    try:
        product = execute_with_retry(
            lambda: Product.visible_to(get_current_user()).filter(Product.id == product_id).first()
        )
        if product is None:
            return jsonify({'error': 'Not Found', 'message': '상품을 찾을 수 없거나 접근 권한이 없습니다.'}), 404

        photos = ProductPhoto.query.filter_by(product_id=product_id) \
            .order_by(ProductPhoto.created_at.desc(), ProductPhoto.id.desc()).all()
        return jsonify({'success': True, 'photos': [photo.to_dict() for photo in photos]})

    except Exception as e:
        current_app.logger.error(f"❌ 상품 사진 목록 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '사진 목록을 불러오는 중 오류가 발생했습니다.'}), 500


@photos_bp.route('/<int:photo_id>', methods=['DELETE'])
@require_auth
def delete_product_photo(photo_id):
    try:
        user = get_current_user()
        query = db.session.query(ProductPhoto).join(Product, ProductPhoto.product_id == Product.id) \
            .filter(ProductPhoto.id == photo_id)
        if user.get('role') == 'user':
            query = query.filter(Product.user_id == user['id'])

        photo = execute_with_retry(query.first)
        if photo is None:
            return jsonify({'error': 'Not Found', 'message': '사진을 찾을 수 없거나 삭제 권한이 없습니다.'}), 404

        filename = photo.filename
        db.session.delete(photo)
        db.session.commit()
        remove_photo_file(filename)

        return jsonify({'success': True, 'message': '사진이 성공적으로 삭제되었습니다.'})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 상품 사진 삭제 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '사진 삭제 중 오류가 발생했습니다.'}), 500
