"""
파트너 상품 API
- user 권한은 본인이 등록한 상품만 조회/수정/삭제
"""
from functools import partial

from flask import request, jsonify, current_app

from easypickup.products import bp
from easypickup.products.photos import remove_photo_file
from easypickup.common.models import db, Product, ProductPhoto
from easypickup.common.database import execute_with_retry, coerce_column_value
from easypickup.common.middleware import require_auth, get_current_user

# 상품 API 는 지수 백오프로 재시도
retry = partial(execute_with_retry, backoff='exponential')


def _apply_fields(product, data):
    for field in Product.EDITABLE_FIELDS:
        if field == 'name':
            continue
        value = data.get(field)
        setattr(product, field, coerce_column_value(Product, field, value) if value not in (None, '') else None)


@bp.route('', methods=['GET'])
@require_auth
def list_products():
    """상품 목록"""
    try:
        query = Product.visible_to(get_current_user())
        search = (request.args.get('search') or '').strip()
        if search:
            pattern = f'%{search}%'
            query = query.filter(db.or_(
                Product.name.like(pattern),
                Product.maincode.like(pattern),
                Product.subcode.like(pattern)
            ))

        products = retry(lambda: query.order_by(Product.created_at.desc(), Product.id.desc()).all())
        return jsonify({
            'success': True,
            'products': [product.to_dict() for product in products],
            'total': len(products)
        })

    except Exception as e:
        current_app.logger.error(f"❌ 상품 목록 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '상품 목록을 불러오는 중 오류가 발생했습니다.'}), 500


@bp.route('/search', methods=['GET'])
@require_auth
def search_products():
    """상품명/메모 검색"""
    try:
        keyword = (request.args.get('q') or '').strip()
        if not keyword:
            return jsonify({'error': 'Bad Request', 'message': '검색어를 입력해주세요.'}), 400

        pattern = f'%{keyword}%'
        query = Product.visible_to(get_current_user()).filter(db.or_(
            Product.name.like(pattern),
            Product.memo.like(pattern)
        ))
        products = retry(lambda: query.order_by(Product.created_at.desc()).all())

        return jsonify({
            'success': True,
            'products': [product.to_dict() for product in products],
            'total': len(products)
        })

    except Exception as e:
        current_app.logger.error(f"❌ 상품 검색 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '상품 검색 중 오류가 발생했습니다.'}), 500


@bp.route('/<int:product_id>', methods=['GET'])
@require_auth
def get_product(product_id):
    try:
        product = retry(lambda: Product.visible_to(get_current_user()).filter(Product.id == product_id).first())
        if product is None:
            return jsonify({'error': 'Not Found', 'message': '상품을 찾을 수 없거나 접근 권한이 없습니다.'}), 404
        return jsonify({'success': True, 'product': product.to_dict()})

    except Exception as e:
        current_app.logger.error(f"❌ 상품 상세 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '상품 정보를 불러오는 중 오류가 발생했습니다.'}), 500


@bp.route('', methods=['POST'])
@require_auth
def create_product():
    """상품 등록 (등록자 = 현재 로그인 사용자)"""
    try:
        data = request.get_json(silent=True) or {}
        name = (data.get('name') or '').strip()
        if not name:
            return jsonify({'error': 'Bad Request', 'message': '상품명은 필수입니다.'}), 400

        user = get_current_user()
        product = Product(user_id=user['id'], name=name)
        _apply_fields(product, data)

        def _create():
            db.session.add(product)
            db.session.commit()
            return product.id

        product_id = retry(_create)
        current_app.logger.info(f"📦 상품 등록: {name} (user {user['id']})")

        return jsonify({'success': True, 'message': '상품이 성공적으로 생성되었습니다.', 'productId': product_id}), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': 'Bad Request', 'message': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 상품 생성 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '상품 생성 중 오류가 발생했습니다.'}), 500


@bp.route('/<int:product_id>', methods=['PUT'])
@require_auth
def update_product(product_id):
    try:
        product = retry(lambda: Product.visible_to(get_current_user()).filter(Product.id == product_id).first())
        if product is None:
            return jsonify({'error': 'Not Found', 'message': '수정할 상품을 찾을 수 없거나 수정 권한이 없습니다.'}), 404

        data = request.get_json(silent=True) or {}
        name = (data.get('name') or '').strip()
        if not name:
            return jsonify({'error': 'Bad Request', 'message': '상품명은 필수입니다.'}), 400

        product.name = name
        _apply_fields(product, data)
        db.session.commit()

        return jsonify({'success': True, 'message': '상품이 성공적으로 수정되었습니다.', 'product': product.to_dict()})

    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': 'Bad Request', 'message': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 상품 수정 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '상품 수정 중 오류가 발생했습니다.'}), 500


@bp.route('/<int:product_id>', methods=['DELETE'])
@require_auth
def delete_product(product_id):
    """상품 삭제 (사진 행과 파일 포함)"""
    try:
        product = retry(lambda: Product.visible_to(get_current_user()).filter(Product.id == product_id).first())
        if product is None:
            return jsonify({'error': 'Not Found', 'message': '삭제할 상품을 찾을 수 없거나 삭제 권한이 없습니다.'}), 404

        photos = ProductPhoto.query.filter_by(product_id=product_id).all()
        file_names = [photo.filename for photo in photos]
        for photo in photos:
            db.session.delete(photo)
        db.session.delete(product)
        db.session.commit()

        for filename in file_names:
            remove_photo_file(filename)

        return jsonify({'success': True, 'message': '상품이 성공적으로 삭제되었습니다.'})

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"❌ 상품 삭제 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '상품 삭제 중 오류가 발생했습니다.'}), 500
