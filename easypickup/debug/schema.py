"""
DB 스키마 조회
"""
from flask import jsonify, current_app
from sqlalchemy import inspect

from easypickup.debug import bp, schema_bp
from easypickup.common.models import db
from easypickup.common.migrations import current_version
from easypickup.common.middleware import require_auth, require_admin

# 외래키 없이 컬럼으로 연결되는 테이블 관계
LOGICAL_RELATIONSHIPS = [
    ('deliveries', 'driver_id', 'drivers', 'id'),
    ('deliveries', 'user_id', 'users', 'id'),
    ('delivery_details', 'delivery_id', 'deliveries', 'id'),
    ('delivery_products', 'delivery_id', 'deliveries', 'id'),
    ('products', 'user_id', 'users', 'id'),
    ('product_photo', 'product_id', 'products', 'id'),
    ('user_activities', 'user_id', 'users', 'id'),
    ('user_detail', 'user_id', 'users', 'id'),
]


def describe_columns(inspector, table_name):
    return [{
        'name': column['name'],
        'type': str(column['type']),
        'nullable': column['nullable'],
        'default': str(column['default']) if column.get('default') is not None else None,
        'primary_key': bool(column.get('primary_key')),
    } for column in inspector.get_columns(table_name)]


@bp.route('/db-schema', methods=['GET'])
@require_admin
def db_schema():
    """전체 테이블/컬럼/인덱스 정보"""
    try:
        inspector = inspect(db.engine)
        tables = []
        for table_name in sorted(inspector.get_table_names()):
            tables.append({
                'name': table_name,
                'columns': describe_columns(inspector, table_name),
                'indexes': [{
                    'name': index['name'],
                    'columns': index['column_names'],
                    'unique': bool(index.get('unique'))
                } for index in inspector.get_indexes(table_name)]
            })

        return jsonify({
            'database': {'dialect': db.engine.dialect.name, 'schemaVersion': current_version()},
            'statistics': {'totalTables': len(tables)},
            'tables': tables,
            'message': 'DB 스키마 정보를 성공적으로 조회했습니다.'
        })

    except Exception as e:
        current_app.logger.error(f"❌ DB 스키마 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': 'DB 스키마 조회 중 오류가 발생했습니다.'}), 500


@bp.route('/table-relationships', methods=['GET'])
@require_admin
def table_relationships():
    relationships = [{
        'fromTable': from_table,
        'fromColumn': from_column,
        'toTable': to_table,
        'toColumn': to_column,
        'relationshipName': f'{from_table}.{from_column}'
    } for from_table, from_column, to_table, to_column in LOGICAL_RELATIONSHIPS]

    return jsonify({'relationships': relationships, 'message': '테이블 관계 정보를 성공적으로 조회했습니다.'})


@schema_bp.route('', methods=['GET'])
@require_auth
def list_tables():
    """테이블 목록과 컬럼 수"""
    try:
        inspector = inspect(db.engine)
        tables = [{
            'name': table_name,
            'columnCount': len(inspector.get_columns(table_name))
        } for table_name in sorted(inspector.get_table_names())]

        return jsonify({'tables': tables, 'schemaVersion': current_version()})

    except Exception as e:
        current_app.logger.error(f"❌ 스키마 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '스키마 조회 중 오류가 발생했습니다.'}), 500


@schema_bp.route('/table/<table_name>', methods=['GET'])
@require_auth
def table_columns(table_name):
    try:
        inspector = inspect(db.engine)
        if table_name not in inspector.get_table_names():
            return jsonify({'error': 'Not Found', 'message': f'{table_name} 테이블을 찾을 수 없습니다.'}), 404

        return jsonify({'table': table_name, 'columns': describe_columns(inspector, table_name)})

    except Exception as e:
        current_app.logger.error(f"❌ 테이블 구조 조회 오류: {e}")
        return jsonify({'error': 'Internal Server Error', 'message': '테이블 구조 조회 중 오류가 발생했습니다.'}), 500
