"""
EasyPickup 데이터베이스 모델
고정 스키마 (schema_migrations 로 버전 관리)
"""
import json

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy.dialects.mysql import LONGTEXT

from easypickup.common.security import hash_password, verify_password, is_legacy_hash
from easypickup.common.utils import kst_now, serialize_value, load_json_text

db = SQLAlchemy()

# =============================================================================
# 배송 상태 (한글 enum 문자열)
# =============================================================================

STATUS_RECEIVED = '접수완료'
STATUS_WAREHOUSED = '창고입고'
STATUS_LOADED = '기사상차'
STATUS_DELIVERED = '배송완료'
STATUS_ORDER_CANCELLED = '주문취소'
STATUS_RETURN_RECEIVED = '반품접수'
STATUS_PICKUP_COMPLETED = '수거완료'

STATUS_DISPATCHED = '배차완료'
STATUS_POSTPONED = '배송연기'
STATUS_CANCELLED = '배송취소'
STATUS_COLLECTED = '회수완료'
STATUS_ACTION_COMPLETED = '조처완료'

DELIVERY_STATUSES = [
    STATUS_RECEIVED, STATUS_WAREHOUSED, STATUS_LOADED, STATUS_DELIVERED,
    STATUS_ORDER_CANCELLED, STATUS_RETURN_RECEIVED, STATUS_PICKUP_COMPLETED,
    STATUS_DISPATCHED, STATUS_POSTPONED, STATUS_CANCELLED,
    STATUS_COLLECTED, STATUS_ACTION_COMPLETED,
]

COMPLETED_STATUSES = (STATUS_DELIVERED, STATUS_PICKUP_COMPLETED, STATUS_COLLECTED, STATUS_ACTION_COMPLETED)
CANCELLED_STATUSES = (STATUS_CANCELLED, STATUS_ORDER_CANCELLED)

USER_ROLES = ('admin', 'manager', 'user')

# =============================================================================
# 사용자 / 기사
# =============================================================================


class PasswordMixin:
    """비밀번호 해시 공통 메서드"""

    def set_password(self, password):
        self.password = hash_password(password)

    def verify_password(self, password):
        return verify_password(self.password, password)

    @property
    def has_legacy_password(self):
        return is_legacy_hash(self.password)


class User(PasswordMixin, UserMixin, db.Model):
    """사용자 (관리자/매니저/파트너)"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(100))
    phone = db.Column(db.String(20))
    company = db.Column(db.String(100))
    role = db.Column(db.String(20), nullable=False, default='user')
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login = db.Column(db.DateTime)

    # 기본 발송인 정보
    default_sender_name = db.Column(db.String(100))
    default_sender_company = db.Column(db.String(100))
    default_sender_phone = db.Column(db.String(20))
    default_sender_address = db.Column(db.String(300))
    default_sender_detail_address = db.Column(db.String(300))
    default_sender_zipcode = db.Column(db.String(10))

    created_at = db.Column(db.DateTime, default=kst_now)
    updated_at = db.Column(db.DateTime, default=kst_now, onupdate=kst_now)

    PROFILE_FIELDS = (
        'default_sender_name', 'default_sender_company', 'default_sender_phone',
        'default_sender_address', 'default_sender_detail_address', 'default_sender_zipcode',
    )

    def get_id(self):
        """Flask-Login 세션 식별자 (기사 테이블과 id 충돌 방지)"""
        return f'user:{self.id}'

    def to_dict(self):
        """딕셔너리 변환 (비밀번호 제외)"""
        data = {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'company': self.company,
            'role': self.role,
            'is_active': bool(self.is_active),
            'last_login': serialize_value(self.last_login),
            'created_at': serialize_value(self.created_at),
            'updated_at': serialize_value(self.updated_at),
        }
        for field in self.PROFILE_FIELDS:
            data[field] = getattr(self, field)
        return data

    def to_token_payload(self):
        """JWT/세션 저장용 사용자 정보"""
        payload = self.to_dict()
        payload.pop('is_active', None)
        return payload

    def __repr__(self):
        return f'<User {self.username}({self.role})>'


class Driver(PasswordMixin, UserMixin, db.Model):
    """배송 기사"""
    __tablename__ = 'drivers'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20))
    email = db.Column(db.String(100))
    vehicle_type = db.Column(db.String(100))
    vehicle_number = db.Column(db.String(50))
    license_number = db.Column(db.String(50))
    cargo_capacity = db.Column(db.Numeric(10, 2))
    delivery_area = db.Column(db.String(200))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=kst_now)
    updated_at = db.Column(db.DateTime, default=kst_now, onupdate=kst_now)

    role = 'driver'

    EDITABLE_FIELDS = (
        'name', 'phone', 'email', 'vehicle_type', 'vehicle_number',
        'license_number', 'cargo_capacity', 'delivery_area', 'is_active',
    )

    def get_id(self):
        return f'driver:{self.id}'

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'vehicle_type': self.vehicle_type,
            'vehicle_number': self.vehicle_number,
            'license_number': self.license_number,
            'cargo_capacity': serialize_value(self.cargo_capacity),
            'delivery_area': self.delivery_area,
            'is_active': bool(self.is_active),
            'created_at': serialize_value(self.created_at),
            'updated_at': serialize_value(self.updated_at),
        }

    def to_token_payload(self):
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'company': None,
            'role': 'driver',
            'last_login': None,
            'created_at': serialize_value(self.created_at),
            'updated_at': serialize_value(self.updated_at),
        }

    def __repr__(self):
        return f'<Driver {self.username}({self.name})>'


class UserActivity(db.Model):
    """사용자 활동 로그"""
    __tablename__ = 'user_activities'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, index=True)
    action = db.Column(db.String(50), nullable=False)
    target_type = db.Column(db.String(50))
    target_id = db.Column(db.Integer)
    details = db.Column(db.Text)
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=kst_now, index=True)

    def to_dict(self, username=None):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'username': username,
            'action': self.action,
            'target_type': self.target_type,
            'target_id': self.target_id,
            'details': load_json_text(self.details, default=self.details),
            'ip_address': self.ip_address,
            'user_agent': self.user_agent,
            'created_at': serialize_value(self.created_at),
        }


class UserDetail(db.Model):
    """사용자별 부가 정보 (역할별 JSON)"""
    __tablename__ = 'user_detail'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, unique=True, nullable=False)
    role = db.Column(db.String(20), nullable=False)
    detail = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=kst_now)
    updated_at = db.Column(db.DateTime, default=kst_now, onupdate=kst_now)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'role': self.role,
            'detail': load_json_text(self.detail, default={}),
            'created_at': serialize_value(self.created_at),
            'updated_at': serialize_value(self.updated_at),
        }

# =============================================================================
# 배송
# =============================================================================


class Delivery(db.Model):
    """배송 접수 (고정 컬럼 스키마)"""
    __tablename__ = 'deliveries'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    tracking_number = db.Column(db.String(50), unique=True, nullable=False, index=True)

    # 발송인
    sender_name = db.Column(db.String(100), nullable=False)
    sender_phone = db.Column(db.String(20))
    sender_email = db.Column(db.String(100))
    sender_company = db.Column(db.String(100))
    sender_address = db.Column(db.String(500), nullable=False)
    sender_zipcode = db.Column(db.String(10))

    # 수취인 (고객)
    customer_name = db.Column(db.String(100), nullable=False)
    customer_phone = db.Column(db.String(20), nullable=False)
    customer_email = db.Column(db.String(100))
    customer_address = db.Column(db.String(500), nullable=False)
    customer_zipcode = db.Column(db.String(10))

    # 접수 정보
    request_type = db.Column(db.String(100))
    construction_type = db.Column(db.String(100))
    shipment_type = db.Column(db.String(100))
    visit_date = db.Column(db.Date)
    visit_time = db.Column(db.String(20))
    furniture_company = db.Column(db.String(200))
    main_memo = db.Column(db.Text)
    emergency_contact = db.Column(db.String(100))

    # 현장 정보
    building_type = db.Column(db.String(100))
    floor_count = db.Column(db.Integer)
    elevator_available = db.Column(db.Boolean)
    ladder_truck = db.Column(db.Boolean)
    disposal = db.Column(db.Boolean)
    room_movement = db.Column(db.Boolean)
    wall_construction = db.Column(db.Boolean)

    # 상품 정보
    product_name = db.Column(db.String(200))
    product_sku = db.Column(db.String(100))
    product_quantity = db.Column(db.Integer)
    seller_info = db.Column(db.String(200))
    furniture_product_code = db.Column(db.String(100))
    product_weight = db.Column(db.Numeric(10, 2))
    product_size = db.Column(db.String(100))
    box_size = db.Column(db.String(100))
    weight = db.Column(db.Numeric(10, 2))

    # 요청/취급
    furniture_requests = db.Column(db.Text)
    driver_notes = db.Column(db.Text)
    delivery_memo = db.Column(db.Text)
    special_instructions = db.Column(db.Text)
    fragile = db.Column(db.Boolean)
    frozen = db.Column(db.Boolean)
    requires_signature = db.Column(db.Boolean)
    insurance_value = db.Column(db.Numeric(12, 2))
    cod_amount = db.Column(db.Numeric(12, 2))
    delivery_fee = db.Column(db.Numeric(12, 2))

    # 추적
    estimated_delivery = db.Column(db.DateTime)
    actual_delivery = db.Column(db.DateTime)
    delivery_attempts = db.Column(db.Integer, default=0)
    last_location = db.Column(db.String(200))
    detail_notes = db.Column(db.Text)
    distance = db.Column(db.Numeric(10, 2))

    # 설치/완료
    installation_photos = db.Column(db.Text)
    customer_signature = db.Column(db.Text().with_variant(LONGTEXT(), "mysql"))
    customer_requested_completion = db.Column(db.Boolean, default=False)
    furniture_company_requested_completion = db.Column(db.Boolean, default=False)
    completion_audio_file = db.Column(db.String(500))

    # 취소
    cancel_status = db.Column(db.Integer, default=0)
    cancel_reason = db.Column(db.Text)
    canceled_at = db.Column(db.DateTime)

    # 처리 일시 (기사 앱 입력값 그대로 저장)
    action_date = db.Column(db.String(20))
    action_time = db.Column(db.String(20))

    status = db.Column(db.String(20), nullable=False, default=STATUS_RECEIVED, index=True)
    driver_id = db.Column(db.Integer, index=True)
    user_id = db.Column(db.Integer, index=True)

    created_at = db.Column(db.DateTime, default=kst_now, index=True)
    updated_at = db.Column(db.DateTime, default=kst_now, onupdate=kst_now)

    LIST_FIELDS = (
        'id', 'tracking_number', 'status', 'sender_name', 'sender_address',
        'customer_name', 'customer_phone', 'customer_address', 'product_name',
        'request_type', 'visit_date', 'visit_time', 'driver_id', 'user_id',
        'action_date', 'action_time', 'created_at', 'updated_at',
    )

    @property
    def is_completed(self):
        return self.status in COMPLETED_STATUSES

    @property
    def photo_list(self):
        photos = load_json_text(self.installation_photos, default=[])
        return photos if isinstance(photos, list) else []

    def append_driver_note(self, note):
        """기존 메모 뒤에 줄바꿈으로 추가"""
        self.driver_notes = f'{self.driver_notes}\n{note}' if self.driver_notes else note

    def to_dict(self):
        """전체 컬럼 딕셔너리 (installation_photos 는 리스트)"""
        data = {column.key: serialize_value(getattr(self, column.key)) for column in self.__table__.columns}
        data['installation_photos'] = self.photo_list
        return data

    def to_list_dict(self):
        return {field: serialize_value(getattr(self, field)) for field in self.LIST_FIELDS}

    @classmethod
    def get_by_tracking_number(cls, tracking_number):
        return cls.query.filter_by(tracking_number=tracking_number).first()

    def __repr__(self):
        return f'<Delivery {self.tracking_number}({self.status})>'


class DeliveryProduct(db.Model):
    """배송별 상품 라인"""
    __tablename__ = 'delivery_products'

    id = db.Column(db.Integer, primary_key=True)
    delivery_id = db.Column(db.Integer, nullable=False, index=True)
    product_code = db.Column(db.String(100), nullable=False)
    product_weight = db.Column(db.String(50))
    total_weight = db.Column(db.String(50))
    product_size = db.Column(db.String(100))
    box_size = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=kst_now)

    def to_dict(self):
        return {
            'id': self.id,
            'delivery_id': self.delivery_id,
            'product_code': self.product_code,
            'product_weight': self.product_weight,
            'total_weight': self.total_weight,
            'product_size': self.product_size,
            'box_size': self.box_size,
            'created_at': serialize_value(self.created_at),
        }


class DeliveryDetail(db.Model):
    """배송 상세 로그 (detail_type 별 JSON 값)"""
    __tablename__ = 'delivery_details'

    id = db.Column(db.Integer, primary_key=True)
    delivery_id = db.Column(db.Integer, nullable=False, index=True)
    detail_type = db.Column(db.String(50), nullable=False, index=True)
    detail_value = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=kst_now)
    updated_at = db.Column(db.DateTime, default=kst_now, onupdate=kst_now)

    @property
    def parsed_value(self):
        value = self.detail_value
        if isinstance(value, str) and value.startswith(('{', '[')):
            return load_json_text(value, default=value)
        return value

    def to_dict(self):
        return {
            'id': self.id,
            'delivery_id': self.delivery_id,
            'detail_type': self.detail_type,
            'detail_value': self.parsed_value,
            'created_at': serialize_value(self.created_at),
            'updated_at': serialize_value(self.updated_at),
        }

# =============================================================================
# 상품 / QR / 단가
# =============================================================================


class Product(db.Model):
    """파트너 상품"""
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, index=True)
    maincode = db.Column(db.String(50))
    subcode = db.Column(db.String(50))
    name = db.Column(db.String(200), nullable=False)
    weight = db.Column(db.Numeric(10, 2))
    size = db.Column(db.String(100))
    cost1 = db.Column(db.Numeric(12, 2))
    cost2 = db.Column(db.Numeric(12, 2))
    memo = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=kst_now)
    updated_at = db.Column(db.DateTime, default=kst_now, onupdate=kst_now)

    EDITABLE_FIELDS = ('maincode', 'subcode', 'name', 'weight', 'size', 'cost1', 'cost2', 'memo')

    def to_dict(self):
        data = {'id': self.id, 'user_id': self.user_id}
        for field in self.EDITABLE_FIELDS:
            data[field] = serialize_value(getattr(self, field))
        data['created_at'] = serialize_value(self.created_at)
        data['updated_at'] = serialize_value(self.updated_at)
        return data

    @classmethod
    def visible_to(cls, user):
        """파트너(user) 는 본인 상품만"""
        query = cls.query
        if user.get('role') == 'user':
            query = query.filter(cls.user_id == user.get('id'))
        return query

    def __repr__(self):
        return f'<Product {self.name}>'


class ProductPhoto(db.Model):
    """상품 사진"""
    __tablename__ = 'product_photo'

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, nullable=False, index=True)
    filename = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255))
    file_path = db.Column(db.String(500), nullable=False)
    file_size = db.Column(db.Integer)
    mime_type = db.Column(db.String(100))
    uploaded_by = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=kst_now)

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'filename': self.filename,
            'original_name': self.original_name,
            'file_path': self.file_path,
            'url': f'/api/product-photos/files/{self.filename}',
            'file_size': self.file_size,
            'mime_type': self.mime_type,
            'uploaded_by': self.uploaded_by,
            'created_at': serialize_value(self.created_at),
        }


class QRCodeProduct(db.Model):
    """QR 코드 - 상품 매핑"""
    __tablename__ = 'qrcorddb'

    id = db.Column(db.Integer, primary_key=True)
    qr_code = db.Column(db.String(100), unique=True, nullable=False)
    product_name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    weight = db.Column(db.Numeric(10, 2))
    size = db.Column(db.String(100))
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=kst_now)
    updated_at = db.Column(db.DateTime, default=kst_now, onupdate=kst_now)

    def to_dict(self):
        return {
            'id': self.id,
            'qr_code': self.qr_code,
            'product_name': self.product_name,
            'quantity': self.quantity,
            'weight': serialize_value(self.weight),
            'size': self.size,
            'description': self.description,
            'created_at': serialize_value(self.created_at),
            'updated_at': serialize_value(self.updated_at),
        }


class FPrice(db.Model):
    """카테고리/사이즈별 단가표"""
    __tablename__ = 'f_price'
    __table_args__ = (
        db.Index('idx_f_price_category_size', 'category', 'size'),
    )

    id = db.Column(db.Integer, primary_key=True)
    category = db.Column(db.String(100), nullable=False)
    size = db.Column(db.String(100))
    narim_cost = db.Column(db.Integer)
    stair_2f = db.Column(db.Integer)
    stair_3f = db.Column(db.Integer)
    stair_4f = db.Column(db.Integer)
    driver_10_increase = db.Column(db.Integer)
    future_cost = db.Column(db.Integer)
    profit_39 = db.Column(db.Integer)
    jeju_jeonla = db.Column(db.Integer)
    profit_62 = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=kst_now)

    PRICE_FIELDS = (
        'narim_cost', 'stair_2f', 'stair_3f', 'stair_4f', 'driver_10_increase',
        'future_cost', 'profit_39', 'jeju_jeonla', 'profit_62',
    )

    @classmethod
    def lookup(cls, category, size):
        return cls.query.filter_by(category=category, size=size).first()

    def to_dict(self):
        data = {'id': self.id, 'category': self.category, 'size': self.size}
        for field in self.PRICE_FIELDS:
            data[field] = getattr(self, field)
        return data


class RequestType(db.Model):
    """의뢰 종류"""
    __tablename__ = 'request_types'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.String(255))
    sort_order = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=kst_now)
    updated_at = db.Column(db.DateTime, default=kst_now, onupdate=kst_now)

    @classmethod
    def get_active(cls):
        return cls.query.filter_by(is_active=True).order_by(cls.sort_order.asc(), cls.name.asc()).all()

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'sort_order': self.sort_order,
            'is_active': bool(self.is_active),
            'created_at': serialize_value(self.created_at),
            'updated_at': serialize_value(self.updated_at),
        }


class SchemaMigration(db.Model):
    """적용된 스키마 버전 기록"""
    __tablename__ = 'schema_migrations'

    version = db.Column(db.Integer, primary_key=True, autoincrement=False)
    description = db.Column(db.String(255), nullable=False)
    applied_at = db.Column(db.DateTime, default=kst_now)

    def to_dict(self):
        return {
            'version': self.version,
            'description': self.description,
            'applied_at': serialize_value(self.applied_at),
        }

# =============================================================================
# 초기화 함수
# =============================================================================

DEFAULT_REQUEST_TYPES = ['일반', '회수', '조치', '쿠팡', '네이버']


def init_db():
    """데이터베이스 초기화 (마이그레이션 적용)"""
    from easypickup.common.migrations import apply_migrations
    return apply_migrations()


def create_default_data(admin_password=None):
    """기본 관리자 계정 생성"""
    if User.query.filter_by(role='admin').count() > 0:
        return None

    admin = User(username='admin', name='관리자', role='admin', is_active=True)
    admin.set_password(admin_password or 'admin1234')
    db.session.add(admin)
    db.session.commit()
    return admin


def dumps_json(value):
    """DB 저장용 JSON 문자열 (한글 유지)"""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)
