"""SQLAlchemy ORM 模型定义。

本模块定义了服务交易相关的数据库表，字段命名与远端存储保持一致（snake_case）：
- service_providers: 服务人员（员工）及其提成配置
- service_definitions: 门店提供的服务项目
- service_records: 服务交易记录（创建时快照，之后不可修改）

所有表都以 business_id 区分租户。
"""
import uuid
from typing import Optional
from decimal import Decimal
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, DECIMAL
from sqlalchemy.orm import declarative_base

# SQLAlchemy declarative base，所有模型都继承自此类
Base = declarative_base()

# 允许使用旧式类型注解
Base.__allow_unmapped__ = True


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ServiceProviderModel(Base):
    """服务人员表模型。

    Attributes:
        id: 主键，UUID字符串，由存储端分配。
        business_id: 所属门店ID。
        full_name: 姓名。
        role: 角色，默认 "Service Provider"。
        commission_type: 提成类型符号名：PERCENTAGE / FLAT_FEE。
        commission_rate: 提成比例（百分点），仅 PERCENTAGE 使用。
        flat_fee: 每单固定提成金额，仅 FLAT_FEE 使用。
        is_active: 是否在职（软删除标记）。
    """
    __tablename__ = "service_providers"

    id: str = Column(String(36), primary_key=True, default=_new_id)
    business_id: str = Column(String(64), nullable=False, index=True)
    full_name: str = Column(String(100), nullable=False)
    role: str = Column(String(50), default="Service Provider")
    commission_type: str = Column(String(20), default="PERCENTAGE")
    commission_rate: Decimal = Column(DECIMAL(7, 4), default=0)
    flat_fee: Decimal = Column(DECIMAL(14, 4), default=0)
    is_active: bool = Column(Boolean, default=True)
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)
    updated_at: datetime = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class ServiceDefinitionModel(Base):
    """服务项目表模型。

    commission_override 为空时使用服务人员自身的提成比例。
    """
    __tablename__ = "service_definitions"

    id: str = Column(String(36), primary_key=True, default=_new_id)
    business_id: str = Column(String(64), nullable=False, index=True)
    name: str = Column(String(100), nullable=False)
    base_price: Decimal = Column(DECIMAL(14, 4), nullable=False)
    commission_override: Optional[Decimal] = Column(DECIMAL(7, 4))
    is_active: bool = Column(Boolean, default=True)
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)
    updated_at: datetime = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class ServiceRecordModel(Base):
    """服务交易记录表模型。

    服务名称、服务人员姓名等字段是创建时的快照，
    后续修改服务项目或服务人员不会影响历史记录。
    service_id / provider_id 仅用于关联，不设外键约束，
    这样停用的服务人员和服务项目不会影响历史记录。
    """
    __tablename__ = "service_records"

    id: str = Column(String(36), primary_key=True, default=_new_id)
    business_id: str = Column(String(64), nullable=False, index=True)
    service_name: str = Column(String(100), nullable=False)
    service_provider_name: str = Column(String(100), nullable=False)
    service_price: Decimal = Column(DECIMAL(14, 4), nullable=False)
    commission_rate_used: Decimal = Column(DECIMAL(7, 4), nullable=False)
    commission_amount: Decimal = Column(DECIMAL(14, 4), nullable=False)
    business_amount: Decimal = Column(DECIMAL(14, 4), nullable=False)
    date_offered: datetime = Column(DateTime(timezone=True), default=_utcnow, index=True)
    recorded_by: Optional[str] = Column(String(100))
    service_id: Optional[str] = Column(String(36))
    provider_id: Optional[str] = Column(String(36))
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)


# 集合名称 -> ORM 模型
COLLECTIONS = {
    ServiceProviderModel.__tablename__: ServiceProviderModel,
    ServiceDefinitionModel.__tablename__: ServiceDefinitionModel,
    ServiceRecordModel.__tablename__: ServiceRecordModel,
}
