"""记录存储 - 业务引擎访问远端数据的唯一通道。

业务层只依赖 RecordStore 抽象接口（按集合 fetch / insert / update），
记录以 snake_case 键的字典表示，时间戳为 ISO-8601 字符串。

SqlRecordStore 基于 SQLAlchemy ORM 实现该接口：
- SQLite 使用同步会话（开发环境）
- PostgreSQL 使用异步会话（生产环境）
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import select, update

from .connection import DatabaseConnection
from .models import COLLECTIONS, Base

Record = Dict[str, Any]


@dataclass
class RecordFilter:
    """查询条件。

    Attributes:
        business_id: 门店ID（多租户隔离，必填）。
        order_by: 排序字段（可选）。
        descending: 是否倒序，仅在指定 order_by 时生效。
        limit: 最大返回条数（可选）。
    """
    business_id: str
    order_by: Optional[str] = None
    descending: bool = True
    limit: Optional[int] = None


class RecordStore(ABC):
    """记录存储抽象基类"""

    @abstractmethod
    async def fetch(self, collection: str, record_filter: RecordFilter) -> List[Record]:
        """按条件查询集合中的记录"""
        pass

    @abstractmethod
    async def insert(self, collection: str, record: Record) -> Record:
        """插入记录，返回包含存储端分配的 id 与时间戳的完整记录"""
        pass

    @abstractmethod
    async def update(self, collection: str, record_id: str, fields: Record) -> None:
        """仅更新 fields 中列出的字段"""
        pass


class SqlRecordStore(RecordStore):
    """基于 SQLAlchemy 的记录存储。

    Example::

        conn = DatabaseConnection("sqlite:///data/servicebook.db")
        await conn.create_tables()
        store = SqlRecordStore(conn)

        row = await store.insert("service_providers", {
            "business_id": "biz-1", "full_name": "Wanjiru",
        })
        rows = await store.fetch("service_providers", RecordFilter("biz-1"))
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    async def fetch(self, collection: str, record_filter: RecordFilter) -> List[Record]:
        model = self._model_for(collection)
        stmt = select(model).where(model.business_id == record_filter.business_id)
        if record_filter.order_by:
            column = self._column_for(model, record_filter.order_by)
            stmt = stmt.order_by(column.desc() if record_filter.descending else column.asc())
        if record_filter.limit is not None:
            stmt = stmt.limit(record_filter.limit)

        if self.conn.is_async:
            async with self.conn.get_session() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        else:
            with self.conn.get_session() as session:
                rows = session.execute(stmt).scalars().all()
        return [self._to_record(row) for row in rows]

    async def insert(self, collection: str, record: Record) -> Record:
        model = self._model_for(collection)
        values = {k: v for k, v in record.items() if v is not None or k != "id"}
        row = model(**values)

        if self.conn.is_async:
            async with self.conn.get_session() as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
        else:
            with self.conn.get_session() as session:
                session.add(row)
                session.commit()
                session.refresh(row)
        logger.debug(f"Inserted {collection} row {row.id}")
        return self._to_record(row)

    async def update(self, collection: str, record_id: str, fields: Record) -> None:
        model = self._model_for(collection)
        for key in fields:
            self._column_for(model, key)
        stmt = update(model).where(model.id == record_id).values(**fields)

        if self.conn.is_async:
            async with self.conn.get_session() as session:
                result = await session.execute(stmt)
                await session.commit()
        else:
            with self.conn.get_session() as session:
                result = session.execute(stmt)
                session.commit()
        if result.rowcount == 0:
            logger.debug(f"Update on {collection} matched no row for id={record_id}")

    @staticmethod
    def _model_for(collection: str):
        model = COLLECTIONS.get(collection)
        if model is None:
            raise ValueError(f"Unknown collection: {collection}")
        return model

    @staticmethod
    def _column_for(model, name: str):
        if name not in model.__table__.columns:
            raise ValueError(f"Unknown field for {model.__tablename__}: {name}")
        return model.__table__.columns[name]

    @staticmethod
    def _to_record(row: Base) -> Record:
        """ORM 对象 -> 边界记录（时间戳转为 ISO-8601 字符串）。"""
        record: Record = {}
        for column in row.__table__.columns:
            value = getattr(row, column.name)
            if isinstance(value, datetime):
                if value.tzinfo is None:
                    # SQLite 不保存时区信息，写入时统一为 UTC
                    value = value.replace(tzinfo=timezone.utc)
                value = value.isoformat()
            elif isinstance(value, float):
                value = Decimal(str(value))
            record[column.name] = value
        return record
