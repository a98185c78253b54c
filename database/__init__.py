"""数据库模块 - 服务交易数据的存储层。

- DatabaseConnection: 引擎与会话管理（SQLite 同步 / PostgreSQL 异步）
- RecordStore: 业务层依赖的记录存储抽象接口
- SqlRecordStore: 基于 SQLAlchemy ORM 的实现
"""
from .connection import DatabaseConnection
from .record_store import RecordFilter, RecordStore, SqlRecordStore

__all__ = [
    "DatabaseConnection",
    "RecordFilter",
    "RecordStore",
    "SqlRecordStore",
]
