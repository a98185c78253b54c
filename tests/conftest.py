"""测试公共 fixtures：临时 SQLite 记录存储，以及绑定到它的交易编排器。"""
import os
import shutil
import tempfile
from decimal import Decimal

import pytest

from business import (
    CommissionType, ServiceDefinition, ServiceProvider, TransactionOrchestrator,
)
from database import DatabaseConnection, RecordStore, SqlRecordStore
from database.models import Base

BUSINESS_ID = "biz-test"


class FailingRecordStore(RecordStore):
    """所有调用都抛出连接异常的记录存储，用于测试失败路径"""

    def __init__(self, message: str = "connection refused"):
        self.message = message
        self.calls = []

    async def fetch(self, collection, record_filter):
        self.calls.append(("fetch", collection))
        raise ConnectionError(self.message)

    async def insert(self, collection, record):
        self.calls.append(("insert", collection))
        raise ConnectionError(self.message)

    async def update(self, collection, record_id, fields):
        self.calls.append(("update", collection))
        raise ConnectionError(self.message)


@pytest.fixture
def db_conn():
    """每个测试使用一个全新的临时 SQLite 数据库"""
    temp_dir = tempfile.mkdtemp(prefix="db-tests-")
    conn = DatabaseConnection(f"sqlite:///{os.path.join(temp_dir, 'test.db')}")
    Base.metadata.create_all(conn.engine)

    try:
        yield conn
    finally:
        conn.engine.dispose()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def store(db_conn):
    return SqlRecordStore(db_conn)


@pytest.fixture
def orchestrator(store):
    return TransactionOrchestrator(store, BUSINESS_ID)


@pytest.fixture
def failing_orchestrator():
    return TransactionOrchestrator(FailingRecordStore(), BUSINESS_ID)


@pytest.fixture
def percentage_provider():
    return ServiceProvider(
        id="prov-1",
        full_name="Wanjiru Kamau",
        role="Stylist",
        commission_type=CommissionType.PERCENTAGE,
        commission_rate=Decimal("20"),
    )


@pytest.fixture
def flat_fee_provider():
    return ServiceProvider(
        id="prov-2",
        full_name="Otieno Barber",
        role="Barber",
        commission_type=CommissionType.FLAT_FEE,
        flat_fee=Decimal("150"),
    )


@pytest.fixture
def haircut():
    return ServiceDefinition(id="svc-1", name="Haircut", base_price=Decimal("500"))


@pytest.fixture
def braiding():
    return ServiceDefinition(
        id="svc-2", name="Braiding", base_price=Decimal("1000"),
        commission_override=Decimal("10"),
    )
