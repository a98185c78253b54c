"""初始化数据库

创建所有表，并为指定门店写入默认的服务项目和服务人员（来自 business_config）。

使用方式：
    python scripts/init_db.py --business-id biz-001
"""
import argparse
import asyncio
import sys
import os

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from loguru import logger

from business import CommissionType, TransactionOrchestrator
from business.mapping import parse_enum
from config.business_config import business_config
from config.settings import settings
from database import DatabaseConnection, SqlRecordStore


async def init_database(business_id: str, database_url: str = None):
    """初始化数据库和种子数据"""
    logger.info("Initializing database...")
    conn = DatabaseConnection(database_url)

    try:
        logger.info("Creating tables...")
        await conn.create_tables()

        if not business_id:
            logger.info("No business id given, skipping seed data")
            return

        orchestrator = TransactionOrchestrator(SqlRecordStore(conn), business_id)
        existing_services = {d.name for d in await orchestrator.fetch_service_definitions()}
        existing_staff = {p.full_name for p in await orchestrator.fetch_service_providers()}

        logger.info("Inserting seed data...")
        for service in business_config.get_service_definitions():
            if service["name"] in existing_services:
                continue
            result = await orchestrator.create_service_definition(
                name=service["name"],
                base_price=service["base_price"],
                commission_override=service.get("commission_override"),
            )
            if result.success:
                logger.info(f"Created service: {service['name']}")
            else:
                logger.error(result.error)

        for staff in business_config.get_service_providers():
            if staff["full_name"] in existing_staff:
                continue
            result = await orchestrator.create_service_provider(
                full_name=staff["full_name"],
                role=staff.get("role", "Service Provider"),
                commission_type=parse_enum(
                    CommissionType, staff.get("commission_type"), CommissionType.PERCENTAGE
                ),
                commission_rate=staff.get("commission_rate", 0),
                flat_fee=staff.get("flat_fee", 0),
            )
            if result.success:
                logger.info(f"Created staff: {staff['full_name']}")
            else:
                logger.error(result.error)

        logger.info("Database initialization completed!")
    finally:
        await conn.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="初始化数据库")
    parser.add_argument("--business-id", default=settings.default_business_id,
                        help="写入种子数据的门店ID")
    parser.add_argument("--db", default=None, help="数据库连接 URL")
    args = parser.parse_args()
    asyncio.run(init_database(args.business_id, args.db))
