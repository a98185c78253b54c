#!/usr/bin/env python3
"""服务交易日报 - 命令行入口

加载指定门店的服务人员、服务项目和最近的服务记录，输出今日汇总：
营业额、提成、门店实收、按时段分布、净利率以及订阅访问状态。

使用方式：
    python app.py --business-id biz-001

    # 指定数据库
    python app.py --business-id biz-001 --db sqlite:///data/servicebook.db

    # 计入当日支出
    python app.py --business-id biz-001 --expenses 1500

环境变量（在 .env 文件中配置）：
    DATABASE_URL          数据库连接地址
    DEFAULT_BUSINESS_ID   默认门店ID
    SERVICE_RECORDS_LIMIT 服务记录拉取条数（默认 100）
    LOG_LEVEL             日志级别（默认 INFO）
"""
import argparse
import asyncio
import sys
from datetime import datetime

from loguru import logger

from business import SaleEvent, SubscriptionStatus, TransactionOrchestrator, check_access
from business.closure import summarize_service_records
from business.orchestrator import start_of_day_millis
from business.sales import INTERVAL_LABELS, distribute_hourly_sales
from config.settings import settings
from database import DatabaseConnection, SqlRecordStore


def setup_logging(level: str):
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


async def run_report(business_id: str, database_url: str = None,
                     expenses: float = 0, status: str = "ACTIVE"):
    """生成并输出日报"""
    conn = DatabaseConnection(database_url)
    try:
        await conn.create_tables()
        orchestrator = TransactionOrchestrator(SqlRecordStore(conn), business_id)

        await orchestrator.fetch_service_providers()
        await orchestrator.fetch_service_definitions()
        await orchestrator.fetch_service_records()
        if orchestrator.cache.fetch_errors:
            logger.warning(f"部分数据读取失败: {orchestrator.cache.fetch_errors}")

        now = datetime.now().astimezone()
        since = start_of_day_millis(now)
        today = [r for r in orchestrator.cache.records if r.date_offered >= since]
        summary = summarize_service_records(today)
        hourly = distribute_hourly_sales(
            SaleEvent(r.date_offered, r.service_price) for r in today
        )

        access = check_access(SubscriptionStatus[status])

        print()
        print("=" * 60)
        print(f"  门店: {business_id}    日期: {now.date().isoformat()}")
        print(f"  在职服务人员: {len(orchestrator.active_providers())}")
        print(f"  在售服务项目: {len(orchestrator.active_definitions())}")
        print(f"  今日服务笔数: {summary.record_count}")
        print(f"  营业额: {summary.total_sales:.2f} {settings.currency}")
        print(f"  提成:   {summary.total_commission:.2f} {settings.currency}")
        print(f"  实收:   {summary.total_business:.2f} {settings.currency}")
        print(f"  净利率: {summary.net_profit_margin(total_expenses=expenses):.2f}%")
        print("-" * 60)
        for label, amount in zip(INTERVAL_LABELS, hourly):
            print(f"  {label:<10} {amount:>12.2f}")
        print("-" * 60)
        for name, amount in sorted(summary.commission_by_provider.items()):
            print(f"  {name:<24} 提成 {amount:>10.2f}")
        print(f"  订阅: {'可用' if access.allowed else access.reason}")
        print("=" * 60)
        print()
    finally:
        await conn.close()


def main():
    parser = argparse.ArgumentParser(description="服务交易日报")
    parser.add_argument("--business-id", default=settings.default_business_id,
                        help="门店ID")
    parser.add_argument("--db", default=None, help="数据库连接 URL")
    parser.add_argument("--expenses", type=float, default=0,
                        help="当日总支出（用于计算净利率）")
    parser.add_argument("--status", default="ACTIVE",
                        choices=[s.name for s in SubscriptionStatus],
                        help="当前订阅状态")
    args = parser.parse_args()

    setup_logging(settings.log_level)
    if not args.business_id:
        logger.error("未指定门店ID，请使用 --business-id 或设置 DEFAULT_BUSINESS_ID")
        sys.exit(1)

    asyncio.run(run_report(args.business_id, args.db, args.expenses, args.status))


if __name__ == "__main__":
    main()
