"""交易编排 - 服务人员、服务项目与服务记录的统一入口。

TransactionOrchestrator 负责：
- 按门店拉取三类集合（服务记录按服务时间倒序、限制条数）
- 新建 / 更新 / 启停服务人员与服务项目（只发送列出的字段）
- 新建服务记录：确定成交价与提成比例、计算提成、写入快照记录
- 同步内存缓存（ServiceCache），观察者通过缓存订阅变化

错误策略：
- 读取失败：返回空列表，不向调用方抛出（错误信息记录在 cache.fetch_errors）
- 写入失败：返回 OperationResult.fail，错误信息带业务前缀，不自动重试

并发：每个操作都是独立的协程，没有锁或队列。两个并发的新建操作各自
写入存储并在完成后更新缓存（不去重）；busy 标记仅供界面显示。
"""
import dataclasses
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, TypeVar

from loguru import logger

from config.settings import settings
from database.record_store import RecordFilter, RecordStore
from . import mapping
from .cache import BusyIndicator, DEFINITIONS, PROVIDERS, RECORDS, ServiceCache
from .commission import (
    calculate_commission, resolve_commission_rate, resolve_final_price
)
from .models import (
    CommissionType, Number, OperationResult, ServiceDefinition,
    ServiceProvider, ServiceRecord, to_money
)

T = TypeVar("T")


class TransactionOrchestrator:
    """交易编排器（每个门店会话一个实例）

    Attributes:
        store: 记录存储。
        business_id: 当前门店ID。
        cache: 内存缓存。
        busy: 处理中标记。

    Example::

        orchestrator = TransactionOrchestrator(SqlRecordStore(conn), "biz-1")
        await orchestrator.fetch_service_providers()
        result = await orchestrator.create_service_record(definition, provider)
        if not result.success:
            show_error(result.error)
    """

    def __init__(self, store: RecordStore, business_id: str,
                 cache: Optional[ServiceCache] = None,
                 busy: Optional[BusyIndicator] = None) -> None:
        self.store = store
        self.business_id = business_id
        self.cache = cache or ServiceCache()
        self.busy = busy or BusyIndicator()

    @property
    def is_loading(self) -> bool:
        return self.busy.is_busy

    # ================================================================
    # 读取
    # ================================================================

    async def _fetch(self, collection: str, record_filter: RecordFilter,
                     from_row: Callable[[dict], T]) -> Optional[List[T]]:
        """读取集合并转换为实体；读取或转换失败时记录告警并返回 None"""
        try:
            rows = await self.store.fetch(collection, record_filter)
            items = [from_row(row) for row in rows]
        except Exception as e:
            logger.warning(f"Fetching {collection} for {self.business_id} failed: {e}")
            self.cache.fetch_errors[collection] = str(e)
            return None
        self.cache.fetch_errors.pop(collection, None)
        return items

    async def fetch_service_providers(self) -> List[ServiceProvider]:
        """拉取服务人员，成功时替换缓存"""
        with self.busy.track():
            providers = await self._fetch(
                PROVIDERS, RecordFilter(self.business_id), mapping.provider_from_row
            )
            if providers is None:
                return []
            self.cache.set_providers(providers)
            return providers

    async def fetch_service_definitions(self) -> List[ServiceDefinition]:
        """拉取服务项目，成功时替换缓存"""
        with self.busy.track():
            definitions = await self._fetch(
                DEFINITIONS, RecordFilter(self.business_id), mapping.definition_from_row
            )
            if definitions is None:
                return []
            self.cache.set_definitions(definitions)
            return definitions

    async def fetch_service_records(self, limit: Optional[int] = None) -> List[ServiceRecord]:
        """拉取最近的服务记录（按服务时间倒序）

        Args:
            limit: 最大条数，None 时使用 settings.service_records_limit。
        """
        if limit is None:
            limit = settings.service_records_limit
        with self.busy.track():
            records = await self._fetch(RECORDS, RecordFilter(
                self.business_id, order_by="date_offered", descending=True, limit=limit
            ), mapping.service_record_from_row)
            if records is None:
                return []
            self.cache.set_records(records)
            return records

    # ================================================================
    # 服务人员
    # ================================================================

    async def create_service_provider(
        self,
        full_name: str,
        role: str = "Service Provider",
        commission_type: CommissionType = CommissionType.PERCENTAGE,
        commission_rate: Number = 0,
        flat_fee: Number = 0,
    ) -> OperationResult[ServiceProvider]:
        """新建服务人员，成功后追加到缓存末尾"""
        draft = ServiceProvider(
            full_name=full_name,
            role=role,
            commission_type=commission_type,
            commission_rate=to_money(commission_rate),
            flat_fee=to_money(flat_fee),
        )
        with self.busy.track():
            try:
                row = await self.store.insert(
                    PROVIDERS, mapping.provider_to_row(self.business_id, draft)
                )
                provider = mapping.provider_from_row(row)
            except Exception as e:
                return self._failure("Failed to create staff", e)
            self.cache.add_provider(provider)
            logger.info(f"Created service provider {provider.id} ({provider.full_name})")
            return OperationResult.ok(provider)

    async def update_service_provider(
        self, provider: ServiceProvider
    ) -> OperationResult[ServiceProvider]:
        """整体更新服务人员（只发送可编辑字段）"""
        with self.busy.track():
            try:
                await self.store.update(
                    PROVIDERS, provider.id, mapping.provider_update_fields(provider)
                )
            except Exception as e:
                return self._failure("Failed to update staff", e)
            self.cache.replace_provider(provider)
            return OperationResult.ok(provider)

    async def toggle_service_provider_active(
        self, provider_id: str, is_active: bool
    ) -> OperationResult[None]:
        """启用/停用服务人员（只更新 is_active，历史记录不受影响）"""
        with self.busy.track():
            try:
                await self.store.update(PROVIDERS, provider_id, {"is_active": is_active})
            except Exception as e:
                return self._failure("Failed to update staff status", e)
            current = self.cache.find_provider(provider_id)
            if current is not None:
                self.cache.replace_provider(dataclasses.replace(current, is_active=is_active))
            return OperationResult.ok()

    # ================================================================
    # 服务项目
    # ================================================================

    async def create_service_definition(
        self,
        name: str,
        base_price: Number,
        commission_override: Optional[Number] = None,
    ) -> OperationResult[ServiceDefinition]:
        """新建服务项目，成功后追加到缓存末尾"""
        draft = ServiceDefinition(
            name=name,
            base_price=to_money(base_price),
            commission_override=(
                None if commission_override is None else to_money(commission_override)
            ),
        )
        with self.busy.track():
            try:
                row = await self.store.insert(
                    DEFINITIONS, mapping.definition_to_row(self.business_id, draft)
                )
                definition = mapping.definition_from_row(row)
            except Exception as e:
                return self._failure("Failed to create service", e)
            self.cache.add_definition(definition)
            logger.info(f"Created service definition {definition.id} ({definition.name})")
            return OperationResult.ok(definition)

    async def update_service_definition(
        self, definition: ServiceDefinition
    ) -> OperationResult[ServiceDefinition]:
        """整体更新服务项目（只发送可编辑字段）"""
        with self.busy.track():
            try:
                await self.store.update(
                    DEFINITIONS, definition.id, mapping.definition_update_fields(definition)
                )
            except Exception as e:
                return self._failure("Failed to update service", e)
            self.cache.replace_definition(definition)
            return OperationResult.ok(definition)

    async def toggle_service_definition_active(
        self, definition_id: str, is_active: bool
    ) -> OperationResult[None]:
        """启用/停用服务项目"""
        with self.busy.track():
            try:
                await self.store.update(DEFINITIONS, definition_id, {"is_active": is_active})
            except Exception as e:
                return self._failure("Failed to update service status", e)
            current = self.cache.find_definition(definition_id)
            if current is not None:
                self.cache.replace_definition(dataclasses.replace(current, is_active=is_active))
            return OperationResult.ok()

    # ================================================================
    # 服务记录
    # ================================================================

    async def create_service_record(
        self,
        definition: ServiceDefinition,
        provider: ServiceProvider,
        price_override: Optional[Number] = None,
        recorded_by: Optional[str] = None,
    ) -> OperationResult[ServiceRecord]:
        """记录一次服务

        成交价与提成比例在此刻确定并写入快照，之后修改服务人员或服务项目
        不会影响这条记录。成功后新记录放在缓存最前。

        Args:
            definition: 服务项目。
            provider: 服务人员。
            price_override: 手动改价（可选）。
            recorded_by: 记录员（可选）。
        """
        final_price = resolve_final_price(definition, price_override)
        rate = resolve_commission_rate(definition, provider)
        breakdown = calculate_commission(final_price, provider, rate)
        draft = ServiceRecord(
            service_name=definition.name,
            service_provider_name=provider.full_name,
            service_price=final_price,
            commission_rate_used=breakdown.commission_rate_used,
            commission_amount=breakdown.commission_amount,
            business_amount=breakdown.business_amount,
            service_id=definition.id,
            provider_id=provider.id,
            recorded_by=recorded_by,
        )
        with self.busy.track():
            try:
                row = await self.store.insert(
                    RECORDS, mapping.service_record_to_row(self.business_id, draft)
                )
                record = mapping.service_record_from_row(row)
            except Exception as e:
                return self._failure("Failed to record service", e)
            self.cache.prepend_record(record)
            logger.info(
                f"Recorded service {record.service_name} by {record.service_provider_name}: "
                f"price={record.service_price} commission={record.commission_amount}"
            )
            return OperationResult.ok(record)

    # ================================================================
    # 便捷查询
    # ================================================================

    def active_providers(self) -> List[ServiceProvider]:
        return [p for p in self.cache.providers if p.is_active]

    def active_definitions(self) -> List[ServiceDefinition]:
        return [d for d in self.cache.definitions if d.is_active]

    def today_revenue(self, now: Optional[datetime] = None) -> Decimal:
        """今日（本地零点起）服务营业额"""
        since = start_of_day_millis(now)
        return sum(
            (r.service_price for r in self.cache.records if r.date_offered >= since),
            Decimal("0"),
        )

    def today_commission(self, now: Optional[datetime] = None) -> Decimal:
        """今日（本地零点起）应付提成"""
        since = start_of_day_millis(now)
        return sum(
            (r.commission_amount for r in self.cache.records if r.date_offered >= since),
            Decimal("0"),
        )

    def clear_data(self):
        """清空缓存（切换门店或退出登录时调用）"""
        self.cache.clear()

    # ================================================================
    # 内部
    # ================================================================

    def _failure(self, prefix: str, error: Exception) -> OperationResult:
        message = f"{prefix}: {error}"
        logger.error(f"[{self.business_id}] {message}")
        return OperationResult.fail(message)


def start_of_day_millis(now: Optional[datetime] = None) -> int:
    now = now or datetime.now().astimezone()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp() * 1000)
