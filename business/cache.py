"""内存缓存 - 服务人员、服务项目、服务记录的本地快照

缓存只由 TransactionOrchestrator 修改，任意数量的观察者可以读取。
观察者通过 subscribe 注册回调，每次集合变化时收到 (集合名, 新快照)。

BusyIndicator 是引用计数的"处理中"标记，仅供界面显示加载状态，
不能用于互斥。
"""
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from loguru import logger

from .models import ServiceDefinition, ServiceProvider, ServiceRecord

PROVIDERS = "service_providers"
DEFINITIONS = "service_definitions"
RECORDS = "service_records"

# 观察者回调类型：接收集合名与该集合的只读快照
CacheObserver = Callable[[str, Tuple], None]


class ServiceCache:
    """服务数据缓存

    所有读取返回 tuple 快照，观察者拿到的数据不会被后续修改影响。

    使用方式：
        ```python
        cache = ServiceCache()
        unsubscribe = cache.subscribe(lambda name, items: print(name, len(items)))
        cache.set_providers([...])
        unsubscribe()
        ```
    """

    def __init__(self):
        self._collections: Dict[str, Tuple] = {
            PROVIDERS: (),
            DEFINITIONS: (),
            RECORDS: (),
        }
        self._observers: List[CacheObserver] = []
        # 最近一次读取失败的错误信息；读取成功后清除
        self.fetch_errors: Dict[str, str] = {}

    # ================================================================
    # 观察者
    # ================================================================

    def subscribe(self, observer: CacheObserver) -> Callable[[], None]:
        """注册观察者

        Returns:
            取消注册的函数
        """
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, name: str):
        snapshot = self._collections[name]
        for observer in list(self._observers):
            try:
                observer(name, snapshot)
            except Exception as e:
                logger.error(f"Cache observer failed for {name}: {e}")

    def _replace(self, name: str, items):
        self._collections[name] = tuple(items)
        self._notify(name)

    # ================================================================
    # 读取
    # ================================================================

    @property
    def providers(self) -> Tuple[ServiceProvider, ...]:
        return self._collections[PROVIDERS]

    @property
    def definitions(self) -> Tuple[ServiceDefinition, ...]:
        return self._collections[DEFINITIONS]

    @property
    def records(self) -> Tuple[ServiceRecord, ...]:
        return self._collections[RECORDS]

    # ================================================================
    # 修改
    # ================================================================

    def set_providers(self, providers: List[ServiceProvider]):
        self._replace(PROVIDERS, providers)

    def add_provider(self, provider: ServiceProvider):
        self._replace(PROVIDERS, self.providers + (provider,))

    def replace_provider(self, provider: ServiceProvider):
        self._replace(PROVIDERS, [provider if p.id == provider.id else p for p in self.providers])

    def set_definitions(self, definitions: List[ServiceDefinition]):
        self._replace(DEFINITIONS, definitions)

    def add_definition(self, definition: ServiceDefinition):
        self._replace(DEFINITIONS, self.definitions + (definition,))

    def replace_definition(self, definition: ServiceDefinition):
        self._replace(
            DEFINITIONS,
            [definition if d.id == definition.id else d for d in self.definitions]
        )

    def set_records(self, records: List[ServiceRecord]):
        self._replace(RECORDS, records)

    def prepend_record(self, record: ServiceRecord):
        """新记录放在最前（按时间倒序）"""
        self._replace(RECORDS, (record,) + self.records)

    def clear(self):
        """清空所有集合（如退出登录）"""
        self.fetch_errors.clear()
        for name in list(self._collections):
            self._replace(name, ())

    def find_provider(self, provider_id: str) -> Optional[ServiceProvider]:
        return next((p for p in self.providers if p.id == provider_id), None)

    def find_definition(self, definition_id: str) -> Optional[ServiceDefinition]:
        return next((d for d in self.definitions if d.id == definition_id), None)


class BusyIndicator:
    """引用计数的处理中标记

    每个操作进入时加一、退出时减一，count > 0 即为 busy。
    状态在 busy/idle 之间切换时通知监听者。
    """

    def __init__(self):
        self.count = 0
        self._listeners: List[Callable[[bool], None]] = []

    @property
    def is_busy(self) -> bool:
        return self.count > 0

    def add_listener(self, listener: Callable[[bool], None]):
        self._listeners.append(listener)

    @contextmanager
    def track(self) -> Iterator[None]:
        self.count += 1
        if self.count == 1:
            self._emit(True)
        try:
            yield
        finally:
            self.count -= 1
            if self.count == 0:
                self._emit(False)

    def _emit(self, busy: bool):
        for listener in list(self._listeners):
            try:
                listener(busy)
            except Exception as e:
                logger.error(f"Busy listener failed: {e}")
