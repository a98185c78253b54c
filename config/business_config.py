"""
业务配置接口 - 支持可替换的业务配置

新门店可以实现自己的业务配置（默认服务项目、默认员工），替换默认配置。
scripts/init_db.py 使用这里的数据初始化种子数据。
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any


class BusinessConfig(ABC):
    """业务配置抽象基类"""

    @abstractmethod
    def get_service_definitions(self) -> List[Dict[str, Any]]:
        """获取默认服务项目列表"""
        pass

    @abstractmethod
    def get_service_providers(self) -> List[Dict[str, Any]]:
        """获取默认服务人员列表"""
        pass


class SalonConfig(BusinessConfig):
    """美发沙龙业务配置"""

    def get_service_definitions(self) -> List[Dict[str, Any]]:
        return [
            {"name": "Haircut", "base_price": 500, "commission_override": None},
            {"name": "Beard Trim", "base_price": 300, "commission_override": None},
            {"name": "Braiding", "base_price": 2500, "commission_override": 40},
            {"name": "Manicure", "base_price": 800, "commission_override": None},
            {"name": "Pedicure", "base_price": 1000, "commission_override": None},
            {"name": "Facial", "base_price": 1500, "commission_override": 25},
        ]

    def get_service_providers(self) -> List[Dict[str, Any]]:
        return [
            {
                "full_name": "Senior Stylist",
                "role": "Stylist",
                "commission_type": "PERCENTAGE",
                "commission_rate": 30,
                "flat_fee": 0,
            },
            {
                "full_name": "Junior Barber",
                "role": "Barber",
                "commission_type": "FLAT_FEE",
                "commission_rate": 0,
                "flat_fee": 100,
            },
        ]


# 全局业务配置实例（可以在 app.py 中替换）
business_config: BusinessConfig = SalonConfig()
