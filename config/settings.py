"""全局配置管理

所有用户可配置项均通过 .env 文件设置，运行时自动加载到此处。

使用方式：
    1. 手动创建 .env 文件（参考 .env.example）
    2. 或直接设置环境变量（如 DATABASE_URL、LOG_LEVEL）
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置 - 所有字段均可通过 .env 或环境变量覆盖"""

    # ========== 数据库 ==========
    database_url: str = "sqlite:///data/servicebook.db"

    # ========== 业务范围 ==========
    default_business_id: str = ""
    currency: str = "KES"

    # 服务记录每次拉取的最大条数（按服务时间倒序）
    service_records_limit: int = 100

    # ========== 订阅 ==========
    trial_period_days: int = 30
    grace_period_days: int = 5

    # ========== 日志 ==========
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# 全局配置实例
settings = Settings()
