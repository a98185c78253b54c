#!/usr/bin/env python3
"""交互式生成 .env 配置文件

使用方式：
    python scripts/setup_env.py

逐项询问 config/settings.py 中的配置，直接回车使用默认值。
"""
import os

# 项目根目录
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_FILE = os.path.join(PROJECT_ROOT, ".env")


# 配置项定义：(分组, env_key, 描述, 默认值, 是否必填)
CONFIG_ITEMS = [
    ("数据库", "DATABASE_URL", "数据库连接地址（PostgreSQL 使用 postgresql://...）",
     "sqlite:///data/servicebook.db", False),

    ("门店", "DEFAULT_BUSINESS_ID", "默认门店ID", "", True),
    ("门店", "CURRENCY", "货币代码", "KES", False),
    ("门店", "SERVICE_RECORDS_LIMIT", "服务记录每次拉取条数", "100", False),

    ("订阅", "TRIAL_PERIOD_DAYS", "试用期天数", "30", False),
    ("订阅", "GRACE_PERIOD_DAYS", "到期后宽限天数", "5", False),

    ("日志", "LOG_LEVEL", "日志级别（DEBUG / INFO / WARNING / ERROR）", "INFO", False),
]


def build_env_lines(values):
    """根据填写结果生成 .env 内容（按分组输出）"""
    lines = ["# ServiceBook 配置文件", "# 由 scripts/setup_env.py 自动生成"]
    current_section = None
    for section, key, _, _, _ in CONFIG_ITEMS:
        if section != current_section:
            current_section = section
            lines.append("")
            lines.append(f"# === {section}配置 ===")
        lines.append(f"{key}={values[key]}")
    return lines


def main():
    print()
    print("=" * 60)
    print("  ServiceBook 配置向导")
    print("  生成 .env 配置文件")
    print("=" * 60)
    print()

    if os.path.exists(ENV_FILE):
        print(f"检测到已有 .env 文件: {ENV_FILE}")
        choice = input("是否覆盖？(y/N): ").strip().lower()
        if choice != "y":
            print("已取消。")
            return
        print()

    values = {}
    for _, key, desc, default, required in CONFIG_ITEMS:
        req_tag = " [必填]" if required else ""
        default_hint = f" (默认: {default})" if default else ""
        print(f"{desc}{req_tag}")

        while True:
            value = input(f"  {key}={default_hint}: ").strip()
            if not value:
                value = default
            if required and not value:
                print(f"  {key} 是必填项，请输入值。")
                continue
            break

        values[key] = value
        print()

    with open(ENV_FILE, "w", encoding="utf-8") as f:
        f.write("\n".join(build_env_lines(values)) + "\n")

    print("=" * 60)
    print(f"  配置文件已生成: {ENV_FILE}")
    print()
    print("  初始化数据库：")
    print("    python scripts/init_db.py")
    print()
    print("  查看日报：")
    print("    python app.py")
    print("=" * 60)


if __name__ == "__main__":
    main()
