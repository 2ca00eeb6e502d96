"""
服务器配置
从环境变量或 .env 文件加载配置
"""

import os
from pathlib import Path

from dotenv import load_dotenv

env_file = Path(".env")
if env_file.exists():
    load_dotenv(env_file)


def _split_paths(value: str | None) -> list[str] | None:
    """按 os.pathsep 拆分路径列表，未设置或为空时返回 None"""
    if not value:
        return None
    paths = [item.strip() for item in value.split(os.pathsep) if item.strip()]
    return paths or None


class Config:
    def __init__(self) -> None:
        # 服务器配置
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "8000"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

        # 环境配置
        self.environment = os.getenv("ENVIRONMENT", "development")

        # 调试模式：启用后未捕获异常在浏览器端显示 traceback 页面
        self.debug = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")

        # 模块根目录
        # 格式: os.pathsep 分隔的目录列表,如 "/srv/modules:/opt/extra"
        # 未设置时跳过模块加载
        self.module_paths = _split_paths(os.getenv("SILMOD_MODULE_PATHS"))

        # 模板配置
        # SILMOD_TEMPLATE_PATHS: 不带命名空间的默认模板目录
        self.template_paths = _split_paths(os.getenv("SILMOD_TEMPLATE_PATHS")) or []
        auto_reload_env = os.getenv("SILMOD_TEMPLATE_AUTO_RELOAD")
        if auto_reload_env is None:
            self.template_auto_reload = self.environment == "development"
        else:
            self.template_auto_reload = auto_reload_env.lower() in ("true", "1", "yes")

    @property
    def template_options(self) -> dict:
        """传递给 Jinja2 Environment 的选项"""
        return {"auto_reload": self.template_auto_reload}


config = Config()
