"""
主应用入口
采用模块化架构设计
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Mapping

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from silmod import __version__
from silmod.api import system_router
from silmod.config.settings import Config
from silmod.config.settings import config as default_config
from silmod.core.exceptions import ExceptionHandlers
from silmod.core.host import HostContext
from silmod.core.logger import logger, parse_log_level
from silmod.core.modules import ModuleActivator, discover_modules
from silmod.core.paths import to_path_list
from silmod.core.templates import TemplateNamespaceRegistry
from silmod.middleware.error_middleware import ErrorNegotiationMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """应用生命周期管理"""
    host: HostContext = app.state.host

    logger.info("=" * 60)
    logger.info(f"SilMod v{__version__}")
    logger.info("=" * 60)
    logger.info(f"已激活模块: {len(host.modules)} 个")
    logger.info(f"服务启动成功: http://{host.config.host}:{host.config.port}")

    yield  # 应用运行期间

    logger.info("服务已关闭")


def install_error_handlers(app: FastAPI) -> None:
    """
    注册错误协商

    必须先于模块加载执行，保证模块注册的路由中抛出的异常同样被覆盖
    """
    app.add_exception_handler(HTTPException, ExceptionHandlers.handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, ExceptionHandlers.handle_validation_exception)  # type: ignore[arg-type]
    app.add_middleware(ErrorNegotiationMiddleware)


def load_modules(host: HostContext, paths: Any) -> list:
    """
    发现并激活 paths 下的所有模块

    任一模块激活失败时异常直接抛出，应用启动中止
    """
    descriptors = discover_modules(to_path_list(paths))
    activator = ModuleActivator(host)
    activated = activator.activate_all(descriptors)
    logger.info(f"功能模块初始化完成: {len(activated)}/{len(descriptors)} 个模块已激活")
    return activated


def create_app(
    options: Mapping[str, Any] | None = None,
    config: Config | None = None,
) -> FastAPI:
    """
    创建应用并加载所有模块

    Args:
        options: 选项字典，支持:
            - modules.path: 模块根目录（单个路径或路径列表）
            - templates: 传给 Jinja2 Environment 的选项
            - template_paths: 不带命名空间的默认模板目录
        config: 配置对象，未指定时使用全局配置

    Returns:
        FastAPI 应用
    """
    options = options or {}
    config = config or default_config

    app = FastAPI(
        title="SilMod",
        version=__version__,
        debug=config.debug,
        lifespan=lifespan,
    )

    # 注册全局错误协商（先于模块加载）
    install_error_handlers(app)

    template_registry = TemplateNamespaceRegistry(
        search_paths=to_path_list(options.get("template_paths", config.template_paths)),
        options=options.get("templates", config.template_options),
    )
    host = HostContext(app, template_registry, config)
    app.state.host = host

    app.include_router(system_router)

    # 注册所有模块（未配置模块目录时跳过）
    module_paths = (options.get("modules") or {}).get("path", config.module_paths)
    if module_paths:
        logger.info("初始化功能模块系统...")
        load_modules(host, module_paths)
    else:
        logger.info("未配置模块目录，跳过模块加载")

    return app


def main() -> Any:
    # Parse log level
    log_level = parse_log_level(default_config.log_level).lower()
    if log_level not in ["debug", "info", "warning", "error", "critical"]:
        log_level = "info"

    # Start server
    # 根据环境设置热重载
    uvicorn.run(
        "silmod.main:create_app",
        factory=True,
        host=default_config.host,
        port=default_config.port,
        log_level=log_level,
        reload=default_config.environment == "development",  # 只在开发环境启用热重载
    )


if __name__ == "__main__":
    main()
