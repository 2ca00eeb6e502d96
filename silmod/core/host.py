"""
宿主上下文

进程内唯一的共享对象，在激活时传给每个模块。模块只持有引用，所有权归顶层应用。
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, FastAPI
from starlette.templating import Jinja2Templates

from silmod.config.settings import Config
from silmod.core.exceptions import ServiceNotFoundError
from silmod.core.logger import logger
from silmod.core.templates import TemplateNamespaceRegistry

if TYPE_CHECKING:
    from silmod.core.modules.base import ModuleDescriptor


class HostContext:
    """
    宿主上下文

    提供给模块的注册能力：
    - register_namespace: 模板命名空间
    - include_router / add_api_route: 路由（直接转交 FastAPI）
    - register_service / get_service: 命名服务，后激活的模块可使用先激活模块注册的服务
    """

    def __init__(
        self,
        app: FastAPI,
        template_registry: TemplateNamespaceRegistry,
        config: Config,
    ) -> None:
        self.app = app
        self.template_registry = template_registry
        self.config = config
        self.modules: list[ModuleDescriptor] = []
        self._services: dict[str, Any] = {}

    @property
    def templates(self) -> Jinja2Templates:
        return self.template_registry.templates

    # ========== 模板命名空间 ==========

    def register_namespace(self, name: str, path: str | os.PathLike[str]) -> None:
        """把 path 作为模板目录注册到命名空间 name（后注册者覆盖）"""
        self.template_registry.register(name, path)

    # ========== 路由 ==========

    def include_router(self, router: APIRouter, **kwargs: Any) -> None:
        self.app.include_router(router, **kwargs)

    def add_api_route(self, path: str, endpoint: Any, **kwargs: Any) -> None:
        self.app.add_api_route(path, endpoint, **kwargs)

    # ========== 服务 ==========

    def register_service(self, name: str, service: Any) -> None:
        """注册命名服务，重复注册时覆盖并记录警告"""
        if name in self._services:
            logger.warning(f"Service [{name}] already registered, overwriting")
        self._services[name] = service
        logger.debug(f"Service [{name}] registered")

    def get_service(self, name: str) -> Any:
        """获取命名服务，未注册时抛出 ServiceNotFoundError"""
        try:
            return self._services[name]
        except KeyError:
            raise ServiceNotFoundError(name) from None

    def has_service(self, name: str) -> bool:
        return name in self._services
