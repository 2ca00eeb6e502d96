"""
模板命名空间注册

每个模块把自己的模板目录绑定到独立的命名空间，模板以 "<命名空间>/<模板名>" 引用，
避免不同模块之间的模板名冲突。
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from typing import Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PrefixLoader, select_autoescape
from starlette.templating import Jinja2Templates

from silmod.core.logger import logger


class TemplateNamespaceRegistry:
    """
    模板命名空间注册中心

    底层是一个 Jinja2 Environment，其 loader 为：
    - PrefixLoader: 命名空间 -> 模块模板目录
    - FileSystemLoader: 宿主的默认模板目录（不带命名空间）
    """

    def __init__(
        self,
        search_paths: Iterable[str | os.PathLike[str]] = (),
        options: Mapping[str, Any] | None = None,
    ) -> None:
        self._bindings: dict[str, str] = {}
        self._prefix_loader = PrefixLoader({})
        loader = ChoiceLoader(
            [self._prefix_loader, FileSystemLoader([os.fspath(p) for p in search_paths])]
        )

        env_options: dict[str, Any] = {"autoescape": select_autoescape()}
        env_options.update(options or {})
        self.environment = Environment(loader=loader, **env_options)
        self.templates = Jinja2Templates(env=self.environment)

    def register(self, name: str, path: str | os.PathLike[str]) -> None:
        """
        将模板目录 path 绑定到命名空间 name

        不校验命名空间唯一性：重复注册时后者覆盖前者（记录警告）。
        """
        path = os.fspath(path)
        previous = self._bindings.get(name)
        if previous is not None:
            logger.warning(
                f"Template namespace [{name}] rebound: {previous} -> {path}"
            )

        self._bindings[name] = path
        self._prefix_loader.mapping[name] = FileSystemLoader(path)

        # 缓存中可能有旧绑定或默认目录加载的同名模板
        if self.environment.cache is not None:
            self.environment.cache.clear()

        logger.debug(f"Template namespace [{name}] registered: {path}")

    def get(self, name: str) -> str | None:
        """获取命名空间绑定的目录"""
        return self._bindings.get(name)

    @property
    def bindings(self) -> dict[str, str]:
        """当前所有命名空间绑定（副本）"""
        return dict(self._bindings)

    def render(self, template_name: str, **context: Any) -> str:
        """渲染模板为字符串"""
        return self.environment.get_template(template_name).render(**context)
