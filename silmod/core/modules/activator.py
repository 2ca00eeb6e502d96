"""
模块激活器

负责按发现顺序逐个加载模块入口文件，并把宿主上下文交给模块完成自注册
"""

from __future__ import annotations

import hashlib
import importlib.util
import re
import sys
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

from silmod.config.constants import MODULE_NAMESPACE_PREFIX
from silmod.core.logger import logger
from silmod.core.modules.base import ModuleDescriptor

if TYPE_CHECKING:
    from silmod.core.host import HostContext


def _module_name_for(descriptor: ModuleDescriptor, path: Path) -> str:
    """由入口文件路径生成进程内唯一的模块名"""
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
    safe_name = re.sub(r"\W", "_", descriptor.name)
    return f"{MODULE_NAMESPACE_PREFIX}_{safe_name}_{digest}"


class ModuleActivator:
    """
    模块激活器

    职责：
    - 加载入口文件，注入 `host` 变量，并调用模块的 `register(host)`（如果定义）
    - 保证每个入口文件最多执行一次
    - 激活失败时原样抛出异常，中止后续模块的激活
    """

    def __init__(self, host: HostContext) -> None:
        self.host = host
        self._activated: set[Path] = set()

    def is_activated(self, descriptor: ModuleDescriptor) -> bool:
        """入口文件是否已经执行过"""
        return descriptor.entry_point.resolve() in self._activated

    def activate(self, descriptor: ModuleDescriptor) -> bool:
        """
        激活单个模块

        Returns:
            True 表示本次执行了入口文件，False 表示此前已激活而跳过
        """
        path = descriptor.entry_point.resolve()
        if path in self._activated:
            logger.debug(f"Module [{descriptor.name}] already activated, skipping: {path}")
            return False

        module_name = _module_name_for(descriptor, path)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load module entry point: {path}")

        module: ModuleType = importlib.util.module_from_spec(spec)
        # 模块可直接使用全局变量 host 完成注册
        module.host = self.host  # type: ignore[attr-defined]
        sys.modules[module_name] = module

        try:
            spec.loader.exec_module(module)
            register = getattr(module, "register", None)
            if callable(register):
                register(self.host)
        except Exception:
            sys.modules.pop(module_name, None)
            logger.exception(f"Module [{descriptor.name}] activation failed: {path}")
            raise

        self._activated.add(path)
        self.host.modules.append(descriptor)
        logger.info(f"Module [{descriptor.name}] activated: {path}")
        return True

    def activate_all(self, descriptors: Iterable[ModuleDescriptor]) -> list[ModuleDescriptor]:
        """
        按顺序激活所有模块

        任一模块失败时异常直接向上传播，其后的模块不会被激活。

        Returns:
            本次实际激活的模块列表
        """
        activated = []
        for descriptor in descriptors:
            if self.activate(descriptor):
                activated.append(descriptor)
        return activated
