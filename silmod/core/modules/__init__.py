"""
模块化系统核心

提供自注册扩展模块的管理，支持：
- 递归发现模块入口文件（子目录优先）
- 按发现顺序逐个激活，每个入口文件只执行一次
- 模块通过宿主上下文注册路由、模板命名空间和服务
"""

from silmod.core.modules.activator import ModuleActivator
from silmod.core.modules.base import ModuleDescriptor
from silmod.core.modules.discovery import discover_modules

__all__ = [
    "ModuleDescriptor",
    "ModuleActivator",
    "discover_modules",
]
