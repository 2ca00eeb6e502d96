"""
模块基础定义

包含模块描述符等数据结构
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ModuleDescriptor:
    """
    模块描述符 - 纯数据描述

    一个目录中存在入口文件（autoload.py）即构成一个模块。
    每次进程启动时发现一次，最多激活一次，进程生命周期内不会销毁。
    """

    entry_point: Path  # 入口文件绝对路径: /srv/modules/blog/autoload.py
    root: Path  # 发现该模块时所在的配置根目录

    @property
    def directory(self) -> Path:
        """模块所在目录"""
        return self.entry_point.parent

    @property
    def name(self) -> str:
        """模块名称（取目录名）"""
        return self.directory.name
