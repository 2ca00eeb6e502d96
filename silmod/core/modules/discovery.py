"""
模块发现

递归遍历模块根目录，按深度优先、后序（子目录先于父目录）的顺序收集模块入口文件。
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from silmod.config.constants import AUTOLOAD_FILENAME
from silmod.core.logger import logger
from silmod.core.modules.base import ModuleDescriptor


def _list_subdirectories(directory: Path) -> list[Path]:
    """
    列出直接子目录（跳过以 . 开头的隐藏目录），按名称排序

    目录不存在或不可读时返回空列表。
    """
    try:
        entries = list(os.scandir(directory))
    except FileNotFoundError:
        logger.debug(f"Module path [{directory}] does not exist, skipping")
        return []
    except NotADirectoryError:
        logger.debug(f"Module path [{directory}] is not a directory, skipping")
        return []
    except OSError as e:
        logger.warning(f"Module path [{directory}] is not readable, skipping: {e}")
        return []

    subdirectories = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        try:
            if entry.is_dir():
                subdirectories.append(Path(entry.path))
        except OSError:
            continue
    return sorted(subdirectories, key=lambda p: p.name)


def _walk(
    directory: Path,
    root: Path,
    entry_point: str,
    chain: frozenset[Path],
    found: list[ModuleDescriptor],
) -> None:
    try:
        resolved = directory.resolve()
    except OSError:
        resolved = directory

    # 符号链接成环时不再进入
    if resolved in chain:
        logger.warning(f"Module path [{directory}] links back to an ancestor, skipping")
        return
    chain = chain | {resolved}

    for subdirectory in _list_subdirectories(directory):
        _walk(subdirectory, root, entry_point, chain, found)

    candidate = directory / entry_point
    try:
        is_module = candidate.is_file()
    except OSError as e:
        logger.warning(f"Module path [{directory}] is not searchable, skipping: {e}")
        return

    if is_module:
        descriptor = ModuleDescriptor(entry_point=candidate.absolute(), root=root)
        found.append(descriptor)
        logger.debug(f"Module [{descriptor.name}] discovered: {descriptor.entry_point}")


def discover_modules(
    roots: Iterable[str | os.PathLike[str]],
    entry_point: str = AUTOLOAD_FILENAME,
) -> list[ModuleDescriptor]:
    """
    发现所有模块

    对每个根目录（保持调用方给定的顺序）：
    1. 先递归进入所有非隐藏子目录
    2. 再检查根目录自身是否包含入口文件

    不存在或不可读的根目录只会跳过该分支，不影响其他根目录。
    重复的根目录不做去重，会产生重复的描述符。

    Args:
        roots: 模块根目录列表
        entry_point: 入口文件名

    Returns:
        按发现顺序排列的模块描述符列表
    """
    found: list[ModuleDescriptor] = []
    for root in roots:
        root_path = Path(root).absolute()
        _walk(root_path, root_path, entry_point, frozenset(), found)

    logger.info(f"Module discovery finished: {len(found)} module(s) found")
    return found
