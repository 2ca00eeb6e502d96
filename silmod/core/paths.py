"""路径参数归一化"""

from __future__ import annotations

import os
from collections.abc import Sequence
from typing import Any


def to_path_list(value: Any) -> list[Any]:
    """
    将单个路径或路径序列统一转换为列表

    - list 原样返回（同一对象）
    - 其他序列（tuple 等）按原顺序转换为 list
    - 标量（str / bytes / PathLike 等）包装为单元素列表

    对已归一化的结果再次调用不会产生变化。
    """
    if isinstance(value, list):
        return value
    # str / bytes 虽然是序列，但在这里表示单个路径
    if isinstance(value, (str, bytes, os.PathLike)):
        return [value]
    if isinstance(value, Sequence):
        return list(value)
    return [value]
