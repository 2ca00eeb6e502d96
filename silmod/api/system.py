"""系统 API（健康检查、已激活模块列表）"""

from typing import List

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter(tags=["System"])


class ModuleInfo(BaseModel):
    """已激活模块简要信息"""

    name: str
    path: str
    root: str


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.get("/api/modules", response_model=List[ModuleInfo])
async def list_modules(request: Request):
    """
    获取已激活模块列表

    按激活顺序返回。

    **返回字段**:
    - `name`: 模块名称（目录名）
    - `path`: 入口文件路径
    - `root`: 所属模块根目录
    """
    host = request.app.state.host
    return [
        ModuleInfo(
            name=descriptor.name,
            path=str(descriptor.entry_point),
            root=str(descriptor.root),
        )
        for descriptor in host.modules
    ]
