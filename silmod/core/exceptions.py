"""
异常定义与错误响应协商

客户端 Accept 头中声明接受 JSON 时返回结构化错误:
    {"status": "error", "message": "<去掉双引号的错误信息>"}
否则不做处理，交给框架默认的错误展示（HTML / 纯文本 / debug traceback）。
状态码始终保持原值。
"""

from __future__ import annotations

from typing import Any, Mapping

from fastapi.exception_handlers import (
    http_exception_handler,
    request_validation_exception_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.utils import is_body_allowed_for_status_code
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from silmod.config.constants import ErrorResponse


class SilModError(Exception):
    """SilMod 异常基类"""


class ServiceNotFoundError(SilModError, KeyError):
    """请求的服务未注册"""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Service [{self.name}] is not registered"


# ========== 错误响应协商 ==========


def accepts_json(accept: str | None) -> bool:
    """Accept 头是否声明接受 JSON（子串匹配，如 application/json、application/problem+json）"""
    if not accept:
        return False
    return ErrorResponse.JSON_MARKER in accept


def sanitize_message(message: Any) -> str:
    """去掉错误信息中的双引号，其余字符不做转义"""
    return str(message).replace('"', "")


def negotiate_error_response(
    request: Request,
    status_code: int,
    message: Any,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse | None:
    """
    根据请求的 Accept 头决定错误响应格式

    Returns:
        客户端接受 JSON 且该状态码允许响应体时返回结构化错误响应，
        否则返回 None（交给默认处理）
    """
    if not accepts_json(request.headers.get("accept")):
        return None
    # 1xx / 204 / 304 等状态码不允许携带响应体
    if not is_body_allowed_for_status_code(status_code):
        return None

    return JSONResponse(
        {"status": ErrorResponse.STATUS, "message": sanitize_message(message)},
        status_code=status_code,
        headers=dict(headers) if headers else None,
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        message = error.get("msg", "")
        parts.append(f"{location}: {message}" if location else str(message))
    return "; ".join(parts) or "Request validation failed"


class ExceptionHandlers:
    """
    全局异常处理器

    必须在加载任何模块之前注册，才能覆盖模块路由中抛出的异常
    """

    @staticmethod
    async def handle_http_exception(request: Request, exc: HTTPException) -> Response:
        """处理 HTTPException（404 / 405 / 路由主动抛出的错误等）"""
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        response = negotiate_error_response(
            request, exc.status_code, detail, headers=getattr(exc, "headers", None)
        )
        if response is not None:
            return response
        return await http_exception_handler(request, exc)

    @staticmethod
    async def handle_validation_exception(
        request: Request, exc: RequestValidationError
    ) -> Response:
        """处理请求参数校验失败（422）"""
        response = negotiate_error_response(request, 422, _format_validation_errors(exc))
        if response is not None:
            return response
        return await request_validation_exception_handler(request, exc)
