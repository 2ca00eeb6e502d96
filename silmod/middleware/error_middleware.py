"""
错误协商中间件（纯 ASGI 实现）
负责处理未被路由和异常处理器捕获的异常

注意：使用纯 ASGI middleware 而非 BaseHTTPMiddleware，
以避免 Starlette 已知的流式响应兼容性问题。
"""

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from silmod.config.constants import ErrorResponse
from silmod.core.exceptions import negotiate_error_response
from silmod.core.logger import logger


class ErrorNegotiationMiddleware:
    """
    未捕获异常的错误协商中间件

    - 客户端接受 JSON 且响应尚未开始发送: 返回 500 结构化错误
    - 其他情况: 重新抛出，由 Starlette 的 ServerErrorMiddleware 生成默认错误页
      （普通模式为 "Internal Server Error"，debug 模式为 traceback 页面）
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 入口点"""
        if scope["type"] != "http":
            # 非 HTTP 请求（如 WebSocket）直接透传
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started

            if message["type"] == "http.response.start":
                response_started = True

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            if response_started:
                raise

            request = Request(scope)
            response = negotiate_error_response(
                request, ErrorResponse.INTERNAL_STATUS_CODE, str(e)
            )
            if response is None:
                raise

            logger.opt(exception=e).error(
                f"Unhandled exception on {request.method} {request.url.path}"
            )
            await response(scope, receive, send)
