"""
日志系统

基于 loguru，导入时完成初始化；标准库 logging（uvicorn 等）的日志统一转发到 loguru。
"""

import inspect
import logging
import sys

from loguru import logger

from silmod.config import config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """将标准库 logging 记录转发给 loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # 找到真正发出日志的调用栈帧
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def parse_log_level(value: str | None, default: str = "INFO") -> str:
    """解析日志级别，取第一个单词；为空或无法识别时返回 default"""
    parts = (value or "").split()
    if not parts or parts[0].upper() not in LOG_LEVELS:
        return default
    return parts[0].upper()


def setup_logging(level: str | None = None) -> None:
    """配置 loguru 输出并接管标准库 logging"""
    log_level = parse_log_level(level or config.log_level)

    logger.remove()
    logger.add(sys.stderr, level=log_level, format=LOG_FORMAT, backtrace=False)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


setup_logging()

__all__ = ["logger", "setup_logging", "parse_log_level", "InterceptHandler"]
