"""
Logging setup for SafeScore.

loguru is the only sink. stdlib loggers (uvicorn, aiohttp, asyncio) are
routed into it, and every record carries the component name bound by
``get_logger`` in ``extra["name"]``.
"""

from __future__ import annotations
import logging
import sys
from loguru import logger

# uvicorn, aiohttp 로거도 loguru로 흡수
_STDLIB_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "aiohttp", "asyncio")

class InterceptHandler(logging.Handler):
    """stdlib 로그 레코드를 loguru로 넘기는 핸들러"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).bind(name=record.name).log(
            level, record.getMessage()
        )

def _hook_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _STDLIB_LOGGERS:
        std = logging.getLogger(name)
        std.handlers = [InterceptHandler()]
        std.propagate = False

# 콘솔 포맷 (컴포넌트 이름 포함)
DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<cyan>{file}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

def setup_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """
    loguru 싱크를 구성합니다.

    Args:
        log_level: 최소 로그 레벨
        log_format: "console" (사람용 컬러 포맷) 또는 "json" (한 줄당 JSON 레코드)
    """
    logger.remove()
    logger.configure(extra={"name": "safescore"})
    if log_format.lower() == "json":
        logger.add(
            sink=sys.stdout,
            serialize=True,
            backtrace=False,
            diagnose=False,
            level=log_level.upper(),
        )
    else:
        logger.add(
            sink=lambda m: print(m, end=""),
            format=DEV_FORMAT,
            colorize=True,
            backtrace=True,
            diagnose=False,
            level=log_level.upper(),
            enqueue=False,
        )
    _hook_stdlib_logging()

def get_logger(name: str = "safescore", **ctx):
    """컴포넌트 이름과 선택적 컨텍스트를 바인딩한 logger 반환."""
    return logger.bind(name=name, **ctx)
