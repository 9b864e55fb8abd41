"""
HTTP server runner for SafeScore.

This module provides a simple way to run the FastAPI server
with the assessment pipeline wired in.
"""

from typing import Optional

import uvicorn
from fastapi import FastAPI

from safescore.settings import Settings
from safescore.observability.logging_setup import get_logger

log = get_logger("safescore.observability")

async def serve(app: FastAPI, settings: Settings, host: str = "0.0.0.0",
                port: Optional[int] = None) -> None:
    """
    HTTP 서버를 실행합니다.

    Args:
        app: FastAPI 애플리케이션
        settings: 애플리케이션 설정
        host: 바인딩할 호스트
        port: 바인딩할 포트 (None이면 설정에서 가져옴)
    """
    if port is None:
        port = settings.observability.http_port

    log.info(f"HTTP 서버 시작 중 host:{host} port:{port}")

    server = uvicorn.Server(uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=settings.observability.log_level.lower(),
        access_log=True,
    ))
    await server.serve()
