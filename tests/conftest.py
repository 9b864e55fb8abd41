"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import os
import tempfile

import pytest

from factories import ATOM_FEED, SYDNEY
from safescore.core.models import Coordinates
from safescore.settings import Settings


@pytest.fixture
def sydney() -> Coordinates:
    """시드니 CBD 좌표"""
    return SYDNEY


@pytest.fixture
def atom_feed() -> str:
    """항목 하나짜리 Atom 피드"""
    return ATOM_FEED


@pytest.fixture
def temp_db_path():
    """임시 데이터베이스 파일 경로"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    # 테스트 후 파일 정리
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    return settings


# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )
