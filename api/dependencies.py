"""
FastAPI 의존성 주입 모듈

ConfigStore, BroadcastHub, StatusPoller 등은 app.state에 보관하고
요청마다 꺼내 씁니다.
"""

import os
from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from config.config_manager import ConfigStore
    from lib.hub import BroadcastHub
    from poller.status_poller import StatusPoller


# ============================================================================
# 컴포넌트 의존성
# ============================================================================
def get_config_store(request: Request) -> "ConfigStore":
    """ConfigStore 의존성"""
    return request.app.state.config_store


def get_hub(request: Request) -> "BroadcastHub":
    """BroadcastHub 의존성"""
    return request.app.state.hub


def get_poller(request: Request) -> "StatusPoller":
    """StatusPoller 의존성"""
    return request.app.state.poller


# ============================================================================
# 환경 설정 의존성
# ============================================================================
class Settings:
    """앱 설정 클래스"""

    def __init__(self):
        self.env = os.getenv("ENV", "dev")
        self.debug = self.env == "dev"

        # API 서버 설정
        self.api_host = os.getenv("API_HOST", "0.0.0.0")
        self.api_port = int(os.getenv("API_PORT", "3000"))

        # 설정 파일 경로
        self.config_file = os.getenv("CONFIG_FILE", "config.json")

        # 디스플레이 전송 제한 시간 (초)
        self.ws_send_timeout = float(os.getenv("WS_SEND_TIMEOUT", "2.0"))


_settings: Settings | None = None


def get_settings() -> Settings:
    """앱 설정 의존성 (싱글톤)

    Returns:
        Settings 인스턴스
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
