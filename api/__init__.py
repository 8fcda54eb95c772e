"""
Régie Virtuelle API 모듈

FastAPI 기반 설정 API와 디스플레이 WebSocket 채널을 제공합니다.
"""

from .server import app, create_app

__all__ = ["app", "create_app"]
