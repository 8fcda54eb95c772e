"""
API 라우터 모듈
"""

from .config import router as config_router
from .status import router as status_router
from .ws import router as ws_router

__all__ = ["config_router", "status_router", "ws_router"]
