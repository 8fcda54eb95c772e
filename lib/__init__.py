"""
regie_virtuelle 공통 라이브러리

ProPresenter API 클라이언트, 브로드캐스트 허브, 에러 분류, 공용 타입 제공.
"""

from .client import ProPresenterClient, extract_text
from .errors import (
    ErrorCategory,
    ErrorClassifier,
    ProPresenterError,
)
from .hub import BroadcastHub
from .types import (
    RECOGNIZED_FIELDS,
    CaptionState,
    ConfigEvent,
    DisplayConfig,
    TextUpdateEvent,
    default_config,
    now_ms,
)

__all__ = [
    # Client
    "ProPresenterClient",
    "extract_text",
    # Errors
    "ErrorCategory",
    "ErrorClassifier",
    "ProPresenterError",
    # Hub
    "BroadcastHub",
    # Types
    "RECOGNIZED_FIELDS",
    "CaptionState",
    "ConfigEvent",
    "DisplayConfig",
    "TextUpdateEvent",
    "default_config",
    "now_ms",
]
