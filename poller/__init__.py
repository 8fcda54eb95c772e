"""
ProPresenter 폴러 모듈

고정 주기 폴링 기반 자막 변경 감지.
"""

from .config import ConfigurationError, PollerConfig
from .status_poller import PollStats, StatusPoller

__all__ = [
    "ConfigurationError",
    "PollerConfig",
    "PollStats",
    "StatusPoller",
]
