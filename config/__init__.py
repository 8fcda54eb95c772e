"""
설정 관리 모듈

ConfigStore를 통해 디스플레이 설정 스냅샷을 관리하고 영속화합니다.
"""

from .config_manager import ConfigStore

__all__ = ["ConfigStore"]
