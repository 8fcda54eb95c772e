"""
폴러 설정

환경변수 기반 설정 관리.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """설정 오류 예외"""

    pass


@dataclass
class PollerConfig:
    """폴러 설정"""

    # 폴링 설정
    poll_interval_ms: int = 500  # 폴링 주기
    request_timeout_ms: int = 5000  # ProPresenter 요청 타임아웃

    @property
    def poll_interval(self) -> float:
        """폴링 주기 (초)"""
        return self.poll_interval_ms / 1000

    @property
    def request_timeout(self) -> float:
        """요청 타임아웃 (초)"""
        return self.request_timeout_ms / 1000

    @classmethod
    def from_env(cls) -> "PollerConfig":
        """환경변수에서 설정 로드"""
        return cls(
            poll_interval_ms=int(os.getenv("POLL_INTERVAL_MS", "500")),
            request_timeout_ms=int(os.getenv("POLL_TIMEOUT_MS", "5000")),
        )

    def validate(self, strict: bool = True) -> list[str]:
        """설정값 검증

        Args:
            strict: True면 오류 시 예외 발생, False면 경고만

        Returns:
            list[str]: 검증 경고/오류 메시지 목록

        Raises:
            ConfigurationError: strict=True이고 오류가 있을 때
        """
        errors = []
        warnings = []

        if self.poll_interval_ms < 50:
            errors.append(f"폴링 주기가 너무 짧음: {self.poll_interval_ms}ms")
        if self.request_timeout_ms <= 0:
            errors.append(f"잘못된 요청 타임아웃: {self.request_timeout_ms}ms")

        # 타임아웃이 주기보다 길면 진행 중인 요청 동안 틱이 건너뛰어짐
        if self.request_timeout_ms > self.poll_interval_ms:
            warnings.append(
                f"요청 타임아웃({self.request_timeout_ms}ms)이 폴링 주기"
                f"({self.poll_interval_ms}ms)보다 김 - 응답 지연 시 틱 건너뜀"
            )

        for warning in warnings:
            logger.debug(f"[Config] {warning}")

        if errors:
            for error in errors:
                logger.error(f"[Config] {error}")
            if strict:
                raise ConfigurationError(
                    f"설정 검증 실패: {len(errors)}개 오류\n" + "\n".join(errors)
                )

        return errors + warnings

    @classmethod
    def from_env_validated(cls, strict: bool = True) -> "PollerConfig":
        """환경변수에서 설정 로드 및 검증

        Raises:
            ConfigurationError: strict=True이고 오류가 있을 때
        """
        config = cls.from_env()
        config.validate(strict=strict)
        return config
