"""
에러 분류 시스템

ProPresenter 폴링 실패를 카테고리별로 분류하여 폴링 통계에 활용.
"""

from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    """에러 카테고리"""

    TIMEOUT = "timeout"  # 응답 시간 초과
    CONNECTION = "connection"  # 연결 거부, DNS 실패 등
    HTTP_STATUS = "http_status"  # 2xx 이외 응답
    INVALID_URL = "invalid_url"  # 잘못된 external_api 설정
    UNKNOWN = "unknown"


class ProPresenterError(Exception):
    """ProPresenter 통신 에러"""

    def __init__(
        self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN
    ):
        super().__init__(message)
        self.category = category


class ErrorClassifier:
    """에러 분류기"""

    @classmethod
    def classify(cls, error: Exception) -> ErrorCategory:
        """에러를 분류하여 카테고리 반환

        Args:
            error: 분류할 예외 객체

        Returns:
            ErrorCategory: 에러 카테고리
        """
        if isinstance(error, ProPresenterError):
            return error.category

        # httpx 예외 계층 기반 분류
        if isinstance(error, httpx.TimeoutException):
            return ErrorCategory.TIMEOUT
        if isinstance(error, httpx.HTTPStatusError):
            return ErrorCategory.HTTP_STATUS
        if isinstance(error, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
            return ErrorCategory.INVALID_URL
        if isinstance(error, httpx.TransportError):
            return ErrorCategory.CONNECTION
        return ErrorCategory.UNKNOWN

    @classmethod
    def format_message(cls, error: Exception) -> str:
        """에러 메시지 포맷팅

        Args:
            error: 포맷팅할 예외 객체

        Returns:
            str: 카테고리 라벨과 원인 예외 타입이 포함된 에러 메시지
        """
        category = cls.classify(error)
        source = error.__cause__ or error
        label = {
            ErrorCategory.TIMEOUT: "[타임아웃]",
            ErrorCategory.CONNECTION: "[연결 실패]",
            ErrorCategory.HTTP_STATUS: "[HTTP 오류]",
            ErrorCategory.INVALID_URL: "[URL 오류]",
            ErrorCategory.UNKNOWN: "[분류되지 않음]",
        }

        return f"{label[category]} {type(source).__name__}: {error}"
