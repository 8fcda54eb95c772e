"""
ProPresenter API 클라이언트 (비동기)

ProPresenter REST API 조회 규칙:
- 요청마다 httpx.AsyncClient 생성
- 짧은 타임아웃 (폴링 주기 대응)
- 빈 응답/잘못된 JSON은 예외 대신 None 반환
"""

import json
import logging
from typing import Any

import httpx

from .errors import ErrorCategory, ErrorClassifier, ProPresenterError

logger = logging.getLogger(__name__)

SLIDE_STATUS_PATH = "/v1/status/slide"


class ProPresenterClient:
    """비동기 ProPresenter API 클라이언트

    Note: 폴링 중 external_api 설정이 바뀔 수 있으므로
    httpx.AsyncClient를 캐싱하지 않음 (매 요청마다 새 클라이언트 생성)
    """

    def __init__(self, base_url: str, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _create_client(self) -> httpx.AsyncClient:
        """새로운 HTTP 클라이언트 생성 (매 요청마다)"""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
        )

    async def get_slide_status(self) -> dict[str, Any] | None:
        """현재 슬라이드 상태 조회

        Returns:
            dict: 슬라이드 상태 JSON 객체
            None: 빈 응답 또는 JSON 객체가 아닌 응답 (일시적 노이즈)

        Raises:
            ProPresenterError: 연결 실패, 타임아웃, 2xx 이외 응답
        """
        try:
            async with self._create_client() as client:
                response = await client.get(SLIDE_STATUS_PATH)
                response.raise_for_status()
                body = response.text
        except httpx.HTTPStatusError as e:
            raise ProPresenterError(
                f"HTTP {e.response.status_code}", ErrorCategory.HTTP_STATUS
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProPresenterError(
                f"ProPresenter 연결 실패: {e}", ErrorClassifier.classify(e)
            ) from e

        if not body or not body.strip():
            return None

        try:
            data = json.loads(body)
        except ValueError:
            return None

        if not isinstance(data, dict):
            return None
        return data


def extract_text(status: dict[str, Any]) -> str:
    """슬라이드 상태에서 current.text 추출 (없으면 빈 문자열)"""
    current = status.get("current")
    if not isinstance(current, dict):
        return ""
    text = current.get("text")
    return text if isinstance(text, str) else ""
