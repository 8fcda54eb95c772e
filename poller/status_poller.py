"""
ProPresenter 상태 폴러

고정 주기 폴링 기반 자막 변경 감지:
- 현재 설정의 external_api로 /v1/status/slide 조회
- 텍스트가 바뀐 경우에만 text_update 브로드캐스트
- 연결 상태는 전환 시점(엣지)에만 로깅
- 이전 요청이 진행 중이면 틱 건너뜀 (중첩 요청 없음)
"""

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from lib.client import ProPresenterClient, extract_text
from lib.errors import ErrorCategory, ErrorClassifier, ProPresenterError
from lib.types import CaptionState, TextUpdateEvent, now_ms

from .config import PollerConfig

if TYPE_CHECKING:
    from config.config_manager import ConfigStore
    from lib.hub import BroadcastHub

logger = logging.getLogger(__name__)


@dataclass
class PollStats:
    """폴링 통계 (일시적 실패는 로그 대신 카운터로 노출)"""

    requests: int = 0
    successes: int = 0
    skipped: int = 0  # 진행 중 요청으로 건너뛴 틱
    dropped: int = 0  # 빈 응답 / 잘못된 JSON
    text_changes: int = 0
    failures: dict[str, int] = field(default_factory=dict)
    last_success_at: int | None = None
    last_failure_at: int | None = None
    last_error: str | None = None

    def record_success(self) -> None:
        self.successes += 1
        self.last_success_at = now_ms()

    def record_failure(self, category: ErrorCategory, message: str) -> None:
        self.failures[category.value] = self.failures.get(category.value, 0) + 1
        self.last_failure_at = now_ms()
        self.last_error = message

    def to_dict(self) -> dict[str, Any]:
        return {
            "requests": self.requests,
            "successes": self.successes,
            "skipped": self.skipped,
            "dropped": self.dropped,
            "text_changes": self.text_changes,
            "failures": dict(self.failures),
            "last_success_at": self.last_success_at,
            "last_failure_at": self.last_failure_at,
            "last_error": self.last_error,
        }


class StatusPoller:
    """ProPresenter 상태 폴러

    CaptionState의 유일한 변경 주체이며 연결 상태(connected)를 소유합니다.
    """

    def __init__(
        self,
        config: PollerConfig,
        config_store: "ConfigStore",
        hub: "BroadcastHub",
        caption: CaptionState,
        client_factory: Callable[..., ProPresenterClient] = ProPresenterClient,
    ):
        """
        Args:
            config: 폴러 설정
            config_store: external_api 조회용 설정 저장소
            hub: text_update 브로드캐스트 대상
            caption: 허브와 공유하는 자막 상태
            client_factory: ProPresenter 클라이언트 생성 함수
        """
        self.config = config
        self.config_store = config_store
        self.hub = hub
        self.caption = caption
        self.client_factory = client_factory

        self.connected = False
        self.running = False
        self.stats = PollStats()

        self._client: ProPresenterClient | None = None
        self._in_flight = False
        self._task: asyncio.Task | None = None
        self._tick_task: asyncio.Task | None = None

    @property
    def in_flight(self) -> bool:
        """요청 진행 중 여부"""
        return self._in_flight

    def _get_client(self) -> ProPresenterClient:
        """현재 external_api 기준 클라이언트 (주소 변경 시 재생성)"""
        base_url = self.config_store.external_api.rstrip("/")
        if self._client is None or self._client.base_url != base_url:
            self._client = self.client_factory(
                base_url, timeout=self.config.request_timeout
            )
            logger.info(f"[Poller] ProPresenter API: {base_url}")
        return self._client

    async def start(self) -> None:
        """폴링 루프 시작"""
        if self.running:
            return
        self.running = True
        self._task = asyncio.create_task(self._polling_loop())
        logger.info(
            f"[Poller] 폴링 시작: 주기 {self.config.poll_interval_ms}ms, "
            f"타임아웃 {self.config.request_timeout_ms}ms"
        )

    async def stop(self) -> None:
        """폴링 루프 종료 (진행 중 요청 취소)"""
        self.running = False
        for task in (self._task, self._tick_task):
            if task and not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
        self._task = None
        self._tick_task = None
        logger.info("[Poller] 폴링 종료")

    async def _polling_loop(self) -> None:
        """고정 주기 루프: 요청 소요 시간과 무관하게 주기마다 틱 발생"""
        while self.running:
            self.tick()
            await asyncio.sleep(self.config.poll_interval)

    def tick(self) -> bool:
        """틱 실행 (백그라운드 요청 시작)

        Returns:
            bool: 요청 시작 여부 (진행 중이면 False)
        """
        if self._in_flight:
            self.stats.skipped += 1
            logger.debug("[Poller] 이전 요청 진행 중 - 틱 건너뜀")
            return False

        self._in_flight = True
        self._tick_task = asyncio.create_task(self._run_tick())
        return True

    async def _run_tick(self) -> None:
        try:
            await self._poll()
        except Exception as e:
            logger.error(f"[Poller] 폴링 처리 중 에러: {e}", exc_info=True)
        finally:
            self._in_flight = False

    async def poll_once(self) -> TextUpdateEvent | None:
        """한 번 폴링

        Returns:
            TextUpdateEvent: 텍스트가 바뀌어 브로드캐스트한 이벤트
            None: 변경 없음, 실패, 무시된 응답, 진행 중 요청 존재
        """
        if self._in_flight:
            self.stats.skipped += 1
            return None

        self._in_flight = True
        try:
            return await self._poll()
        finally:
            self._in_flight = False

    async def _poll(self) -> TextUpdateEvent | None:
        self.stats.requests += 1
        try:
            status = await self._get_client().get_slide_status()
        except ProPresenterError as e:
            self.stats.record_failure(e.category, str(e))
            self._set_connected(False, reason=ErrorClassifier.format_message(e))
            return None

        if status is None:
            # 준비 안 됨/잘못된 응답 구분 불가 - 일시적 노이즈로 취급
            self.stats.dropped += 1
            logger.debug("[Poller] 빈 응답 또는 잘못된 JSON - 틱 무시")
            return None

        self.stats.record_success()
        self._set_connected(True)

        text = extract_text(status)
        if text == self.caption.text:
            return None

        timestamp = self.caption.update(text)
        self.stats.text_changes += 1
        event = TextUpdateEvent(text=text, timestamp=timestamp)
        await self.hub.broadcast(event)
        return event

    def _set_connected(self, connected: bool, reason: str | None = None) -> None:
        """연결 상태 전환 (엣지에서만 로깅)"""
        if self.connected == connected:
            return

        self.connected = connected
        if connected:
            logger.info(f"[Poller] ProPresenter 연결됨: {self.config_store.external_api}")
        else:
            logger.warning(f"[Poller] ProPresenter 연결 끊김: {reason}")
