"""
StatusPoller 테스트

ProPresenter 클라이언트를 Mock으로 대체하여 변경 감지, 연결 상태 엣지,
중첩 요청 방지를 검증합니다.
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.config_manager import ConfigStore
from lib.errors import ErrorCategory, ProPresenterError
from lib.hub import BroadcastHub
from lib.types import CaptionState
from poller.status_poller import StatusPoller
from tests.sample_data import slide_status


def connection_error() -> ProPresenterError:
    return ProPresenterError("ProPresenter 연결 실패: refused", ErrorCategory.CONNECTION)


class TestChangeDetection:
    """텍스트 변경 감지 테스트"""

    @pytest.mark.asyncio
    async def test_same_text_broadcast_once(
        self,
        poller: StatusPoller,
        mock_propresenter: MagicMock,
        hub: BroadcastHub,
        make_connection,
    ):
        """같은 텍스트 두 번 → text_update 한 번"""
        connection = make_connection()
        await hub.register(connection)
        mock_propresenter.get_slide_status.return_value = slide_status("Hello")

        first = await poller.poll_once()
        second = await poller.poll_once()

        assert first is not None and first.text == "Hello"
        assert second is None
        updates = [m for m in connection.messages[2:] if m["type"] == "text_update"]
        assert [m["text"] for m in updates] == ["Hello"]

    @pytest.mark.asyncio
    async def test_each_change_broadcast(
        self, poller: StatusPoller, mock_propresenter: MagicMock, caption: CaptionState
    ):
        """A → A → B → A : 변경 3회"""
        mock_propresenter.get_slide_status.side_effect = [
            slide_status("A"),
            slide_status("A"),
            slide_status("B"),
            slide_status("A"),
        ]

        events = [await poller.poll_once() for _ in range(4)]

        assert [e.text if e else None for e in events] == ["A", None, "B", "A"]
        assert caption.text == "A"
        assert poller.stats.text_changes == 3

    @pytest.mark.asyncio
    async def test_missing_current_text_is_empty(
        self, poller: StatusPoller, mock_propresenter: MagicMock, caption: CaptionState
    ):
        """current.text 없음 → 빈 문자열 (초기값과 같으므로 이벤트 없음)"""
        mock_propresenter.get_slide_status.return_value = slide_status(None)

        assert await poller.poll_once() is None
        assert caption.text == ""
        assert poller.connected is True

    @pytest.mark.asyncio
    async def test_text_cleared_is_a_change(
        self, poller: StatusPoller, mock_propresenter: MagicMock
    ):
        """텍스트 → 빈 문자열도 변경"""
        mock_propresenter.get_slide_status.side_effect = [
            slide_status("Amen"),
            {"current": {"text": ""}},
        ]

        await poller.poll_once()
        event = await poller.poll_once()

        assert event is not None
        assert event.text == ""

    @pytest.mark.asyncio
    async def test_change_updates_caption_timestamp(
        self, poller: StatusPoller, mock_propresenter: MagicMock, caption: CaptionState
    ):
        """변경 시 CaptionState 값과 시각 갱신"""
        caption.timestamp = 0
        mock_propresenter.get_slide_status.return_value = slide_status("Gloria")

        event = await poller.poll_once()

        assert caption.text == "Gloria"
        assert caption.timestamp == event.timestamp > 0


class TestDroppedResponses:
    """빈 응답/잘못된 JSON 처리 테스트"""

    @pytest.mark.asyncio
    async def test_empty_body_is_ignored(
        self,
        poller: StatusPoller,
        mock_propresenter: MagicMock,
        hub: BroadcastHub,
        make_connection,
    ):
        """빈 응답 → 이벤트 없음, 연결 상태 변화 없음"""
        connection = make_connection()
        await hub.register(connection)
        mock_propresenter.get_slide_status.return_value = None

        assert await poller.poll_once() is None
        assert poller.connected is False
        assert len(connection.raw) == 2
        assert poller.stats.dropped == 1

    @pytest.mark.asyncio
    async def test_empty_body_keeps_connected_state(
        self, poller: StatusPoller, mock_propresenter: MagicMock
    ):
        """연결된 상태에서 빈 응답 → 연결 유지"""
        mock_propresenter.get_slide_status.side_effect = [slide_status("A"), None]

        await poller.poll_once()
        await poller.poll_once()

        assert poller.connected is True


class TestConnectivity:
    """연결 상태 엣지 테스트"""

    @pytest.mark.asyncio
    async def test_outage_and_recovery(
        self,
        poller: StatusPoller,
        mock_propresenter: MagicMock,
        caplog: pytest.LogCaptureFixture,
    ):
        """연결 → 실패 여러 번 → 복구: 전환 시점에만 로깅"""
        mock_propresenter.get_slide_status.side_effect = [
            slide_status("A"),
            connection_error(),
            connection_error(),
            connection_error(),
            slide_status("A"),
            slide_status("A"),
        ]

        states = []
        with caplog.at_level(logging.INFO, logger="poller.status_poller"):
            for _ in range(6):
                await poller.poll_once()
                states.append(poller.connected)

        assert states == [True, False, False, False, True, True]
        edges = [r for r in caplog.records if "연결됨" in r.message or "연결 끊김" in r.message]
        assert len(edges) == 3
        assert "[연결 실패] ProPresenterError" in edges[1].message
        assert poller.stats.failures == {"connection": 3}

    @pytest.mark.asyncio
    async def test_failure_while_disconnected_is_silent(
        self,
        poller: StatusPoller,
        mock_propresenter: MagicMock,
        caplog: pytest.LogCaptureFixture,
    ):
        """처음부터 실패 → 전환 없음, 경고 로그 없음"""
        mock_propresenter.get_slide_status.side_effect = ProPresenterError(
            "HTTP 503", ErrorCategory.HTTP_STATUS
        )

        with caplog.at_level(logging.WARNING, logger="poller.status_poller"):
            await poller.poll_once()
            await poller.poll_once()

        assert poller.connected is False
        assert caplog.records == []
        assert poller.stats.failures == {"http_status": 2}
        assert poller.stats.last_error == "HTTP 503"

    @pytest.mark.asyncio
    async def test_failure_does_not_broadcast(
        self,
        poller: StatusPoller,
        mock_propresenter: MagicMock,
        hub: BroadcastHub,
        make_connection,
    ):
        """연결 상태 변화는 푸시하지 않음"""
        connection = make_connection()
        await hub.register(connection)
        mock_propresenter.get_slide_status.side_effect = [
            slide_status(""),
            connection_error(),
        ]

        await poller.poll_once()
        await poller.poll_once()

        assert len(connection.raw) == 2


class TestOverlapGuard:
    """중첩 요청 방지 테스트"""

    @pytest.mark.asyncio
    async def test_tick_skipped_while_in_flight(
        self, poller: StatusPoller, mock_propresenter: MagicMock
    ):
        """진행 중 요청이 있으면 틱 건너뜀"""
        release = asyncio.Event()

        async def slow_status():
            await release.wait()
            return slide_status("Slow")

        mock_propresenter.get_slide_status = AsyncMock(side_effect=slow_status)

        assert poller.tick() is True
        await asyncio.sleep(0)
        assert poller.in_flight is True

        assert poller.tick() is False
        assert poller.tick() is False
        assert await poller.poll_once() is None

        release.set()
        await poller._tick_task

        assert poller.in_flight is False
        assert mock_propresenter.get_slide_status.await_count == 1
        assert poller.stats.skipped == 3
        assert poller.caption.text == "Slow"

    @pytest.mark.asyncio
    async def test_guard_released_after_failure(
        self, poller: StatusPoller, mock_propresenter: MagicMock
    ):
        """실패 후에도 가드 해제"""
        mock_propresenter.get_slide_status.side_effect = connection_error()

        await poller.poll_once()

        assert poller.in_flight is False
        assert poller.tick() is True
        await poller._tick_task


    @pytest.mark.asyncio
    async def test_stalled_subscriber_does_not_stall_polling(
        self,
        poller: StatusPoller,
        mock_propresenter: MagicMock,
        hub: BroadcastHub,
        make_connection,
    ):
        """읽지 않는 디스플레이가 있어도 폴링 계속, 가드 해제"""
        await hub.register(make_connection(stall_after=2))
        mock_propresenter.get_slide_status.side_effect = [
            slide_status("A"),
            slide_status("B"),
        ]

        first = await asyncio.wait_for(poller.poll_once(), timeout=1.0)
        second = await asyncio.wait_for(poller.poll_once(), timeout=1.0)

        assert [first.text, second.text] == ["A", "B"]
        assert poller.in_flight is False
        assert hub.client_count == 0


class TestClientSelection:
    """external_api 변경 반영 테스트"""

    @pytest.mark.asyncio
    async def test_client_rebuilt_on_url_change(
        self,
        poller: StatusPoller,
        config_store: ConfigStore,
        client_factory: MagicMock,
        mock_propresenter: MagicMock,
    ):
        """설정의 external_api가 바뀌면 다음 틱부터 새 주소 사용"""
        await poller.poll_once()
        await poller.poll_once()
        assert client_factory.call_count == 1
        assert mock_propresenter.base_url == "http://192.168.1.22:49196"

        config_store.merge({"external_api": "http://10.0.0.9:1025/"})
        await poller.poll_once()

        assert client_factory.call_count == 2
        assert mock_propresenter.base_url == "http://10.0.0.9:1025"
        assert mock_propresenter.timeout == poller.config.request_timeout


class TestLifecycle:
    """폴링 루프 시작/종료 테스트"""

    @pytest.mark.asyncio
    async def test_start_and_stop(
        self, poller: StatusPoller, mock_propresenter: MagicMock, caption: CaptionState
    ):
        """루프가 주기적으로 폴링하고 stop으로 종료"""
        mock_propresenter.get_slide_status.return_value = slide_status("Live")

        await poller.start()
        await asyncio.sleep(0.12)
        await poller.stop()

        assert poller.running is False
        assert mock_propresenter.get_slide_status.await_count >= 2
        assert caption.text == "Live"
        assert poller.stats.text_changes == 1

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, poller: StatusPoller):
        """중복 start 무시"""
        await poller.start()
        task = poller._task
        await poller.start()

        assert poller._task is task
        await poller.stop()
