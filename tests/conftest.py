"""
Pytest 설정 및 공통 Fixture
"""

import asyncio
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.websockets import WebSocketState

from config.config_manager import ConfigStore
from lib.hub import BroadcastHub
from lib.types import CaptionState
from poller.config import PollerConfig
from poller.status_poller import StatusPoller


class FakeConnection:
    """테스트용 WebSocket 연결

    send_text로 받은 메시지를 JSON으로 디코딩해 보관합니다.
    stall_after개를 받은 뒤부터는 send_text가 끝나지 않습니다 (읽지 않는 피어).
    """

    def __init__(self, fail: bool = False, stall_after: int | None = None):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.fail = fail
        self.stall_after = stall_after
        self.raw: list[str] = []

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("Cannot call send once a close message has been sent")
        if self.stall_after is not None and len(self.raw) >= self.stall_after:
            await asyncio.Event().wait()
        self.raw.append(data)

    @property
    def messages(self) -> list[dict[str, Any]]:
        return [json.loads(data) for data in self.raw]

    def close(self) -> None:
        self.client_state = WebSocketState.DISCONNECTED


@pytest.fixture
def make_connection():
    """FakeConnection 생성 함수"""
    return FakeConnection


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """임시 설정 파일 경로 (파일은 아직 없음)"""
    return tmp_path / "config.json"


@pytest.fixture
def config_store(config_path: Path) -> ConfigStore:
    """기본값으로 로드된 ConfigStore"""
    store = ConfigStore(config_path)
    store.load()
    return store


@pytest.fixture
def caption() -> CaptionState:
    """빈 자막 상태"""
    return CaptionState()


@pytest.fixture
def hub(config_store: ConfigStore, caption: CaptionState) -> BroadcastHub:
    """테스트용 BroadcastHub"""
    return BroadcastHub(config_store, caption, send_timeout=0.05)


@pytest.fixture
def poller_config() -> PollerConfig:
    """테스트용 PollerConfig (짧은 주기)"""
    return PollerConfig(poll_interval_ms=50, request_timeout_ms=200)


@pytest.fixture
def mock_propresenter() -> MagicMock:
    """ProPresenterClient Mock (기본: 빈 응답)"""
    client = MagicMock()
    client.base_url = ""
    client.get_slide_status = AsyncMock(return_value=None)
    return client


@pytest.fixture
def client_factory(mock_propresenter: MagicMock) -> MagicMock:
    """mock_propresenter를 반환하는 클라이언트 팩토리"""

    def create(base_url: str, timeout: float) -> MagicMock:
        mock_propresenter.base_url = base_url
        mock_propresenter.timeout = timeout
        return mock_propresenter

    return MagicMock(side_effect=create)


@pytest.fixture
def poller(
    poller_config: PollerConfig,
    config_store: ConfigStore,
    hub: BroadcastHub,
    caption: CaptionState,
    client_factory: MagicMock,
) -> StatusPoller:
    """Mock 클라이언트를 사용하는 StatusPoller"""
    return StatusPoller(
        poller_config, config_store, hub, caption, client_factory=client_factory
    )

