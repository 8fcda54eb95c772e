"""
WebSocket 브로드캐스트 허브

연결된 디스플레이 클라이언트 집합을 관리하고 이벤트를 팬아웃합니다.

- register: 신규 연결에 현재 설정 → 마지막 자막 순서로 캐치업 푸시
- broadcast: 이벤트를 한 번 직렬화하여 열린 연결 전체에 전송
- 전송마다 제한 시간 적용, 시간 초과/실패한 연결은 제거
- 응답 확인/재전송 없음 (다음 변경 또는 재연결 시 수렴)
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel
from starlette.websockets import WebSocketState

from .types import CaptionState, ConfigEvent, TextUpdateEvent

if TYPE_CHECKING:
    from config.config_manager import ConfigStore

logger = logging.getLogger(__name__)

SEND_TIMEOUT = 2.0  # 연결당 전송 제한 시간 (초)


class Connection(Protocol):
    """구독자 연결 (starlette WebSocket 호환)"""

    client_state: WebSocketState
    application_state: WebSocketState

    async def send_text(self, data: str) -> None: ...


def is_open(connection: Any) -> bool:
    """전송 가능한 연결인지 확인"""
    return (
        connection.client_state == WebSocketState.CONNECTED
        and connection.application_state == WebSocketState.CONNECTED
    )


class BroadcastHub:
    """구독자 연결 집합 및 이벤트 팬아웃

    register와 broadcast는 같은 락으로 직렬화됩니다.
    신규 연결은 캐치업 두 메시지를 받기 전에 다른 브로드캐스트를 받지 않습니다.
    모든 전송은 send_timeout 안에 끝나므로 락 점유 시간도 그 안으로 제한됩니다.
    """

    def __init__(
        self,
        config_store: "ConfigStore",
        caption: CaptionState,
        send_timeout: float = SEND_TIMEOUT,
    ):
        """
        Args:
            config_store: 현재 설정 스냅샷 제공
            caption: 폴러와 공유하는 자막 상태
            send_timeout: 연결당 전송 제한 시간 (초)
        """
        self.config_store = config_store
        self.caption = caption
        self.send_timeout = send_timeout
        self._connections: set[Connection] = set()
        self._lock = asyncio.Lock()

    @property
    def client_count(self) -> int:
        """현재 연결된 클라이언트 수"""
        return len(self._connections)

    def __contains__(self, connection: object) -> bool:
        return connection in self._connections

    async def _send(self, connection: Connection, data: str) -> bool:
        """제한 시간 내 전송 (실패 시 연결 제거)"""
        try:
            await asyncio.wait_for(connection.send_text(data), self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"[Hub] 전송 시간 초과({self.send_timeout}s), 연결 제거")
        except Exception as e:
            logger.warning(f"[Hub] 전송 실패, 연결 제거: {e}")

        self._connections.discard(connection)
        return False

    async def register(self, connection: Connection) -> bool:
        """연결 등록 및 캐치업 푸시

        Args:
            connection: accept 완료된 연결

        Returns:
            bool: 캐치업 전송 성공 여부 (실패 시 연결은 제거됨)
        """
        async with self._lock:
            self._connections.add(connection)
            logger.info(f"[Hub] 클라이언트 연결 (총 {self.client_count}개)")

            catch_up = (
                ConfigEvent(config=self.config_store.snapshot),
                TextUpdateEvent(
                    text=self.caption.text, timestamp=self.caption.timestamp
                ),
            )
            for event in catch_up:
                if not await self._send(connection, event.model_dump_json()):
                    return False

        return True

    def unregister(self, connection: Connection) -> None:
        """연결 제거 (이미 없으면 무시)"""
        if connection in self._connections:
            self._connections.discard(connection)
            logger.info(f"[Hub] 클라이언트 연결 해제 (총 {self.client_count}개)")

    async def broadcast(self, event: BaseModel) -> int:
        """열린 연결 전체에 이벤트 동시 전송

        Args:
            event: ConfigEvent 또는 TextUpdateEvent

        Returns:
            int: 전송 성공한 연결 수
        """
        data = event.model_dump_json()

        async with self._lock:
            # 전송 중 unregister가 일어나도 안전하도록 스냅샷 순회
            targets = []
            for connection in tuple(self._connections):
                if is_open(connection):
                    targets.append(connection)
                else:
                    self._connections.discard(connection)
                    logger.debug("[Hub] 닫힌 연결 제거")

            results = await asyncio.gather(
                *(self._send(connection, data) for connection in targets)
            )

        delivered = sum(results)
        logger.debug(
            f"[Hub] 브로드캐스트 {getattr(event, 'type', '?')}: {delivered}개 전송"
        )
        return delivered
