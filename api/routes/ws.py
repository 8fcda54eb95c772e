"""
디스플레이 WebSocket 라우터

연결 즉시 현재 설정과 마지막 자막을 받고, 이후 변경 이벤트를 수신합니다.
클라이언트 → 서버 메시지는 정의되어 있지 않으므로 무시합니다.
"""

from fastapi import APIRouter, WebSocket

from lib.hub import BroadcastHub

router = APIRouter(tags=["Display"])


@router.websocket("/ws")
@router.websocket("/")
async def display_socket(websocket: WebSocket) -> None:
    """디스플레이 구독 채널"""
    hub: BroadcastHub = websocket.app.state.hub

    await websocket.accept()
    if not await hub.register(websocket):
        return

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        hub.unregister(websocket)
