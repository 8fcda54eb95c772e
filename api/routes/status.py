"""
상태 API 라우터

ProPresenter 연결 상태, 연결된 디스플레이 수, 마지막 자막을 반환합니다.
"""

from fastapi import APIRouter, Depends

from config.config_manager import ConfigStore
from lib.hub import BroadcastHub
from poller.status_poller import StatusPoller

from ..dependencies import get_config_store, get_hub, get_poller
from ..schemas.response import StatusResponse

router = APIRouter(tags=["Status"])


@router.get(
    "/api/status",
    response_model=StatusResponse,
    summary="서버 상태",
    description="ProPresenter 연결 여부, 연결된 클라이언트 수, 마지막 자막을 반환합니다.",
)
async def get_status(
    config_store: ConfigStore = Depends(get_config_store),
    hub: BroadcastHub = Depends(get_hub),
    poller: StatusPoller = Depends(get_poller),
) -> StatusResponse:
    """서버 상태 조회 (부수 효과 없음)"""
    return StatusResponse(
        server="running",
        propresenter_connected=poller.connected,
        propresenter_api=config_store.external_api,
        clients_connected=hub.client_count,
        last_text=poller.caption.text,
        poller=poller.stats.to_dict(),
    )


@router.get(
    "/health/live",
    summary="Liveness 체크",
    description="서버가 살아있는지 확인합니다.",
)
async def liveness() -> dict[str, str]:
    """Liveness 체크 (경량)"""
    return {"status": "ok"}
