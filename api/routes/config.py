"""
설정 API 라우터

설정 조회, 부분 업데이트, 초기화를 제공합니다.
쓰기 성공 시 연결된 모든 디스플레이에 config 이벤트를 브로드캐스트합니다.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from config.config_manager import ConfigStore
from lib.hub import BroadcastHub
from lib.types import ConfigEvent

from ..dependencies import get_config_store, get_hub
from ..schemas.request import ConfigUpdateRequest
from ..schemas.response import ConfigWriteResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/config",
    tags=["Config"],
)


@router.get(
    "",
    summary="설정 조회",
    description="현재 설정 스냅샷을 그대로 반환합니다.",
)
async def read_config(
    config_store: ConfigStore = Depends(get_config_store),
) -> dict[str, Any]:
    """현재 설정 조회"""
    return config_store.snapshot


@router.post(
    "",
    response_model=ConfigWriteResponse,
    responses={500: {"model": ErrorResponse}},
    summary="설정 업데이트",
    description="부분 설정을 현재 설정에 병합하고 저장한 뒤 브로드캐스트합니다.",
)
async def write_config(
    update: ConfigUpdateRequest,
    config_store: ConfigStore = Depends(get_config_store),
    hub: BroadcastHub = Depends(get_hub),
) -> ConfigWriteResponse | JSONResponse:
    """설정 부분 업데이트

    저장 실패 시 메모리 스냅샷을 이전 값으로 되돌리고 브로드캐스트하지 않습니다.

    Returns:
        ConfigWriteResponse: 병합된 전체 설정
    """
    partial = update.to_partial()
    logger.info(f"[API] 설정 업데이트: {sorted(partial)}")

    async with config_store.lock:
        previous = config_store.snapshot
        merged = config_store.merge(partial)

        if not config_store.save(merged):
            config_store.replace(previous)
            logger.error("[API] 설정 저장 실패 - 이전 설정으로 복원")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=ErrorResponse(error="Failed to save configuration").model_dump(),
            )

        await hub.broadcast(ConfigEvent(config=merged))

    return ConfigWriteResponse(config=merged)


@router.api_route(
    "/reset",
    methods=["GET", "POST"],
    response_model=ConfigWriteResponse,
    summary="설정 초기화",
    description="기본 설정으로 되돌리고 저장한 뒤 브로드캐스트합니다.",
)
async def reset_config(
    config_store: ConfigStore = Depends(get_config_store),
    hub: BroadcastHub = Depends(get_hub),
) -> ConfigWriteResponse:
    """설정 초기화

    저장 실패는 로그로만 남기고 응답은 성공과 동일합니다.
    """
    logger.info("[API] 설정 초기화")

    async with config_store.lock:
        defaults = config_store.reset()
        if not config_store.save(defaults):
            logger.warning("[API] 초기화된 설정 저장 실패 - 메모리 설정만 적용")
        await hub.broadcast(ConfigEvent(config=defaults))

    return ConfigWriteResponse(config=defaults)
