"""
API 응답 스키마 정의

설정 쓰기/초기화 결과와 서버 상태를 반환하는 Pydantic 모델입니다.
"""

from typing import Any

from pydantic import BaseModel, Field


class ConfigWriteResponse(BaseModel):
    """설정 쓰기/초기화 응답

    POST /api/config, GET /api/config/reset 응답으로 반환됩니다.
    """

    success: bool = Field(default=True, description="성공 여부")
    config: dict[str, Any] = Field(..., description="병합 후 전체 설정 문서")


class ErrorResponse(BaseModel):
    """실패 응답"""

    success: bool = Field(default=False, description="성공 여부")
    error: str = Field(..., description="에러 메시지")


class StatusResponse(BaseModel):
    """서버 상태 응답

    GET /api/status 응답으로 반환됩니다. 부수 효과 없는 읽기 전용 투영입니다.
    """

    server: str = Field(default="running", description="서버 상태")
    propresenter_connected: bool = Field(..., description="ProPresenter 연결 여부")
    propresenter_api: str = Field(..., description="설정된 ProPresenter API 주소")
    clients_connected: int = Field(..., ge=0, description="연결된 디스플레이 수")
    last_text: str = Field(..., description="마지막 자막 텍스트")
    poller: dict[str, Any] = Field(
        default_factory=dict,
        description="폴링 통계 (요청/실패/건너뜀 카운터)",
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "server": "running",
                "propresenter_connected": True,
                "propresenter_api": "http://192.168.1.22:49196",
                "clients_connected": 2,
                "last_text": "Amazing grace",
                "poller": {"requests": 120, "skipped": 0, "dropped": 1},
            }
        }
    }
