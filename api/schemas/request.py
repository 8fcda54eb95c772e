"""
API 요청 스키마 정의

설정 편집기가 보내는 부분 설정 업데이트 Pydantic 모델입니다.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConfigUpdateRequest(BaseModel):
    """부분 설정 업데이트 스키마

    모든 필드 선택. 요청에 포함된 필드만 현재 설정에 덮어씁니다.
    알 수 없는 키는 무시됩니다.

    Example:
        ```python
        request = ConfigUpdateRequest(color="#000000", is_hidden=True)
        request.to_partial()  # {"color": "#000000", "is_hidden": True}
        ```
    """

    model_config = ConfigDict(
        extra="ignore",
        coerce_numbers_to_str=True,
        json_schema_extra={
            "example": {
                "color": "#000000",
                "size": "40",
                "title_message": "Bienvenue",
                "title_active": True,
            }
        },
    )

    color: str | None = Field(default=None, description="자막 배경색 (hex)")
    position: str | None = Field(default=None, description="자막 위치")
    size: str | None = Field(default=None, description="글자 크기")
    font: str | None = Field(default=None, description="글꼴")
    title_message: str | None = Field(default=None, description="타이틀 메시지")
    title_active: bool | None = Field(default=None, description="타이틀 표시 여부")
    title_timer: int | float | None = Field(default=None, description="타이틀 타이머 (초)")
    title_timer_active: bool | None = Field(default=None, description="타이틀 타이머 사용 여부")
    is_hidden: bool | None = Field(default=None, description="자막 숨김 여부")
    external_api: str | None = Field(default=None, description="ProPresenter API 주소")

    def to_partial(self) -> dict[str, Any]:
        """요청에 실제로 포함된 필드만 반환 (null 값 제외)"""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }
