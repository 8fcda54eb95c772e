"""
공용 타입 정의

디스플레이 설정 문서, 자막 상태, 푸시 이벤트 모델.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """현재 시각 (epoch 밀리초)"""
    return int(time.time() * 1000)


class DisplayConfig(BaseModel):
    """디스플레이 설정 문서

    config.json에 저장되는 완전한 설정 문서입니다.
    메모리 스냅샷은 항상 모든 필드를 포함합니다.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    color: str = Field(default="#802B36", description="자막 배경색 (hex)")
    position: str = Field(default="bas", description="자막 위치 (bas/haut)")
    size: str = Field(default="35", description="글자 크기 (숫자 문자열)")
    font: str = Field(default="Montserrat", description="글꼴")
    title_message: str = Field(default="", description="타이틀 메시지")
    title_active: bool = Field(default=False, description="타이틀 표시 여부")
    title_timer: int | float = Field(default=10, description="타이틀 타이머 (초)")
    title_timer_active: bool = Field(default=False, description="타이틀 타이머 사용 여부")
    is_hidden: bool = Field(default=False, description="자막 숨김 여부")
    external_api: str = Field(
        default="http://192.168.1.22:49196",
        description="ProPresenter API 주소",
    )


# 인식되는 설정 필드 (이 외의 키는 병합 시 무시)
RECOGNIZED_FIELDS: tuple[str, ...] = tuple(DisplayConfig.model_fields)


def default_config() -> dict[str, Any]:
    """하드코딩된 기본 설정 문서 (매번 새 복사본)"""
    return DisplayConfig().model_dump()


@dataclass
class CaptionState:
    """마지막으로 관측한 자막 텍스트와 변경 시각"""

    text: str = ""
    timestamp: int = field(default_factory=now_ms)

    def update(self, text: str) -> int:
        """텍스트 갱신 후 변경 시각 반환"""
        self.text = text
        self.timestamp = now_ms()
        return self.timestamp


class ConfigEvent(BaseModel):
    """설정 변경 푸시 이벤트"""

    type: Literal["config"] = "config"
    config: dict[str, Any]


class TextUpdateEvent(BaseModel):
    """자막 텍스트 변경 푸시 이벤트"""

    type: Literal["text_update"] = "text_update"
    text: str
    timestamp: int


PushEvent = ConfigEvent | TextUpdateEvent
