"""
디스플레이 설정 저장소

메모리의 설정 스냅샷을 단일 진실 공급원으로 유지하고 JSON 파일로 영속화합니다.

설계 원칙:
- 스냅샷은 항상 완전한 문서 (인식되는 모든 필드 포함)
- 부분 업데이트는 직전 스냅샷 기준 얕은 병합 (기본값 기준 아님)
- 인식되지 않는 키는 무시
- 로드 실패는 기본값으로 복구 (예외 없음)

사용법:
    ```python
    store = ConfigStore("config.json")
    store.load()

    async with store.lock:
        previous = store.snapshot
        merged = store.merge({"color": "#000000"})
        if not store.save(merged):
            store.replace(previous)
    ```
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from lib.types import RECOGNIZED_FIELDS, DisplayConfig, default_config

logger = logging.getLogger(__name__)


class ConfigStore:
    """설정 저장소

    쓰기 경로 (merge → save → broadcast)는 lock으로 직렬화합니다.
    """

    def __init__(self, config_path: str | Path = "config.json"):
        """
        Args:
            config_path: 영속화할 JSON 파일 경로
        """
        self.config_path = Path(config_path)
        self._config: DisplayConfig = DisplayConfig()
        self._lock = asyncio.Lock()

    @property
    def lock(self) -> asyncio.Lock:
        """쓰기 직렬화용 락"""
        return self._lock

    @property
    def snapshot(self) -> dict[str, Any]:
        """현재 설정 문서 (복사본)"""
        return self._config.model_dump()

    @property
    def external_api(self) -> str:
        """ProPresenter API 주소"""
        return self._config.external_api

    def load(self) -> dict[str, Any]:
        """설정 파일 로드

        파일 없음, 읽기 실패, 잘못된 JSON 모두 기본값으로 복구합니다.
        일부 필드가 빠진 문서는 기본값으로 채웁니다.

        Returns:
            완전한 설정 문서
        """
        self._config = self._read()
        return self.snapshot

    def _read(self) -> DisplayConfig:
        if not self.config_path.exists():
            logger.info(f"[ConfigStore] 설정 파일 없음, 기본값 사용: {self.config_path}")
            return DisplayConfig()

        try:
            with open(self.config_path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"[ConfigStore] 설정 파일 읽기 실패, 기본값 사용: {e}")
            return DisplayConfig()

        if not isinstance(raw, dict):
            logger.warning("[ConfigStore] 설정 파일이 JSON 객체가 아님, 기본값 사용")
            return DisplayConfig()

        try:
            config = DisplayConfig.model_validate(_recognized(raw))
        except ValidationError as e:
            logger.warning(f"[ConfigStore] 설정 값 검증 실패, 기본값 사용: {e}")
            return DisplayConfig()

        logger.info(f"[ConfigStore] 설정 로드 완료: {self.config_path}")
        return config

    def save(self, doc: dict[str, Any] | None = None) -> bool:
        """설정 문서 저장

        임시 파일에 쓴 후 rename하여 원자적으로 교체합니다.

        Args:
            doc: 저장할 문서 (None이면 현재 스냅샷)

        Returns:
            bool: 저장 성공 여부
        """
        data = self.snapshot if doc is None else doc
        tmp_path: str | None = None
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.config_path.parent,
                prefix=f".{self.config_path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.config_path)
            tmp_path = None
        except OSError as e:
            logger.error(f"[ConfigStore] 설정 저장 실패: {self.config_path} - {e}")
            return False
        finally:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)

        logger.info("[ConfigStore] 설정 저장 완료")
        return True

    def merge(self, partial: dict[str, Any]) -> dict[str, Any]:
        """부분 문서를 현재 스냅샷에 얕은 병합

        partial에 있는 인식 필드만 덮어쓰고, 나머지는 유지합니다.

        Args:
            partial: 부분 설정 문서

        Returns:
            병합된 완전한 문서

        Raises:
            ValidationError: 필드 타입이 맞지 않는 경우 (스냅샷 변경 없음)
        """
        ignored = sorted(set(partial) - set(RECOGNIZED_FIELDS))
        if ignored:
            logger.debug(f"[ConfigStore] 알 수 없는 키 무시: {ignored}")

        merged = {**self._config.model_dump(), **_recognized(partial)}
        self._config = DisplayConfig.model_validate(merged)
        return self.snapshot

    def replace(self, doc: dict[str, Any]) -> dict[str, Any]:
        """완전한 문서로 스냅샷 교체 (롤백용)"""
        self._config = DisplayConfig.model_validate(doc)
        return self.snapshot

    def reset(self) -> dict[str, Any]:
        """기본값으로 스냅샷 초기화"""
        self._config = DisplayConfig.model_validate(default_config())
        return self.snapshot


def _recognized(doc: dict[str, Any]) -> dict[str, Any]:
    """인식되는 필드만 추출"""
    return {key: value for key, value in doc.items() if key in RECOGNIZED_FIELDS}
