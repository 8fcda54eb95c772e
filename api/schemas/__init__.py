"""
API 요청/응답 스키마 모듈
"""

from .request import ConfigUpdateRequest
from .response import ConfigWriteResponse, ErrorResponse, StatusResponse

__all__ = [
    # Request
    "ConfigUpdateRequest",
    # Response
    "ConfigWriteResponse",
    "ErrorResponse",
    "StatusResponse",
]
