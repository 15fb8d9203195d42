"""Core 모듈.

공통 예외 클래스와 로깅 설정을 제공합니다.
"""

from shopgraph.core.exceptions import (
    AppError,
    MalformedDataError,
    NotFoundError,
    OperationCancelledError,
    StoreUnavailableError,
)

__all__ = [
    "AppError",
    "MalformedDataError",
    "NotFoundError",
    "OperationCancelledError",
    "StoreUnavailableError",
]
