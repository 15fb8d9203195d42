"""커스텀 예외 클래스 모듈.

그래프 저장소와 추천 계층에서 사용되는 예외 클래스를 정의합니다.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    """애플리케이션 기본 예외.

    모든 커스텀 예외의 기반 클래스입니다.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message: str = "내부 오류가 발생했습니다"

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class NotFoundError(AppError):
    """노드를 찾을 수 없음 예외."""

    status_code = 404
    error_code = "NOT_FOUND"
    message = "요청한 노드를 찾을 수 없습니다"


class MalformedDataError(AppError):
    """필수 키 누락 등 잘못된 그래프 데이터 예외."""

    status_code = 422
    error_code = "MALFORMED_DATA"
    message = "그래프 데이터 형식이 올바르지 않습니다"


class StoreUnavailableError(AppError):
    """그래프 저장소 이용 불가 예외."""

    status_code = 503
    error_code = "STORE_UNAVAILABLE"
    message = "그래프 저장소를 사용할 수 없습니다"

    def with_strategy(self, strategy: str) -> "StoreUnavailableError":
        """추천 전략 이름을 덧붙인 새 예외 반환."""
        details = dict(self.details)
        details["strategy"] = strategy
        return StoreUnavailableError(
            message=f"[{strategy}] {self.message}",
            error_code=self.error_code,
            details=details,
        )


class OperationCancelledError(AppError):
    """취소되었거나 제한 시간을 넘긴 작업 예외."""

    status_code = 499
    error_code = "OPERATION_CANCELLED"
    message = "작업이 취소되었습니다"
