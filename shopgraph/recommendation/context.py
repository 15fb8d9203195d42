"""추천 실행 컨텍스트.

취소 플래그와 마감 시각을 담아 탐색 홉 사이마다 확인합니다.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from shopgraph.core.exceptions import OperationCancelledError


class ExecutionContext:
    """취소 가능한 실행 컨텍스트.

    다른 스레드에서 ``cancel()``을 호출하면 진행 중인 전략은
    다음 저장소 조회 직전에 ``OperationCancelledError``로 중단됩니다.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._cancelled = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        self.reason = reason
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        """취소되었거나 마감이 지났으면 예외 발생."""
        if self.cancelled:
            raise OperationCancelledError(
                f"추천 작업이 취소되었습니다: {self.reason}",
                details={"reason": self.reason},
            )
        if self.expired:
            raise OperationCancelledError(
                "추천 작업이 제한 시간을 초과했습니다",
                details={"reason": "deadline_exceeded"},
            )
