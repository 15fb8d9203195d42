"""모니터링 모듈.

Prometheus 메트릭을 제공합니다.
"""

from .metrics import (
    RECOMMENDATION_DURATION,
    RECOMMENDATION_ERRORS_TOTAL,
    RECOMMENDATION_REQUESTS_TOTAL,
    STORE_OPERATIONS_TOTAL,
    set_app_info,
    timed_store_op,
    track_recommendation,
    track_store_op,
)

__all__ = [
    "RECOMMENDATION_DURATION",
    "RECOMMENDATION_ERRORS_TOTAL",
    "RECOMMENDATION_REQUESTS_TOTAL",
    "STORE_OPERATIONS_TOTAL",
    "set_app_info",
    "timed_store_op",
    "track_recommendation",
    "track_store_op",
]
