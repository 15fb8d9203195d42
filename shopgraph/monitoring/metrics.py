"""Prometheus 메트릭 정의.

추천 전략과 그래프 저장소의 주요 메트릭을 정의합니다.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Optional

from prometheus_client import Counter, Histogram, Info

# ============================================
# 추천 메트릭
# ============================================

RECOMMENDATION_REQUESTS_TOTAL = Counter(
    "shopgraph_recommendation_requests_total",
    "Total recommendation requests",
    ["strategy"],
)

RECOMMENDATION_DURATION = Histogram(
    "shopgraph_recommendation_duration_seconds",
    "Recommendation computation time in seconds",
    ["strategy"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

RECOMMENDATION_ERRORS_TOTAL = Counter(
    "shopgraph_recommendation_errors_total",
    "Total recommendation errors",
    ["strategy", "error_type"],
)

RECOMMENDATION_RESULT_SIZE = Histogram(
    "shopgraph_recommendation_result_size",
    "Number of records returned per recommendation",
    ["strategy"],
    buckets=(0, 1, 3, 5, 10, 25, 50, 100, 250),
)

# ============================================
# 그래프 저장소 메트릭
# ============================================

STORE_OPERATIONS_TOTAL = Counter(
    "shopgraph_store_operations_total",
    "Total graph store operations",
    ["backend", "operation"],  # operation: upsert_node, upsert_edge, traverse
)

STORE_OPERATION_DURATION = Histogram(
    "shopgraph_store_operation_duration_seconds",
    "Graph store operation duration in seconds",
    ["backend", "operation"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

APP_INFO = Info(
    "shopgraph_app",
    "Application information",
)


def set_app_info(name: str, version: str, environment: str) -> None:
    """앱 정보 설정."""
    APP_INFO.info({
        "name": name,
        "version": version,
        "environment": environment,
    })


def track_recommendation(
    strategy: str,
    duration: float,
    result_size: int = 0,
    error: Optional[str] = None,
) -> None:
    """추천 요청 메트릭 기록.

    Args:
        strategy: 추천 전략 이름
        duration: 처리 시간 (초)
        result_size: 반환된 레코드 수
        error: 에러 유형 (있으면)
    """
    RECOMMENDATION_REQUESTS_TOTAL.labels(strategy=strategy).inc()
    RECOMMENDATION_DURATION.labels(strategy=strategy).observe(duration)

    if error:
        RECOMMENDATION_ERRORS_TOTAL.labels(strategy=strategy, error_type=error).inc()
    else:
        RECOMMENDATION_RESULT_SIZE.labels(strategy=strategy).observe(result_size)


def track_store_op(backend: str, operation: str, duration: float) -> None:
    """그래프 저장소 작업 메트릭 기록."""
    STORE_OPERATIONS_TOTAL.labels(backend=backend, operation=operation).inc()
    STORE_OPERATION_DURATION.labels(backend=backend, operation=operation).observe(duration)


@contextmanager
def timed_store_op(backend: str, operation: str):
    """그래프 저장소 작업 시간 측정 컨텍스트 매니저."""
    start_time = time.time()
    try:
        yield
    finally:
        track_store_op(backend, operation, time.time() - start_time)
