"""JSON 구조화 로깅 모듈.

표준 logging 기반 JSON 포맷 로깅을 제공합니다.
추천 요청 ID와 실행 중인 추천 전략을 컨텍스트로 기록합니다.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# 요청 컨텍스트
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
strategy_var: ContextVar[Optional[str]] = ContextVar("strategy", default=None)


def get_request_id() -> Optional[str]:
    """현재 요청 ID 반환."""
    return request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """요청 ID 설정."""
    if request_id is None:
        request_id = str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    return request_id


def get_strategy() -> Optional[str]:
    """현재 추천 전략 이름 반환."""
    return strategy_var.get()


def set_strategy(strategy: Optional[str]) -> None:
    """추천 전략 이름 설정."""
    strategy_var.set(strategy)


class JSONFormatter(logging.Formatter):
    """JSON 포맷 로그 포매터."""

    def format(self, record: logging.LogRecord) -> str:
        """로그 레코드를 JSON 문자열로 포맷."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        strategy = get_strategy()
        if strategy:
            log_data["strategy"] = strategy

        # 추가 필드
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ContextLogger(logging.LoggerAdapter):
    """컨텍스트 정보를 포함하는 로거 어댑터."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get("extra", {})

        request_id = get_request_id()
        if request_id:
            extra["request_id"] = request_id

        strategy = get_strategy()
        if strategy:
            extra["strategy"] = strategy

        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    json_format: bool = True,
) -> logging.Logger:
    """로깅 설정.

    Args:
        level: 로그 레벨
        log_file: 로그 파일 경로 (None이면 콘솔만)
        max_bytes: 로그 파일 최대 크기
        backup_count: 백업 파일 수
        json_format: JSON 포맷 사용 여부

    Returns:
        설정된 루트 로거
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # 파일 핸들러 (로테이션)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


def setup_logging_from_config() -> logging.Logger:
    """설정 파일의 app 섹션으로 로깅 설정."""
    from shopgraph.config import get_config

    app = get_config().app
    return setup_logging(
        level=app.log_level,
        log_file=app.log_file,
        json_format=app.json_logs,
    )


def get_logger(name: str) -> ContextLogger:
    """컨텍스트 로거 반환."""
    return ContextLogger(logging.getLogger(name), {})
