"""통합 설정 로더 모듈.

configs/ 아래의 YAML 설정 파일을 로드하고 관리합니다.
환경변수 오버라이드를 지원합니다.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_DIR = Path("configs")

# 유사 고객 추천 최대 개수
MAX_COLLABORATIVE_LIMIT = 3


def load_yaml(path: Path | str) -> Dict[str, Any]:
    """YAML 파일 로드."""
    path = Path(path)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_env_or_default(key: str, default: Any) -> Any:
    """환경변수 또는 기본값 반환."""
    env_val = os.environ.get(key)
    if env_val is not None:
        if isinstance(default, bool):
            return env_val.lower() in ("true", "1", "yes")
        if isinstance(default, int):
            return int(env_val)
        if isinstance(default, float):
            return float(env_val)
        return env_val
    return default


@dataclass
class AppConfig:
    """앱 전역 설정."""

    name: str = "shopgraph"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    json_logs: bool = True


@dataclass
class Neo4jConfig:
    """Neo4j 연결 설정."""

    uri: str = "bolt://localhost:7687"
    user: str = "neo4j"
    password: str = ""
    database: str = "neo4j"
    max_pool_size: int = 50
    acquisition_timeout: float = 60.0
    query_timeout: float = 30.0


@dataclass
class GraphConfig:
    """그래프 저장소 설정."""

    backend: str = "inmemory"  # inmemory, neo4j
    neo4j: Neo4jConfig = field(default_factory=Neo4jConfig)


@dataclass
class RecommendationConfig:
    """추천 설정."""

    timeout_seconds: float = 10.0
    collaborative_limit: int = MAX_COLLABORATIVE_LIMIT


class Config:
    """통합 설정 클래스."""

    _instance: Optional["Config"] = None

    def __init__(self, config_dir: Path | str = DEFAULT_CONFIG_DIR):
        self.config_dir = Path(config_dir)
        self._app: Optional[AppConfig] = None
        self._graph: Optional[GraphConfig] = None
        self._recommendation: Optional[RecommendationConfig] = None
        self._raw: Dict[str, Dict[str, Any]] = {}
        self._load_all()

    @classmethod
    def get_instance(cls, config_dir: Path | str = DEFAULT_CONFIG_DIR) -> "Config":
        """싱글톤 인스턴스 반환."""
        if cls._instance is None:
            cls._instance = cls(config_dir)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """싱글톤 인스턴스 리셋 (테스트용)."""
        cls._instance = None

    def _load_all(self) -> None:
        self._raw["app"] = load_yaml(self.config_dir / "app.yaml")
        self._raw["graph"] = load_yaml(self.config_dir / "graph.yaml")
        self._raw["recommendation"] = load_yaml(self.config_dir / "recommendation.yaml")

    @property
    def app(self) -> AppConfig:
        """앱 설정."""
        if self._app is None:
            raw = self._raw.get("app", {})
            app_cfg = raw.get("app", {})
            logging_cfg = raw.get("logging", {})

            self._app = AppConfig(
                name=app_cfg.get("name", "shopgraph"),
                version=app_cfg.get("version", "0.1.0"),
                environment=get_env_or_default("APP_ENV", app_cfg.get("environment", "development")),
                log_level=get_env_or_default("LOG_LEVEL", logging_cfg.get("level", "INFO")),
                log_file=os.environ.get("LOG_FILE", logging_cfg.get("file")),
                json_logs=logging_cfg.get("json", True),
            )
        return self._app

    @property
    def graph(self) -> GraphConfig:
        """그래프 저장소 설정."""
        if self._graph is None:
            raw = self._raw.get("graph", {})
            neo4j_cfg = raw.get("neo4j", {})
            pool_cfg = neo4j_cfg.get("connection_pool", {})
            query_cfg = neo4j_cfg.get("query", {})

            # 비밀번호 등 접속 정보는 환경변수 우선
            neo4j = Neo4jConfig(
                uri=get_env_or_default("NEO4J_URI", neo4j_cfg.get("uri", "bolt://localhost:7687")),
                user=get_env_or_default("NEO4J_USER", neo4j_cfg.get("user", "neo4j")),
                password=get_env_or_default("NEO4J_PASSWORD", neo4j_cfg.get("password", "")),
                database=get_env_or_default("NEO4J_DATABASE", neo4j_cfg.get("database", "neo4j")),
                max_pool_size=pool_cfg.get("max_size", 50),
                acquisition_timeout=pool_cfg.get("acquisition_timeout", 60.0),
                query_timeout=query_cfg.get("timeout", 30.0),
            )

            self._graph = GraphConfig(
                backend=get_env_or_default("GRAPH_BACKEND", raw.get("backend", "inmemory")),
                neo4j=neo4j,
            )
        return self._graph

    @property
    def recommendation(self) -> RecommendationConfig:
        """추천 설정."""
        if self._recommendation is None:
            raw = self._raw.get("recommendation", {})
            collaborative_cfg = raw.get("collaborative", {})

            limit = collaborative_cfg.get("limit", MAX_COLLABORATIVE_LIMIT)
            self._recommendation = RecommendationConfig(
                timeout_seconds=get_env_or_default(
                    "RECOMMENDATION_TIMEOUT", float(raw.get("timeout_seconds", 10.0))
                ),
                collaborative_limit=max(1, min(int(limit), MAX_COLLABORATIVE_LIMIT)),
            )
        return self._recommendation


def get_config(config_dir: Path | str = DEFAULT_CONFIG_DIR) -> Config:
    """설정 인스턴스 반환."""
    return Config.get_instance(config_dir)
