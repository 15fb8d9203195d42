"""그래프 저장소 팩토리.

설정에 따라 인메모리 또는 Neo4j 저장소를 반환합니다.
"""

from __future__ import annotations

import logging
from typing import Optional

from shopgraph.config import get_config
from shopgraph.core.exceptions import MalformedDataError

from .inmemory import InMemoryGraph
from .neo4j_store import Neo4jGraphStore
from .store import GraphStore

logger = logging.getLogger(__name__)

# 저장소 싱글톤
_store: Optional[GraphStore] = None


def create_graph_store(backend: Optional[str] = None) -> GraphStore:
    """설정된 백엔드의 새 저장소 생성.

    Args:
        backend: "inmemory" 또는 "neo4j". None이면 설정 파일 값 사용.
    """
    graph_cfg = get_config().graph
    backend = backend or graph_cfg.backend

    if backend == "neo4j":
        return Neo4jGraphStore(graph_cfg.neo4j)
    if backend == "inmemory":
        return InMemoryGraph()
    raise MalformedDataError(f"알 수 없는 그래프 백엔드: {backend}", details={"backend": backend})


def get_graph_store() -> GraphStore:
    """그래프 저장소 싱글톤 반환."""
    global _store
    if _store is None:
        _store = create_graph_store()
        logger.info(f"그래프 저장소 초기화: {_store.backend}")
    return _store


def reset_graph_store() -> None:
    """저장소 싱글톤 리셋 (테스트용)."""
    global _store
    if _store is not None:
        _store.close()
        _store = None
