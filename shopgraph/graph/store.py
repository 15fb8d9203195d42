"""그래프 저장소 인터페이스.

인메모리와 Neo4j 백엔드가 공통으로 구현하는 프로토콜을 정의합니다.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from .models import EdgeType, Hop, NodeLabel


class GraphStore(Protocol):
    """그래프 저장소 프로토콜.

    쓰기는 관계 단위로 원자적이다. BUYS 수량은 누적 upsert로만 바뀐다.
    ``traverse``는 단일 인접 홉만 답하며 다중 홉 경로는 호출자가 조합한다.
    """

    backend: str

    def upsert_node(
        self,
        label: NodeLabel | str,
        key: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        ...

    def upsert_edge_accumulate(
        self,
        from_key: str,
        to_key: str,
        edge_type: EdgeType | str,
        field: str,
        delta: float,
    ) -> float:
        ...

    def upsert_edge_set(
        self,
        from_key: str,
        to_key: str,
        edge_type: EdgeType | str,
        field: str,
        value: Any,
    ) -> Any:
        ...

    def get_node(self, label: NodeLabel | str, key: str) -> Dict[str, Any]:
        ...

    def traverse(self, pattern: Hop | str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        ...

    def get_stats(self) -> Dict[str, int]:
        ...

    def is_available(self) -> bool:
        ...

    def get_status(self) -> Dict[str, Any]:
        ...

    def close(self) -> None:
        ...
