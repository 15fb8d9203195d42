"""인메모리 그래프 백엔드.

Neo4j 서버 없이 NetworkX DiGraph로 쇼핑 그래프를 보관합니다.
노드 ID는 "person:Bob", "item:Salt", "category:Food" 형식입니다.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

import networkx as nx

from shopgraph.core.exceptions import NotFoundError, StoreUnavailableError
from shopgraph.monitoring.metrics import timed_store_op

from .models import (
    EdgeType,
    Hop,
    NodeLabel,
    parse_edge_type,
    parse_hop,
    parse_label,
    reject_buys_overwrite,
    require_edge_value,
    require_key,
    require_non_negative,
)

logger = logging.getLogger(__name__)

# 탐색 패턴 -> (기준 노드 레이블, 방향, 관계 유형)
_HOP_PLAN: Dict[Hop, Tuple[NodeLabel, str, EdgeType]] = {
    Hop.PURCHASES: (NodeLabel.PERSON, "out", EdgeType.BUYS),
    Hop.BUYERS: (NodeLabel.ITEM, "in", EdgeType.BUYS),
    Hop.CATEGORIES: (NodeLabel.ITEM, "out", EdgeType.BELONGS_IN),
    Hop.MEMBERS: (NodeLabel.CATEGORY, "in", EdgeType.BELONGS_IN),
}


def _node_id(label: NodeLabel, key: str) -> str:
    return f"{label.value.lower()}:{key}"


class InMemoryGraph:
    """NetworkX 기반 인메모리 그래프 저장소.

    모든 쓰기와 인접 조회는 하나의 RLock 아래에서 실행되므로
    같은 관계에 대한 동시 누적이 유실되지 않습니다.
    """

    backend = "inmemory"

    def __init__(self):
        self._graph = nx.DiGraph()
        self._lock = threading.RLock()
        self._closed = False

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    def is_available(self) -> bool:
        return not self._closed

    def get_status(self) -> Dict[str, Any]:
        """그래프 상태 조회."""
        if self._closed:
            return {"backend": self.backend, "connected": False, "error": "저장소가 닫혔습니다"}
        with self._lock:
            return {
                "backend": self.backend,
                "connected": True,
                "nodes": self._graph.number_of_nodes(),
                "edges": self._graph.number_of_edges(),
            }

    def close(self) -> None:
        self._closed = True
        logger.info("인메모리 그래프 종료")

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreUnavailableError("인메모리 그래프가 닫혀 있습니다", details={"backend": self.backend})

    # ============================================
    # 쓰기
    # ============================================

    def _merge_node(self, label: NodeLabel, key: str) -> str:
        node = _node_id(label, key)
        if node not in self._graph:
            self._graph.add_node(node, type=label.value, name=key)
        return node

    def upsert_node(
        self,
        label: NodeLabel | str,
        key: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """노드 생성 또는 병합 (name 기준)."""
        label = parse_label(label)
        require_key(key, label.value)
        props = dict(properties or {})
        props.pop("name", None)
        props.pop("type", None)
        if label is NodeLabel.ITEM and "price" in props:
            require_non_negative(props["price"], "price")

        with timed_store_op(self.backend, "upsert_node"):
            with self._lock:
                self._ensure_open()
                node = self._merge_node(label, key)
                self._graph.nodes[node].update(props)
                return dict(self._graph.nodes[node])

    def _merge_edge(self, edge_type: EdgeType, from_key: str, to_key: str) -> Tuple[str, str]:
        from_label, to_label = edge_type.endpoints
        require_key(from_key, from_label.value)
        require_key(to_key, to_label.value)
        return self._merge_node(from_label, from_key), self._merge_node(to_label, to_key)

    def upsert_edge_accumulate(
        self,
        from_key: str,
        to_key: str,
        edge_type: EdgeType | str,
        field: str,
        delta: float,
    ) -> float:
        """관계가 없으면 field=delta로 생성, 있으면 field += delta."""
        edge_type = parse_edge_type(edge_type, field)
        require_edge_value(edge_type, delta, field)

        with timed_store_op(self.backend, "upsert_edge"):
            with self._lock:
                self._ensure_open()
                source, target = self._merge_edge(edge_type, from_key, to_key)
                if self._graph.has_edge(source, target):
                    data = self._graph.edges[source, target]
                    data[field] = data.get(field, 0) + delta
                else:
                    self._graph.add_edge(source, target, type=edge_type.value, **{field: delta})
                return self._graph.edges[source, target][field]

    def upsert_edge_set(
        self,
        from_key: str,
        to_key: str,
        edge_type: EdgeType | str,
        field: str,
        value: Any,
    ) -> Any:
        """관계 생성 또는 field 덮어쓰기. BUYS는 누적으로만 변경된다."""
        edge_type = parse_edge_type(edge_type, field)
        reject_buys_overwrite(edge_type)

        with timed_store_op(self.backend, "upsert_edge"):
            with self._lock:
                self._ensure_open()
                source, target = self._merge_edge(edge_type, from_key, to_key)
                if self._graph.has_edge(source, target):
                    self._graph.edges[source, target][field] = value
                else:
                    self._graph.add_edge(source, target, type=edge_type.value, **{field: value})
                return value

    # ============================================
    # 조회
    # ============================================

    def get_node(self, label: NodeLabel | str, key: str) -> Dict[str, Any]:
        label = parse_label(label)
        with self._lock:
            self._ensure_open()
            node = _node_id(label, key)
            if node not in self._graph:
                raise NotFoundError(
                    f"{label.value} 노드 없음: {key}", details={"label": label.value, "key": key}
                )
            return dict(self._graph.nodes[node])

    def traverse(self, pattern: Hop | str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """단일 인접 탐색. 결과 행은 삽입 순서를 따른다."""
        hop = parse_hop(pattern)
        key = require_key(params.get(hop.param), hop.param)
        label, direction, edge_type = _HOP_PLAN[hop]

        with timed_store_op(self.backend, "traverse"):
            with self._lock:
                self._ensure_open()
                node = _node_id(label, key)
                if node not in self._graph:
                    return []

                if direction == "out":
                    edges = ((target, data) for _, target, data in self._graph.out_edges(node, data=True))
                else:
                    edges = ((source, data) for source, _, data in self._graph.in_edges(node, data=True))

                rows = []
                for other, data in edges:
                    if data.get("type") != edge_type.value:
                        continue
                    rows.append({
                        hop.binding: self._graph.nodes[other].get("name"),
                        hop.weight: data.get(hop.weight),
                    })
                return rows

    def get_stats(self) -> Dict[str, int]:
        """노드/관계 통계."""
        with self._lock:
            self._ensure_open()
            node_types = [d.get("type") for _, d in self._graph.nodes(data=True)]
            edge_types = [d.get("type") for _, _, d in self._graph.edges(data=True)]

        return {
            "persons": node_types.count(NodeLabel.PERSON.value),
            "items": node_types.count(NodeLabel.ITEM.value),
            "categories": node_types.count(NodeLabel.CATEGORY.value),
            "buys": edge_types.count(EdgeType.BUYS.value),
            "belongs_in": edge_types.count(EdgeType.BELONGS_IN.value),
        }
