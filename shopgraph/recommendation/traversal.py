"""호출 단위 그래프 탐색기.

저장소의 단일 홉 조회를 조합해 다중 홉 경로를 구성합니다.
같은 (패턴, 키) 조회는 한 호출 안에서 한 번만 저장소에 보냅니다.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from shopgraph.graph.models import Hop, require_key
from shopgraph.graph.store import GraphStore

from .context import ExecutionContext
from .similarity import dedupe_names


class GraphTraversal:
    """인접 조회 캐시.

    추천 호출마다 새로 만들며 호출 간에 공유하지 않는다.
    """

    def __init__(self, store: GraphStore, ctx: Optional[ExecutionContext] = None):
        self._store = store
        self._ctx = ctx or ExecutionContext()
        self._cache: Dict[Tuple[Hop, str], List[Dict[str, Any]]] = {}

    def _rows(self, hop: Hop, key: str) -> List[Dict[str, Any]]:
        cache_key = (hop, key)
        if cache_key not in self._cache:
            self._ctx.check()
            rows = self._store.traverse(hop, {hop.param: key})
            for row in rows:
                require_key(row.get(hop.binding), hop.binding)
            self._cache[cache_key] = rows
        return self._cache[cache_key]

    def _weights(self, hop: Hop, key: str) -> Dict[str, float]:
        weights: Dict[str, float] = {}
        for row in self._rows(hop, key):
            name = row[hop.binding]
            weights[name] = weights.get(name, 0) + (row.get(hop.weight) or 0)
        return weights

    def purchases(self, person: str) -> Dict[str, float]:
        """고객이 구매한 상품 -> 구매 수량."""
        return self._weights(Hop.PURCHASES, person)

    def buyers(self, item: str) -> Dict[str, float]:
        """상품을 구매한 고객 -> 구매 수량."""
        return self._weights(Hop.BUYERS, item)

    def categories(self, item: str) -> List[str]:
        """상품이 속한 카테고리 (중복 제거)."""
        return dedupe_names(row[Hop.CATEGORIES.binding] for row in self._rows(Hop.CATEGORIES, item))

    def members(self, category: str) -> List[str]:
        """카테고리에 속한 상품 (중복 제거)."""
        return dedupe_names(row[Hop.MEMBERS.binding] for row in self._rows(Hop.MEMBERS, category))
