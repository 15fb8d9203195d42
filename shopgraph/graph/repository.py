"""쇼핑 그래프 레포지토리 모듈.

도메인 모델을 그래프 저장소에 기록하는 쓰기 API를 제공합니다.
저장소 오류는 그대로 호출자에게 전달됩니다.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from .factory import get_graph_store
from .models import (
    BelongsIn,
    Buys,
    Category,
    EdgeType,
    Item,
    NodeLabel,
    Person,
)
from .store import GraphStore

logger = logging.getLogger(__name__)


class ShopRepository:
    """쇼핑 그래프 레포지토리.

    Person/Item/Category 노드와 BELONGS_IN/BUYS 관계를 upsert 합니다.
    """

    def __init__(self, store: Optional[GraphStore] = None):
        self._store = store

    @property
    def store(self) -> GraphStore:
        if self._store is None:
            self._store = get_graph_store()
        return self._store

    # ============================================
    # 노드
    # ============================================

    def create_person(self, name: str) -> Dict[str, Any]:
        """고객 노드 생성."""
        person = Person(name)
        return self.store.upsert_node(NodeLabel.PERSON, person.name)

    def create_item(self, name: str, price: float = 0.0) -> Dict[str, Any]:
        """상품 노드 생성. 기존 노드의 가격은 덮어쓴다."""
        item = Item(name, price)
        return self.store.upsert_node(NodeLabel.ITEM, item.name, item.to_properties())

    def create_category(self, name: str) -> Dict[str, Any]:
        """카테고리 노드 생성."""
        category = Category(name)
        return self.store.upsert_node(NodeLabel.CATEGORY, category.name)

    # ============================================
    # 관계
    # ============================================

    def create_belongs_in(self, item: str, category: str, score: float = 1.0) -> float:
        """상품-카테고리 관계 생성. score는 덮어쓴다."""
        rel = BelongsIn(item, category, score)
        return self.store.upsert_edge_set(
            rel.item, rel.category, EdgeType.BELONGS_IN, EdgeType.BELONGS_IN.field, rel.score
        )

    def create_or_increment_buys(self, person: str, item: str, amount: int = 1) -> int:
        """구매 관계 생성 또는 수량 누적.

        Returns:
            누적된 구매 수량
        """
        rel = Buys(person, item, amount)
        total = self.store.upsert_edge_accumulate(
            rel.person, rel.item, EdgeType.BUYS, EdgeType.BUYS.field, rel.amount
        )
        logger.debug(f"구매 누적: {person} -> {item} = {total}")
        return total

    # ============================================
    # 일괄 초기화
    # ============================================

    def init_persons(self, names: Iterable[str]) -> int:
        count = 0
        for name in names:
            self.create_person(name)
            count += 1
        return count

    def init_categories(self, names: Iterable[str]) -> int:
        count = 0
        for name in names:
            self.create_category(name)
            count += 1
        return count

    def init_items(self, items: Iterable[Dict[str, Any]]) -> int:
        """{"name", "price"} 레코드로 상품 생성."""
        count = 0
        for item in items:
            self.create_item(item.get("name"), item.get("price", 0.0))
            count += 1
        return count

    def init_belongs_in(self, connections: Iterable[Dict[str, Any]]) -> int:
        """{"item", "category", "score"} 레코드로 카테고리 관계 생성."""
        count = 0
        for conn in connections:
            self.create_belongs_in(conn.get("item"), conn.get("category"), conn.get("score", 1.0))
            count += 1
        return count

    def init_buys(self, connections: Iterable[Dict[str, Any]]) -> int:
        """{"person", "item", "amount"} 레코드로 구매 관계 누적."""
        count = 0
        for conn in connections:
            self.create_or_increment_buys(conn.get("person"), conn.get("item"), conn.get("amount", 1))
            count += 1
        return count

    def add_catalog(self, entries: Iterable[Dict[str, Any]]) -> List[str]:
        """{"name", "price", "categories"} 카탈로그 레코드 등록.

        상품, 카테고리, BELONGS_IN(score=1) 관계를 함께 생성합니다.

        Returns:
            등록된 상품 이름 목록
        """
        names = []
        for entry in entries:
            name = entry.get("name")
            self.create_item(name, entry.get("price", 0.0))
            categories = entry.get("categories") or []
            self.init_categories(categories)
            self.init_belongs_in(
                {"item": name, "category": category, "score": 1} for category in categories
            )
            names.append(name)
        logger.info(f"카탈로그 상품 {len(names)}개 등록")
        return names

    def get_stats(self) -> Dict[str, int]:
        return self.store.get_stats()
