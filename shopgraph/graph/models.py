"""쇼핑 그래프 도메인 모델.

Person, Item, Category 노드와 BELONGS_IN, BUYS 관계를 정의합니다.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from shopgraph.core.exceptions import MalformedDataError


class NodeLabel(str, Enum):
    """노드 레이블."""

    PERSON = "Person"
    ITEM = "Item"
    CATEGORY = "Category"


class EdgeType(str, Enum):
    """관계 유형."""

    BUYS = "BUYS"
    BELONGS_IN = "BELONGS_IN"

    @property
    def endpoints(self) -> Tuple[NodeLabel, NodeLabel]:
        """(시작 노드 레이블, 끝 노드 레이블)."""
        return _EDGE_ENDPOINTS[self]

    @property
    def field(self) -> str:
        """관계 속성 이름."""
        return _EDGE_FIELDS[self]


_EDGE_ENDPOINTS = {
    EdgeType.BUYS: (NodeLabel.PERSON, NodeLabel.ITEM),
    EdgeType.BELONGS_IN: (NodeLabel.ITEM, NodeLabel.CATEGORY),
}

_EDGE_FIELDS = {
    EdgeType.BUYS: "amount",
    EdgeType.BELONGS_IN: "score",
}


class Hop(str, Enum):
    """저장소가 지원하는 단일 인접 탐색 패턴.

    각 패턴의 파라미터와 결과 행 바인딩:
        PURCHASES  {"person"}   -> {"item", "amount"}
        BUYERS     {"item"}     -> {"person", "amount"}
        CATEGORIES {"item"}     -> {"category", "score"}
        MEMBERS    {"category"} -> {"item", "score"}
    """

    PURCHASES = "purchases"
    BUYERS = "buyers"
    CATEGORIES = "categories"
    MEMBERS = "members"

    @property
    def param(self) -> str:
        return _HOP_BINDINGS[self][0]

    @property
    def binding(self) -> str:
        return _HOP_BINDINGS[self][1]

    @property
    def weight(self) -> str:
        return _HOP_BINDINGS[self][2]


_HOP_BINDINGS = {
    Hop.PURCHASES: ("person", "item", "amount"),
    Hop.BUYERS: ("item", "person", "amount"),
    Hop.CATEGORIES: ("item", "category", "score"),
    Hop.MEMBERS: ("category", "item", "score"),
}


def require_key(key: Any, label: str = "node") -> str:
    """노드 고유 키(name) 검증."""
    if not isinstance(key, str) or not key.strip():
        raise MalformedDataError(
            f"{label} 노드의 name 키가 비어 있습니다",
            details={"label": label, "key": key},
        )
    return key


def parse_label(label: NodeLabel | str) -> NodeLabel:
    try:
        return NodeLabel(label)
    except ValueError:
        raise MalformedDataError(
            f"알 수 없는 노드 레이블: {label}", details={"label": str(label)}
        ) from None


def parse_edge_type(edge_type: EdgeType | str, field: Optional[str] = None) -> EdgeType:
    """관계 유형과 속성 이름 검증."""
    try:
        parsed = EdgeType(edge_type)
    except ValueError:
        raise MalformedDataError(
            f"알 수 없는 관계 유형: {edge_type}", details={"edge_type": str(edge_type)}
        ) from None
    if field is not None and field != parsed.field:
        raise MalformedDataError(
            f"{parsed.value} 관계에는 {field} 속성이 없습니다",
            details={"edge_type": parsed.value, "field": field},
        )
    return parsed


@dataclass
class Person:
    """고객 노드."""

    name: str

    def __post_init__(self) -> None:
        require_key(self.name, NodeLabel.PERSON.value)


@dataclass
class Item:
    """상품 노드."""

    name: str
    price: float = 0.0

    def __post_init__(self) -> None:
        require_key(self.name, NodeLabel.ITEM.value)
        require_non_negative(self.price, "price")

    def to_properties(self) -> Dict[str, Any]:
        return {"price": self.price}


@dataclass
class Category:
    """카테고리 노드."""

    name: str

    def __post_init__(self) -> None:
        require_key(self.name, NodeLabel.CATEGORY.value)


@dataclass
class BelongsIn:
    """상품-카테고리 관계. score는 덮어쓰기 된다."""

    item: str
    category: str
    score: float = 1.0

    def __post_init__(self) -> None:
        require_key(self.item, NodeLabel.ITEM.value)
        require_key(self.category, NodeLabel.CATEGORY.value)


@dataclass
class Buys:
    """고객-상품 구매 관계. amount는 누적된다."""

    person: str
    item: str
    amount: int = 1

    def __post_init__(self) -> None:
        require_key(self.person, NodeLabel.PERSON.value)
        require_key(self.item, NodeLabel.ITEM.value)
        require_amount(self.amount, "amount")


def parse_hop(pattern: Hop | str) -> Hop:
    try:
        return Hop(pattern)
    except ValueError:
        raise MalformedDataError(
            f"지원하지 않는 탐색 패턴: {pattern}", details={"pattern": str(pattern)}
        ) from None


def require_non_negative(value: Any, field: str) -> None:
    """수량/가격 등 음수가 될 수 없는 값 검증."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or value < 0:
        raise MalformedDataError(
            f"{field} 값은 0 이상의 숫자여야 합니다", details={"field": field, "value": value}
        )


def require_amount(value: Any, field: str = "amount") -> None:
    """구매 수량 검증. bool이 아닌 0 이상의 정수만 허용."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedDataError(
            "구매 수량은 0 이상의 정수여야 합니다", details={"field": field, "value": value}
        )


def require_edge_value(edge_type: EdgeType, value: Any, field: str) -> None:
    """관계 유형별 속성 값 검증."""
    if edge_type is EdgeType.BUYS:
        require_amount(value, field)
    else:
        require_non_negative(value, field)


def reject_buys_overwrite(edge_type: EdgeType) -> None:
    """BUYS 수량은 누적으로만 변경된다."""
    if edge_type is EdgeType.BUYS:
        raise MalformedDataError(
            "BUYS 관계는 덮어쓸 수 없습니다. 누적 upsert를 사용하세요",
            details={"edge_type": edge_type.value},
        )
