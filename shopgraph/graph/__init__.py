"""그래프 저장소 모듈.

쇼핑 도메인 모델, 저장소 인터페이스, 인메모리/Neo4j 백엔드를 제공합니다.
"""

from .factory import create_graph_store, get_graph_store, reset_graph_store
from .inmemory import InMemoryGraph
from .models import (
    BelongsIn,
    Buys,
    Category,
    EdgeType,
    Hop,
    Item,
    NodeLabel,
    Person,
)
from .neo4j_store import Neo4jGraphStore
from .repository import ShopRepository
from .store import GraphStore

__all__ = [
    "BelongsIn",
    "Buys",
    "Category",
    "EdgeType",
    "GraphStore",
    "Hop",
    "InMemoryGraph",
    "Item",
    "Neo4jGraphStore",
    "NodeLabel",
    "Person",
    "ShopRepository",
    "create_graph_store",
    "get_graph_store",
    "reset_graph_store",
]
