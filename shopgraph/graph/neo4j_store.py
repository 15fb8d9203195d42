"""Neo4j 그래프 저장소 모듈.

MERGE 기반 upsert와 단일 홉 인접 조회를 Cypher로 실행합니다.
누적 쓰기는 하나의 쓰기 트랜잭션 안에서 ON CREATE / ON MATCH로 처리됩니다.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from neo4j import GraphDatabase, Query
from neo4j.exceptions import DriverError, Neo4jError

from shopgraph.config import Neo4jConfig
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


_TRAVERSE_QUERIES: Dict[Hop, str] = {
    Hop.PURCHASES: """
        MATCH (:Person {name: $key})-[r:BUYS]->(n:Item)
        RETURN n.name AS item, r.amount AS amount
        ORDER BY item
    """,
    Hop.BUYERS: """
        MATCH (:Item {name: $key})<-[r:BUYS]-(n:Person)
        RETURN n.name AS person, r.amount AS amount
        ORDER BY person
    """,
    Hop.CATEGORIES: """
        MATCH (:Item {name: $key})-[r:BELONGS_IN]->(n:Category)
        RETURN n.name AS category, r.score AS score
        ORDER BY category
    """,
    Hop.MEMBERS: """
        MATCH (:Category {name: $key})<-[r:BELONGS_IN]-(n:Item)
        RETURN n.name AS item, r.score AS score
        ORDER BY item
    """,
}


class Neo4jGraphStore:
    """Neo4j 기반 그래프 저장소.

    드라이버는 스레드 세이프하며 세션은 작업마다 새로 연다.
    """

    backend = "neo4j"

    def __init__(self, config: Optional[Neo4jConfig] = None, driver: Any = None):
        self.config = config or Neo4jConfig()
        self._driver = driver

    def is_available(self) -> bool:
        """Neo4j 사용 가능 여부."""
        if self._driver is not None:
            return True
        if not self.config.password:
            logger.debug("Neo4j 비밀번호 미설정")
            return False
        return True

    def _get_driver(self):
        if self._driver is None:
            if not self.config.password:
                raise StoreUnavailableError("Neo4j 비밀번호 미설정", details={"uri": self.config.uri})
            try:
                self._driver = GraphDatabase.driver(
                    self.config.uri,
                    auth=(self.config.user, self.config.password),
                    max_connection_pool_size=self.config.max_pool_size,
                    connection_acquisition_timeout=self.config.acquisition_timeout,
                )
                self._driver.verify_connectivity()
                logger.info(f"Neo4j 연결 성공: {self.config.uri}")
            except (Neo4jError, DriverError, OSError) as e:
                logger.error(f"Neo4j 연결 실패: {e}")
                self._driver = None
                raise StoreUnavailableError(
                    f"Neo4j 연결 실패: {e}", details={"uri": self.config.uri}
                ) from e
        return self._driver

    def _run(self, mode: str, work: Callable[[Any], Any]) -> Any:
        driver = self._get_driver()
        try:
            with driver.session(database=self.config.database) as session:
                if mode == "write":
                    return session.execute_write(work)
                return session.execute_read(work)
        except (Neo4jError, DriverError) as e:
            logger.error(f"Neo4j 쿼리 실패: {e}")
            raise StoreUnavailableError(
                f"Neo4j 쿼리 실패: {e}",
                details={"uri": self.config.uri, "database": self.config.database},
            ) from e

    def _query(self, text: str) -> Query:
        return Query(text, timeout=self.config.query_timeout)

    def _write_single(self, text: str, params: Dict[str, Any]) -> Dict[str, Any]:
        query = self._query(text)

        def work(tx):
            record = tx.run(query, params).single()
            return record.data() if record is not None else {}

        return self._run("write", work)

    def _read_all(self, text: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        query = self._query(text)

        def work(tx):
            return [record.data() for record in tx.run(query, params)]

        return self._run("read", work)

    def get_status(self) -> Dict[str, Any]:
        if not self.is_available():
            return {"backend": self.backend, "connected": False, "error": "Neo4j 미설정"}
        return {
            "backend": self.backend,
            "connected": self._driver is not None,
            "uri": self.config.uri,
        }

    def ensure_schema(self) -> None:
        """노드 레이블별 name 유니크 제약 생성."""
        for label in NodeLabel:
            text = (
                f"CREATE CONSTRAINT {label.value.lower()}_name IF NOT EXISTS "
                f"FOR (n:{label.value}) REQUIRE n.name IS UNIQUE"
            )
            self._write_single(text, {})
        logger.info("Neo4j 유니크 제약 확인 완료")

    def close(self) -> None:
        if self._driver is not None:
            self._driver.close()
            self._driver = None
        logger.info("Neo4j 연결 종료")

    # ============================================
    # 쓰기
    # ============================================

    def upsert_node(
        self,
        label: NodeLabel | str,
        key: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """노드 생성 또는 병합 (name 기준)."""
        label = parse_label(label)
        require_key(key, label.value)
        props = {k: v for k, v in (properties or {}).items() if k not in ("name", "type")}
        if label is NodeLabel.ITEM and "price" in props:
            require_non_negative(props["price"], "price")

        text = f"""
        MERGE (n:{label.value} {{name: $key}})
        SET n += $props
        RETURN n {{.*}} AS node
        """
        with timed_store_op(self.backend, "upsert_node"):
            record = self._write_single(text, {"key": key, "props": props})
        node = dict(record.get("node") or {})
        node["type"] = label.value
        return node

    def upsert_edge_accumulate(
        self,
        from_key: str,
        to_key: str,
        edge_type: EdgeType | str,
        field: str,
        delta: float,
    ) -> float:
        """관계가 없으면 field=delta로 생성, 있으면 field += delta (단일 트랜잭션)."""
        edge_type = parse_edge_type(edge_type, field)
        require_edge_value(edge_type, delta, field)
        from_label, to_label = edge_type.endpoints
        require_key(from_key, from_label.value)
        require_key(to_key, to_label.value)

        text = f"""
        MERGE (a:{from_label.value} {{name: $from_key}})
        MERGE (b:{to_label.value} {{name: $to_key}})
        MERGE (a)-[r:{edge_type.value}]->(b)
        ON CREATE SET r.{field} = $delta
        ON MATCH SET r.{field} = coalesce(r.{field}, 0) + $delta
        RETURN r.{field} AS value
        """
        with timed_store_op(self.backend, "upsert_edge"):
            record = self._write_single(
                text, {"from_key": from_key, "to_key": to_key, "delta": delta}
            )
        return record.get("value")

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
        from_label, to_label = edge_type.endpoints
        require_key(from_key, from_label.value)
        require_key(to_key, to_label.value)

        text = f"""
        MERGE (a:{from_label.value} {{name: $from_key}})
        MERGE (b:{to_label.value} {{name: $to_key}})
        MERGE (a)-[r:{edge_type.value}]->(b)
        SET r.{field} = $value
        RETURN r.{field} AS value
        """
        with timed_store_op(self.backend, "upsert_edge"):
            record = self._write_single(
                text, {"from_key": from_key, "to_key": to_key, "value": value}
            )
        return record.get("value")

    # ============================================
    # 조회
    # ============================================

    def get_node(self, label: NodeLabel | str, key: str) -> Dict[str, Any]:
        label = parse_label(label)
        rows = self._read_all(
            f"MATCH (n:{label.value} {{name: $key}}) RETURN n {{.*}} AS node", {"key": key}
        )
        if not rows:
            raise NotFoundError(
                f"{label.value} 노드 없음: {key}", details={"label": label.value, "key": key}
            )
        node = dict(rows[0]["node"])
        node["type"] = label.value
        return node

    def traverse(self, pattern: Hop | str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """단일 인접 탐색."""
        hop = parse_hop(pattern)
        key = require_key(params.get(hop.param), hop.param)
        with timed_store_op(self.backend, "traverse"):
            return self._read_all(_TRAVERSE_QUERIES[hop], {"key": key})

    def get_stats(self) -> Dict[str, int]:
        """노드/관계 통계."""
        node_rows = self._read_all(
            """
            MATCH (n) WHERE n:Person OR n:Item OR n:Category
            RETURN labels(n)[0] AS label, count(*) AS count
            """,
            {},
        )
        edge_rows = self._read_all(
            """
            MATCH ()-[r]->() WHERE type(r) IN ['BUYS', 'BELONGS_IN']
            RETURN type(r) AS type, count(*) AS count
            """,
            {},
        )
        nodes = {r["label"]: r["count"] for r in node_rows}
        edges = {r["type"]: r["count"] for r in edge_rows}
        return {
            "persons": nodes.get(NodeLabel.PERSON.value, 0),
            "items": nodes.get(NodeLabel.ITEM.value, 0),
            "categories": nodes.get(NodeLabel.CATEGORY.value, 0),
            "buys": edges.get(EdgeType.BUYS.value, 0),
            "belongs_in": edges.get(EdgeType.BELONGS_IN.value, 0),
        }
