"""그래프 탐색 기반 추천 전략.

네 가지 전략 모두 (저장소, 고객명)에 대한 읽기 전용 함수입니다.
구매 이력이 없는 고객은 빈 결과를 받으며, 저장소 오류는 전략 이름을
덧붙여 그대로 전달됩니다.
"""

from __future__ import annotations

import time
from functools import wraps
from typing import Callable, Dict, List, Optional, Set

from shopgraph.config import MAX_COLLABORATIVE_LIMIT
from shopgraph.core.exceptions import AppError, StoreUnavailableError
from shopgraph.core.logging import get_logger, strategy_var
from shopgraph.graph.store import GraphStore
from shopgraph.monitoring.metrics import track_recommendation

from .context import ExecutionContext
from .models import ItemFrequency, ItemRecommendation, RecommendationType, SimilarCustomer
from .postprocess import rank
from .similarity import overlap_ratio
from .traversal import GraphTraversal

logger = get_logger(__name__)


def _strategy(kind: RecommendationType) -> Callable:
    """전략 실행 컨텍스트, 메트릭, 오류 래핑 데코레이터."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(store: GraphStore, person: str, ctx: Optional[ExecutionContext] = None, **kwargs):
            token = strategy_var.set(kind.value)
            start_time = time.time()
            try:
                results = func(GraphTraversal(store, ctx), person, **kwargs)
            except StoreUnavailableError as e:
                track_recommendation(kind.value, time.time() - start_time, error=type(e).__name__)
                logger.error(f"{kind.value} 추천 실패 ({person}): {e.message}")
                raise e.with_strategy(kind.value) from e
            except AppError as e:
                track_recommendation(kind.value, time.time() - start_time, error=type(e).__name__)
                raise
            finally:
                strategy_var.reset(token)

            duration = time.time() - start_time
            track_recommendation(kind.value, duration, result_size=len(results))
            logger.debug(f"{kind.value} 추천 완료: {person} -> {len(results)}건 ({duration * 1000:.1f}ms)")
            return results

        return wrapper

    return decorator


@_strategy(RecommendationType.CONTENT)
def by_content(graph: GraphTraversal, person: str) -> List[ItemRecommendation]:
    """같은 카테고리의 미구매 상품을 카테고리 Jaccard 점수로 추천."""
    bought = graph.purchases(person)
    records = []

    for item in bought:
        shared: Dict[str, int] = {}
        for category in graph.categories(item):
            for candidate in graph.members(category):
                if candidate in bought:
                    continue
                shared[candidate] = shared.get(candidate, 0) + 1

        for candidate, intersection in shared.items():
            score = overlap_ratio(intersection, graph.categories(item), graph.categories(candidate))
            records.append(ItemRecommendation(item=candidate, score=score))

    return rank(records, "score", "item")


@_strategy(RecommendationType.POPULARITY)
def by_popularity(graph: GraphTraversal, person: str) -> List[ItemRecommendation]:
    """같은 카테고리의 미구매 상품을 구매자 수 기반 점수로 추천.

    분자는 후보 상품을 산 고객 수, 분모는 두 상품의 카테고리 합집합 크기다.
    """
    bought = graph.purchases(person)
    records = []

    for item in bought:
        reached: Dict[str, Set[str]] = {}
        for category in graph.categories(item):
            for candidate in graph.members(category):
                if candidate in bought:
                    continue
                reached.setdefault(candidate, set()).update(graph.buyers(candidate))

        for candidate, buyers in reached.items():
            if not buyers:
                continue
            score = overlap_ratio(len(buyers), graph.categories(item), graph.categories(candidate))
            records.append(ItemRecommendation(item=candidate, score=score))

    return rank(records, "score", "item")


@_strategy(RecommendationType.COLLABORATIVE_PURCHASE)
def by_collaborative_purchase(graph: GraphTraversal, person: str) -> List[ItemFrequency]:
    """같은 상품을 산 고객들이 구매한 미구매 상품을 빈도순으로 추천."""
    bought = graph.purchases(person)

    peers: Dict[str, None] = {}
    for item in bought:
        for peer in graph.buyers(item):
            if peer != person:
                peers.setdefault(peer)

    reached: Dict[str, Set[str]] = {}
    for peer in peers:
        for candidate in graph.purchases(peer):
            if candidate in bought:
                continue
            reached.setdefault(candidate, set()).add(peer)

    records = [
        ItemFrequency(item=candidate, frequency=len(buyers))
        for candidate, buyers in reached.items()
    ]
    return rank(records, "frequency", "item")


@_strategy(RecommendationType.COLLABORATIVE)
def by_collaborative(
    graph: GraphTraversal,
    person: str,
    limit: int = MAX_COLLABORATIVE_LIMIT,
) -> List[SimilarCustomer]:
    """공통 구매 상품에 대한 구매 수량 합이 큰 유사 고객 (최대 3명)."""
    limit = max(0, min(limit, MAX_COLLABORATIVE_LIMIT))
    bought = graph.purchases(person)

    scores: Dict[str, float] = {}
    for item in bought:
        for peer, amount in graph.buyers(item).items():
            if peer == person:
                continue
            scores[peer] = scores.get(peer, 0) + amount

    records = [SimilarCustomer(person=peer, score=score) for peer, score in scores.items()]
    return rank(records, "score", "person", limit=limit)


STRATEGIES: Dict[RecommendationType, Callable] = {
    RecommendationType.CONTENT: by_content,
    RecommendationType.POPULARITY: by_popularity,
    RecommendationType.COLLABORATIVE_PURCHASE: by_collaborative_purchase,
    RecommendationType.COLLABORATIVE: by_collaborative,
}
