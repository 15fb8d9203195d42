from __future__ import annotations

import asyncio
import time
from typing import Optional

from shopgraph.config import RecommendationConfig, get_config
from shopgraph.core.exceptions import MalformedDataError, OperationCancelledError
from shopgraph.core.logging import get_logger, set_request_id
from shopgraph.graph.factory import get_graph_store
from shopgraph.graph.store import GraphStore
from shopgraph.monitoring.metrics import set_app_info

from .context import ExecutionContext
from .models import RecommendationResponse, RecommendationType
from .strategies import STRATEGIES

logger = get_logger(__name__)


class RecommendationService:
    _instance: Optional["RecommendationService"] = None

    def __init__(
        self,
        store: Optional[GraphStore] = None,
        config: Optional[RecommendationConfig] = None,
    ):
        self._store = store
        self._config = config

    @classmethod
    def get_instance(cls) -> "RecommendationService":
        if cls._instance is None:
            app = get_config().app
            set_app_info(app.name, app.version, app.environment)
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    @property
    def store(self) -> GraphStore:
        if self._store is None:
            self._store = get_graph_store()
        return self._store

    @property
    def config(self) -> RecommendationConfig:
        if self._config is None:
            self._config = get_config().recommendation
        return self._config

    def is_available(self) -> bool:
        return self.store.is_available()

    async def recommend(
        self,
        kind: RecommendationType | str,
        person: str,
        request_id: Optional[str] = None,
    ) -> RecommendationResponse:
        """추천 전략 실행.

        전략은 워커 스레드에서 실행되며, 제한 시간을 넘기거나 호출자가
        취소하면 실행 컨텍스트를 취소해 다음 탐색 홉에서 중단시킨다.

        Args:
            kind: 추천 유형
            person: 기준 고객명
            request_id: 로그 상관관계용 요청 ID (없으면 생성)
        """
        try:
            kind = RecommendationType(kind)
        except ValueError:
            raise MalformedDataError(f"알 수 없는 추천 유형: {kind}", details={"kind": str(kind)}) from None

        request_id = set_request_id(request_id)
        timeout = self.config.timeout_seconds
        ctx = ExecutionContext(timeout=timeout)
        kwargs = {}
        if kind is RecommendationType.COLLABORATIVE:
            kwargs["limit"] = self.config.collaborative_limit

        start_time = time.time()
        try:
            results = await asyncio.wait_for(
                asyncio.to_thread(STRATEGIES[kind], self.store, person, ctx, **kwargs),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            ctx.cancel("timeout")
            logger.warning(f"{kind.value} 추천 시간 초과: {person} ({timeout}s)")
            raise OperationCancelledError(
                f"{kind.value} 추천이 {timeout}초 안에 끝나지 않았습니다",
                details={"strategy": kind.value, "timeout": timeout},
            ) from None
        except asyncio.CancelledError:
            ctx.cancel("caller_cancelled")
            raise

        return RecommendationResponse(
            recommendation_type=kind,
            person=person,
            results=results,
            total_count=len(results),
            query_time_ms=(time.time() - start_time) * 1000,
            metadata={"request_id": request_id, "backend": self.store.backend},
        )

    async def by_content(self, person: str) -> RecommendationResponse:
        return await self.recommend(RecommendationType.CONTENT, person)

    async def by_popularity(self, person: str) -> RecommendationResponse:
        return await self.recommend(RecommendationType.POPULARITY, person)

    async def by_collaborative_purchase(self, person: str) -> RecommendationResponse:
        return await self.recommend(RecommendationType.COLLABORATIVE_PURCHASE, person)

    async def by_collaborative(self, person: str) -> RecommendationResponse:
        return await self.recommend(RecommendationType.COLLABORATIVE, person)


def get_recommendation_service() -> RecommendationService:
    return RecommendationService.get_instance()
