"""추천 결과 Pydantic 모델."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field


class RecommendationType(str, Enum):
    """추천 유형."""

    CONTENT = "content"
    POPULARITY = "popularity"
    COLLABORATIVE_PURCHASE = "collaborative_purchase"
    COLLABORATIVE = "collaborative"


class ItemRecommendation(BaseModel):
    """점수가 매겨진 추천 상품."""

    item: str = Field(..., description="상품명")
    score: float = Field(..., ge=0, description="교집합 / 카테고리 합집합 크기")


class ItemFrequency(BaseModel):
    """유사 고객 구매 빈도 기반 추천 상품."""

    item: str = Field(..., description="상품명")
    frequency: int = Field(..., ge=1, description="이 상품을 구매한 유사 고객 수")


class SimilarCustomer(BaseModel):
    """유사 고객."""

    person: str = Field(..., description="고객명")
    score: float = Field(..., ge=0, description="공통 상품에 대한 구매 수량 합")


RecommendationRecord = Union[ItemRecommendation, ItemFrequency, SimilarCustomer]


class RecommendationResponse(BaseModel):
    """추천 응답."""

    recommendation_type: RecommendationType = Field(..., description="추천 유형")
    person: str = Field(..., description="기준 고객")
    results: List[RecommendationRecord] = Field(default_factory=list, description="순위가 매겨진 결과")
    total_count: int = Field(..., description="결과 수")
    query_time_ms: float = Field(..., description="계산 소요 시간 (ms)")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="추가 메타데이터")
