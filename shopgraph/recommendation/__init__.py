"""추천 시스템 모듈.

그래프 탐색 기반 콘텐츠/인기도/협업 추천 제공.
"""

from .context import ExecutionContext
from .models import (
    ItemFrequency,
    ItemRecommendation,
    RecommendationResponse,
    RecommendationType,
    SimilarCustomer,
)
from .service import (
    RecommendationService,
    get_recommendation_service,
)
from .similarity import jaccard
from .strategies import (
    STRATEGIES,
    by_collaborative,
    by_collaborative_purchase,
    by_content,
    by_popularity,
)

__all__ = [
    "ExecutionContext",
    "ItemFrequency",
    "ItemRecommendation",
    "RecommendationResponse",
    "RecommendationService",
    "RecommendationType",
    "STRATEGIES",
    "SimilarCustomer",
    "by_collaborative",
    "by_collaborative_purchase",
    "by_content",
    "by_popularity",
    "get_recommendation_service",
    "jaccard",
]
