"""pytest 설정 및 공통 fixture."""

import pytest

from shopgraph.config import Config
from shopgraph.core.logging import request_id_var, strategy_var
from shopgraph.graph import InMemoryGraph, ShopRepository, reset_graph_store
from shopgraph.recommendation import RecommendationService

# pytest-asyncio 모드 설정
pytest_plugins = ["pytest_asyncio"]

CATALOG = [
    {"name": "Apple Juice", "categories": ["Food", "Drinks"], "price": 1},
    {"name": "Salt", "categories": ["Food", "Spices"], "price": 2},
    {"name": "Lotion", "categories": ["Cosmetics"], "price": 3},
    {"name": "Watermelon Cologne", "categories": ["Cosmetics", "Fragrance"], "price": 4},
]


@pytest.fixture(autouse=True)
def reset_singletons():
    """각 테스트 전/후에 싱글톤 리셋."""
    Config.reset_instance()
    RecommendationService.reset_instance()
    reset_graph_store()
    yield
    Config.reset_instance()
    RecommendationService.reset_instance()
    reset_graph_store()


@pytest.fixture(autouse=True)
def reset_log_context():
    """요청 ID/추천 전략 로그 컨텍스트 초기화."""
    request_id_token = request_id_var.set(None)
    strategy_token = strategy_var.set(None)
    yield
    strategy_var.reset(strategy_token)
    request_id_var.reset(request_id_token)


@pytest.fixture
def store():
    """빈 인메모리 그래프."""
    return InMemoryGraph()


@pytest.fixture
def repo(store):
    """인메모리 그래프 기반 레포지토리."""
    return ShopRepository(store)


@pytest.fixture
def shop(repo):
    """카탈로그가 등록된 레포지토리."""
    repo.add_catalog(CATALOG)
    return repo
