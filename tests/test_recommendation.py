"""추천 전략 테스트."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from shopgraph.core.exceptions import MalformedDataError, OperationCancelledError, StoreUnavailableError
from shopgraph.core.logging import get_strategy, set_strategy
from shopgraph.graph import Hop
from shopgraph.recommendation import (
    ExecutionContext,
    by_collaborative,
    by_collaborative_purchase,
    by_content,
    by_popularity,
)

ITEM_STRATEGIES = [by_content, by_popularity, by_collaborative_purchase]
ALL_STRATEGIES = ITEM_STRATEGIES + [by_collaborative]


def _pairs(results, key="item", value="score"):
    return [(getattr(r, key), getattr(r, value)) for r in results]


class TestByContent:
    """콘텐츠 기반 추천 테스트."""

    def test_apple_juice_recommends_salt(self, shop):
        """Food 하나 공유, 합집합 {Food, Drinks, Spices} -> 1/3."""
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)

        results = by_content(shop.store, "Bob")

        assert len(results) == 1
        assert results[0].item == "Salt"
        assert results[0].score == pytest.approx(1 / 3)

    def test_ordered_by_score(self, shop):
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        shop.create_or_increment_buys("Bob", "Lotion", 1)

        results = by_content(shop.store, "Bob")

        assert [r.item for r in results] == ["Watermelon Cologne", "Salt"]
        assert results[0].score == pytest.approx(0.5)

    def test_duplicate_candidate_keeps_highest(self, shop):
        """여러 구매 상품에서 같은 후보가 나오면 최고 점수 하나만 남는다."""
        shop.add_catalog([{"name": "Pepper", "categories": ["Spices"], "price": 1}])
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        shop.create_or_increment_buys("Bob", "Pepper", 1)

        results = by_content(shop.store, "Bob")

        assert _pairs(results) == [("Salt", pytest.approx(0.5))]

    def test_multiple_shared_categories(self, shop):
        shop.add_catalog([{"name": "Tea", "categories": ["Food", "Drinks", "Spices"], "price": 1}])
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)

        results = by_content(shop.store, "Bob")

        # Tea: 2 / {Food, Drinks, Spices}, Salt: 1 / {Food, Drinks, Spices}
        assert _pairs(results) == [("Tea", pytest.approx(2 / 3)), ("Salt", pytest.approx(1 / 3))]

    def test_item_without_categories(self, shop):
        shop.create_item("Mystery Box", 9)
        shop.create_or_increment_buys("Bob", "Mystery Box", 1)
        assert by_content(shop.store, "Bob") == []

    def test_everything_bought(self, shop):
        for item in ["Apple Juice", "Salt"]:
            shop.create_or_increment_buys("Bob", item, 1)
        assert by_content(shop.store, "Bob") == []


class TestByPopularity:
    """구매자 수 기반 추천 테스트."""

    def test_no_other_buyers(self, shop):
        """후보 상품을 산 고객이 없으면 결과 없음."""
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        assert by_popularity(shop.store, "Bob") == []

    def test_buyer_count_over_category_union(self, shop):
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        shop.create_or_increment_buys("Carol", "Salt", 4)
        shop.create_or_increment_buys("Dave", "Salt", 1)

        results = by_popularity(shop.store, "Bob")

        # 고객 2명 / {Food, Drinks, Spices}
        assert _pairs(results) == [("Salt", pytest.approx(2 / 3))]

    def test_distinct_buyers_across_shared_categories(self, shop):
        """여러 카테고리를 공유해도 같은 고객은 한 번만 센다."""
        shop.add_catalog([{"name": "Tea", "categories": ["Food", "Drinks"], "price": 1}])
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        shop.create_or_increment_buys("Carol", "Tea", 1)

        results = by_popularity(shop.store, "Bob")

        # Tea: 1명 / {Food, Drinks}
        assert _pairs(results) == [("Tea", pytest.approx(0.5))]

    def test_score_can_exceed_one(self, shop):
        shop.create_or_increment_buys("Bob", "Lotion", 1)
        for name in ["Carol", "Dave", "Frank"]:
            shop.create_or_increment_buys(name, "Watermelon Cologne", 1)

        results = by_popularity(shop.store, "Bob")

        assert _pairs(results) == [("Watermelon Cologne", pytest.approx(1.5))]


class TestByCollaborativePurchase:
    """협업 구매 추천 테스트."""

    def test_frequency(self, shop):
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        for item in ["Apple Juice", "Salt", "Lotion"]:
            shop.create_or_increment_buys("Carol", item, 1)
        for item in ["Apple Juice", "Salt"]:
            shop.create_or_increment_buys("Dave", item, 1)
        shop.create_or_increment_buys("Frank", "Watermelon Cologne", 1)

        results = by_collaborative_purchase(shop.store, "Bob")

        assert _pairs(results, value="frequency") == [("Salt", 2), ("Lotion", 1)]

    def test_peer_counted_once(self, shop):
        """여러 공통 상품으로 연결된 고객도 한 번만 센다."""
        for item in ["Apple Juice", "Salt"]:
            shop.create_or_increment_buys("Bob", item, 1)
        for item in ["Apple Juice", "Salt", "Lotion"]:
            shop.create_or_increment_buys("Carol", item, 3)

        results = by_collaborative_purchase(shop.store, "Bob")

        assert _pairs(results, value="frequency") == [("Lotion", 1)]

    def test_ties_keep_peer_discovery_order(self, shop):
        """동점이면 유사 고객을 발견한 순서를 따른다."""
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        shop.create_or_increment_buys("Carol", "Apple Juice", 1)
        shop.create_or_increment_buys("Carol", "Lotion", 1)
        shop.create_or_increment_buys("Dave", "Apple Juice", 1)
        shop.create_or_increment_buys("Dave", "Salt", 1)

        results = by_collaborative_purchase(shop.store, "Bob")

        assert _pairs(results, value="frequency") == [("Lotion", 1), ("Salt", 1)]

    def test_frequency_is_int(self, shop):
        shop.create_or_increment_buys("Bob", "Salt", 1)
        shop.create_or_increment_buys("Carol", "Salt", 1)
        shop.create_or_increment_buys("Carol", "Lotion", 1)
        assert isinstance(by_collaborative_purchase(shop.store, "Bob")[0].frequency, int)


class TestByCollaborative:
    """유사 고객 추천 테스트."""

    def test_carol_score(self, shop):
        shop.create_or_increment_buys("Bob", "Apple Juice", 2)
        shop.create_or_increment_buys("Carol", "Apple Juice", 5)

        results = by_collaborative(shop.store, "Bob")

        assert _pairs(results, key="person") == [("Carol", 5)]

    def test_only_shared_items_count(self, shop):
        """공통 상품의 수량만 합산."""
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        shop.create_or_increment_buys("Carol", "Apple Juice", 5)
        shop.create_or_increment_buys("Carol", "Lotion", 100)

        assert _pairs(by_collaborative(shop.store, "Bob"), key="person") == [("Carol", 5)]

    def test_sum_over_shared_items(self, shop):
        for item in ["Apple Juice", "Salt"]:
            shop.create_or_increment_buys("Bob", item, 1)
        shop.create_or_increment_buys("Carol", "Apple Juice", 2)
        shop.create_or_increment_buys("Carol", "Salt", 3)
        shop.create_or_increment_buys("Dave", "Salt", 4)

        assert _pairs(by_collaborative(shop.store, "Bob"), key="person") == [("Carol", 5), ("Dave", 4)]

    def test_top_three(self, shop):
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        for amount in range(1, 6):
            shop.create_or_increment_buys(f"P{amount}", "Apple Juice", amount)

        results = by_collaborative(shop.store, "Bob")

        assert _pairs(results, key="person") == [("P5", 5), ("P4", 4), ("P3", 3)]

    def test_limit_never_above_three(self, shop):
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        for amount in range(1, 6):
            shop.create_or_increment_buys(f"P{amount}", "Apple Juice", amount)

        assert len(by_collaborative(shop.store, "Bob", limit=10)) == 3
        assert len(by_collaborative(shop.store, "Bob", limit=1)) == 1

    def test_excludes_self(self, shop):
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        assert by_collaborative(shop.store, "Bob") == []


class TestSharedProperties:
    """모든 전략 공통 성질."""

    @pytest.fixture
    def busy_shop(self, shop):
        shop.add_catalog([
            {"name": "Tea", "categories": ["Food", "Drinks"], "price": 1},
            {"name": "Pepper", "categories": ["Spices", "Food"], "price": 1},
        ])
        purchases = {
            "Bob": ["Apple Juice", "Lotion"],
            "Carol": ["Apple Juice", "Salt", "Tea", "Watermelon Cologne"],
            "Dave": ["Lotion", "Pepper", "Salt"],
            "Frank": ["Tea", "Apple Juice", "Pepper"],
            "Gina": ["Watermelon Cologne", "Lotion"],
        }
        for person, items in purchases.items():
            for item in items:
                shop.create_or_increment_buys(person, item, 1)
        return shop

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_unknown_person_is_empty(self, shop, strategy):
        """구매 이력이 없으면 빈 결과, 오류 아님."""
        assert strategy(shop.store, "Eve") == []

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_person_without_purchases_is_empty(self, shop, strategy):
        shop.create_person("Eve")
        shop.create_or_increment_buys("Carol", "Salt", 1)
        assert strategy(shop.store, "Eve") == []

    @pytest.mark.parametrize("strategy", ITEM_STRATEGIES)
    def test_bought_items_excluded(self, busy_shop, strategy):
        results = strategy(busy_shop.store, "Bob")
        assert results
        assert not {r.item for r in results} & {"Apple Juice", "Lotion"}

    @pytest.mark.parametrize("strategy", ITEM_STRATEGIES)
    def test_unique_items(self, busy_shop, strategy):
        results = strategy(busy_shop.store, "Bob")
        names = [r.item for r in results]
        assert len(names) == len(set(names))

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_sorted_descending(self, busy_shop, strategy):
        results = strategy(busy_shop.store, "Bob")
        field = "frequency" if strategy is by_collaborative_purchase else "score"
        values = [getattr(r, field) for r in results]
        assert values == sorted(values, reverse=True)

    def test_collaborative_no_self_and_unique(self, busy_shop):
        results = by_collaborative(busy_shop.store, "Bob")
        names = [r.person for r in results]
        assert "Bob" not in names
        assert len(names) == len(set(names)) <= 3

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_read_only(self, busy_shop, strategy):
        """추천은 그래프를 변경하지 않는다."""
        before = busy_shop.get_stats()
        purchases = busy_shop.store.traverse(Hop.PURCHASES, {"person": "Bob"})
        strategy(busy_shop.store, "Bob")
        assert busy_shop.get_stats() == before
        assert busy_shop.store.traverse(Hop.PURCHASES, {"person": "Bob"}) == purchases

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_deterministic(self, busy_shop, strategy):
        assert strategy(busy_shop.store, "Bob") == strategy(busy_shop.store, "Bob")


class TestErrorPropagation:
    """오류 전달 테스트."""

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_store_unavailable_wrapped_with_strategy(self, shop, strategy):
        """저장소 오류는 빈 결과가 아니라 전략 이름과 함께 전달된다."""
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        shop.store.close()

        with pytest.raises(StoreUnavailableError) as exc_info:
            strategy(shop.store, "Bob")

        name = exc_info.value.details["strategy"]
        assert exc_info.value.message.startswith(f"[{name}]")
        assert isinstance(exc_info.value.__cause__, StoreUnavailableError)

    def test_missing_key_in_row(self):
        """결과 행에 키가 없으면 MalformedDataError."""
        store = MagicMock()
        store.traverse.return_value = [{"item": None, "amount": 1}]

        with pytest.raises(MalformedDataError):
            by_content(store, "Bob")

    def test_blank_person(self, shop):
        with pytest.raises(MalformedDataError):
            by_collaborative(shop.store, "")

    def test_strategy_context_reset(self, shop):
        """전략 실행 후 이전 로그 컨텍스트로 복원."""
        assert get_strategy() is None
        by_content(shop.store, "Bob")
        assert get_strategy() is None

        set_strategy("outer")
        by_popularity(shop.store, "Bob")
        assert get_strategy() == "outer"


class TestCancellation:
    """취소 테스트."""

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_cancelled_before_start(self, shop, strategy):
        ctx = ExecutionContext()
        ctx.cancel("test")
        with pytest.raises(OperationCancelledError):
            strategy(shop.store, "Bob", ctx)

    def test_cancelled_mid_traversal(self, shop):
        """탐색 도중 취소되면 다음 홉에서 중단."""
        shop.create_or_increment_buys("Bob", "Apple Juice", 1)
        ctx = ExecutionContext()
        calls = []

        class CancellingStore:
            def traverse(self, pattern, params):
                calls.append(pattern)
                ctx.cancel("test")
                return shop.store.traverse(pattern, params)

        with pytest.raises(OperationCancelledError):
            by_content(CancellingStore(), "Bob", ctx)
        assert len(calls) == 1

    def test_expired_deadline(self, shop):
        ctx = ExecutionContext(timeout=0)
        with pytest.raises(OperationCancelledError) as exc_info:
            by_content(shop.store, "Bob", ctx)
        assert exc_info.value.details["reason"] == "deadline_exceeded"


class TestStrategyLogging:
    """전략 로그 컨텍스트 테스트."""

    def test_error_log_carries_strategy(self, shop, caplog):
        shop.store.close()

        with caplog.at_level(logging.ERROR, logger="shopgraph.recommendation.strategies"):
            with pytest.raises(StoreUnavailableError):
                by_collaborative(shop.store, "Bob")

        record = next(r for r in caplog.records if r.name == "shopgraph.recommendation.strategies")
        assert record.strategy == "collaborative"
