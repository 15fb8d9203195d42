"""집합 유사도 계산."""

from __future__ import annotations

from typing import AbstractSet, Iterable, List


def dedupe_names(names: Iterable[str]) -> List[str]:
    """처음 등장한 순서를 유지하며 중복 제거."""
    seen = set()
    result = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


def overlap_ratio(intersection: float, s1: Iterable[str], s2: Iterable[str]) -> float:
    """탐색으로 센 교집합 크기를 두 집합의 합집합 크기로 나눈 값.

    합집합이 비어 있으면 0.0을 반환합니다.
    """
    union = set(s1) | set(s2)
    if not union:
        return 0.0
    return (1.0 * intersection) / len(union)


def jaccard(set_a: AbstractSet[str], set_b: AbstractSet[str]) -> float:
    """Jaccard 유사도 |A ∩ B| / |A ∪ B|.

    두 집합이 모두 비어 있으면 0.0. 대칭이며 항상 [0, 1] 범위.
    """
    set_a = set(set_a)
    set_b = set(set_b)
    return overlap_ratio(len(set_a & set_b), set_a, set_b)
