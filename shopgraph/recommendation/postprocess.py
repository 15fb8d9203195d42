"""추천 결과 후처리: 내림차순 정렬과 키 기준 중복 제거."""

from __future__ import annotations

from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def sort_desc(records: Sequence[T], field: str) -> List[T]:
    """field 내림차순 정렬. 동점은 기존 순서를 유지한다."""
    return sorted(records, key=lambda r: getattr(r, field), reverse=True)


def dedupe_by_key(records: Sequence[T], key: str) -> List[T]:
    """key 값이 같은 레코드 중 처음 것만 남긴다."""
    seen = set()
    result = []
    for record in records:
        value = getattr(record, key)
        if value in seen:
            continue
        seen.add(value)
        result.append(record)
    return result


def rank(
    records: Sequence[T],
    score_field: str,
    key: str,
    limit: Optional[int] = None,
) -> List[T]:
    """정렬 -> 중복 제거 -> (선택) 상위 limit개."""
    ranked = dedupe_by_key(sort_desc(records, score_field), key)
    if limit is not None:
        ranked = ranked[:limit]
    return ranked
