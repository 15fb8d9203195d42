"""그래프 기반 쇼핑 추천 엔진."""

__version__ = "0.1.0"
