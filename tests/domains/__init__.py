# tests/domains/__init__.py

"""
FastAPI 애플리케이션의 도메인별 테스트 스위트 패키지입니다.

- `test_gem_n.py`: 'gem' 도메인 (보석 재고 로트) 테스트.
- `test_sales_n.py`: 'sales' 도메인 (판매 정산, 송장) 테스트.
- `test_rpt_n.py`: 'rpt' 도메인 (판매 명세서 집계, PDF 렌더링) 테스트.
"""

__title__ = "SpheneGem Domain Tests"
__description__ = "Categorized tests for each business domain in the SpheneGem application."
__version__ = "0.1.0"
__all__ = []
