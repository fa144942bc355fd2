# app/domains/rpt/__init__.py

"""
FastAPI 애플리케이션의 'rpt' (Report) 도메인 패키지입니다.

기간별 판매 명세서를 집계하고 여러 페이지의 표 형식 PDF로 렌더링합니다.

주요 서브모듈:
- `services.py`: 기간 토큰 해석과 명세서 집계.
- `pdf.py`: 페이지 분할 계획과 reportlab 렌더링.
- `schemas.py`: 명세서 요약 응답 모델.
- `routers.py`: 명세서 다운로드 API.
"""

__title__ = "SpheneGem Report Domain"
__description__ = "Aggregates sales over date ranges and renders paginated statements."
__version__ = "0.1.0"
__all__ = []
