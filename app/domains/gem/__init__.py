# app/domains/gem/__init__.py

"""
FastAPI 애플리케이션의 'gem' 도메인 패키지입니다.

'gem' 도메인은 보석 재고를 로트(lot) 단위로 관리합니다. 로트는 코드, 이름, 형태,
낱개 수량, 중량(ct), 캐럿당 단가, 총액으로 구성되며, 총액은 항상
중량 x 단가로 유지됩니다. 판매 정산 자체는 'sales' 도메인에서 처리합니다.

주요 서브모듈:
- `models.py`: gemstones 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청/응답 유효성 검사를 위한 Pydantic 모델.
- `crud.py`: 비동기 CRUD 로직 (총액 재계산, 검색, 행 잠금 조회).
- `routers.py`: 보석 로트 API 엔드포인트 (판매 엔드포인트 포함).
"""

__title__ = "SpheneGem Gemstone Domain"
__description__ = "Manages gemstone lots kept lot-by-lot in inventory."
__version__ = "0.1.0"
__all__ = []
