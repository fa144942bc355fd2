# app/domains/sales/__init__.py

"""
FastAPI 애플리케이션의 'sales' 도메인 패키지입니다.

판매 한 건은 보석 로트를 차감(또는 소진 시 삭제)하고 판매 기록을 남기며,
두 쓰기는 하나의 트랜잭션으로 처리됩니다. 판매 후 송장 PDF가 비동기로 생성됩니다.

주요 서브모듈:
- `models.py`: sales 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 판매 요청/응답 Pydantic 모델.
- `services.py`: 재고 차감 계산 (순수 함수).
- `crud.py`: 판매 정산(행 잠금, 단일 커밋) 및 조회.
- `invoice.py`: reportlab 기반 송장 PDF 생성.
- `tasks.py`: ARQ 송장 작업과 예약 헬퍼.
- `routers.py`: 판매 기록 조회/삭제 API.
"""

__title__ = "SpheneGem Sales Domain"
__description__ = "Reconciles sales against gemstone lots and emits invoices."
__version__ = "0.1.0"
__all__ = []
