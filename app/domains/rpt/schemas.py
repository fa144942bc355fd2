# app/domains/rpt/schemas.py

"""
'rpt' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from datetime import datetime
from pydantic import Field
from sqlmodel import SQLModel


class StatementSummary(SQLModel):
    label: str = Field(..., description="기간 라벨 (month, six_months, year, all ...)")
    start: datetime = Field(..., description="기간 시작 (포함)")
    end: datetime = Field(..., description="기간 종료 (포함)")
    count: int = Field(..., description="판매 건수")
    total_carat: float = Field(..., description="판매 중량 합계 (ct)")
    grand_total: float = Field(..., description="판매 총액 합계")
