# app/domains/gem/models.py

"""
'gem' 도메인 (보석 재고 로트)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime, UTC
from decimal import Decimal, ROUND_HALF_UP
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Numeric
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


TWO_PLACES = Decimal("0.01")
# weight 컬럼 Numeric(12, 3) 의 소수 자릿수
CARAT_PLACES = Decimal("0.001")


def quantize_carat(value) -> Decimal:
    """중량을 컬럼 정밀도(소수점 셋째 자리)로 반올림합니다."""
    return Decimal(str(value)).quantize(CARAT_PLACES, rounding=ROUND_HALF_UP)


def derive_total_price(weight: Decimal, price_per_carat: Decimal) -> Decimal:
    """총액 = 중량(ct) x 캐럿당 단가, 소수점 둘째 자리 반올림."""
    return (Decimal(weight) * Decimal(price_per_carat)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# =============================================================================
# 1. gemstones 테이블 모델
# =============================================================================
class GemstoneBase(SQLModel):
    # 사람이 읽을 수 있는 코드 (고유하지 않음)
    code: str = Field(max_length=50, index=True, description="보석 코드 (사람이 식별하는 용도)")
    name: str = Field(max_length=100)
    shape: Optional[str] = Field(default=None, max_length=50)
    quantity: int = Field(default=0, description="로트에 남은 낱개 수량")
    weight: Decimal = Field(sa_column=Column(Numeric(12, 3), nullable=False), description="남은 중량 (ct)")
    price_per_carat: Decimal = Field(sa_column=Column(Numeric(14, 2), nullable=False))
    image_url: Optional[str] = Field(default=None, max_length=255)
    remark: Optional[str] = Field(default=None)


class Gemstone(GemstoneBase, table=True):
    __tablename__ = "gemstones"

    id: Optional[int] = Field(default=None, primary_key=True)
    # weight x price_per_carat 에서 파생되며 모든 변경 후 다시 계산됩니다.
    total_price: Decimal = Field(sa_column=Column(Numeric(16, 2), nullable=False))
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )

    def refresh_total_price(self) -> None:
        self.total_price = derive_total_price(self.weight, self.price_per_carat)
