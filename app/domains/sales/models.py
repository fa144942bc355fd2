# app/domains/sales/models.py

"""
'sales' 도메인 (판매 기록)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

판매 기록은 판매 시점의 로트 정보(코드/이름/형태/이미지/비고)를 복사해 보관합니다.
로트는 이후 삭제될 수 있으므로 gemstone_id 에는 외래 키를 걸지 않습니다.
"""

from typing import Optional
from datetime import datetime, UTC
from decimal import Decimal
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Numeric
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class SaleBase(SQLModel):
    gemstone_id: int = Field(index=True, description="원본 로트 ID (외래 키 아님)")
    code: Optional[str] = Field(default=None, max_length=50)
    name: Optional[str] = Field(default=None, max_length=100)
    shape: Optional[str] = Field(default=None, max_length=50)
    image_url: Optional[str] = Field(default=None, max_length=255)
    remark: Optional[str] = Field(default=None)
    quantity: int = Field(description="판매 낱개 수량")
    carat_sold: Decimal = Field(sa_column=Column(Numeric(12, 3), nullable=False))
    marking_price: Decimal = Field(sa_column=Column(Numeric(14, 2), nullable=False), description="판매 시점 캐럿당 단가")
    selling_price: Decimal = Field(sa_column=Column(Numeric(14, 2), nullable=False))
    total_amount: Decimal = Field(sa_column=Column(Numeric(16, 2), nullable=False))


class Sale(SaleBase, table=True):
    __tablename__ = "sales"

    id: Optional[int] = Field(default=None, primary_key=True)
    sold_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), index=True),
        description="판매 일시"
    )
