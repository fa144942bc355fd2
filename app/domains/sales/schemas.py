# app/domains/sales/schemas.py

"""
'sales' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from pydantic import Field
from sqlmodel import SQLModel


class SaleCreate(SQLModel):
    """판매 요청. 모든 숫자 필드는 필수입니다."""
    gemstone_id: int = Field(..., description="판매할 보석 로트 ID")
    quantity: int = Field(..., description="판매 낱개 수량")
    carat_sold: float = Field(..., description="판매 중량 (ct)")
    selling_price: float = Field(..., description="캐럿당 판매 단가")
    total_amount: float = Field(..., description="판매 총액 (요청값 그대로 저장)")


class SaleResponse(SQLModel):
    id: int = Field(..., description="판매 기록 고유 ID")
    gemstone_id: int
    code: Optional[str] = None
    name: Optional[str] = None
    shape: Optional[str] = None
    image_url: Optional[str] = None
    remark: Optional[str] = None
    quantity: int
    carat_sold: float
    marking_price: float
    selling_price: float
    total_amount: float
    sold_at: datetime

    class Config:
        from_attributes = True


class SellResult(SQLModel):
    message: str = Field("Sale successful")
    invoice: str = Field(..., description="생성될 송장 파일명 (invoice_<saleId>.pdf)")
    sale_id: int
