# app/domains/gem/schemas.py

"""
'gem' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from pydantic import Field
from sqlmodel import SQLModel


# =============================================================================
# 1. gemstones 테이블 스키마
# =============================================================================
class GemstoneBase(SQLModel):
    code: str = Field(..., min_length=1, max_length=50, description="보석 코드 (사람이 식별하는 용도)")
    name: str = Field(..., max_length=100, description="보석 명칭")
    shape: Optional[str] = Field(None, max_length=50, description="컷 형태 (예: Oval, Round)")
    quantity: int = Field(0, ge=0, description="낱개 수량")
    weight: float = Field(..., ge=0, description="중량 (ct)")
    price_per_carat: float = Field(..., ge=0, description="캐럿당 단가")
    image_url: Optional[str] = Field(None, max_length=255, description="이미지 참조 경로")
    remark: Optional[str] = Field(None, description="비고")


class GemstoneCreate(GemstoneBase):
    # 총액은 서버에서 weight x price_per_carat 로 계산하므로 입력값은 무시됩니다.
    total_price: Optional[float] = Field(None, description="무시됨 (서버에서 계산)")


class GemstoneUpdate(SQLModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    shape: Optional[str] = Field(None, max_length=50)
    quantity: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    price_per_carat: Optional[float] = Field(None, ge=0)
    total_price: Optional[float] = Field(None, description="무시됨 (서버에서 계산)")
    image_url: Optional[str] = Field(None, max_length=255)
    remark: Optional[str] = Field(None)


class GemstoneResponse(GemstoneBase):
    id: int = Field(..., description="보석 로트 고유 ID")
    total_price: float = Field(..., description="총액 (weight x price_per_carat)")
    created_at: Optional[datetime] = Field(None, description="레코드 생성 일시")

    class Config:
        from_attributes = True


class MessageResponse(SQLModel):
    message: str
