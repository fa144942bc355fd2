# app/domains/sales/routers.py

"""
'sales' 도메인 (판매 기록)의 API 엔드포인트를 정의하는 모듈입니다.
판매 기록은 수정할 수 없으며 조회와 삭제만 제공합니다.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.exceptions import NotFoundError
from app.domains.gem import schemas as gem_schemas
from app.domains.sales import crud as sales_crud
from app.domains.sales import schemas as sales_schemas

router = APIRouter(
    tags=["Sales (판매 기록)"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=List[sales_schemas.SaleResponse])
async def read_sales(db: AsyncSession = Depends(deps.get_db_session)):
    """모든 판매 기록을 최신순으로 조회합니다."""
    return await sales_crud.sale.list_recent(db)


@router.get("/{sale_id}", response_model=sales_schemas.SaleResponse)
async def read_sale(sale_id: int, db: AsyncSession = Depends(deps.get_db_session)):
    """특정 ID의 판매 기록을 조회합니다."""
    db_sale = await sales_crud.sale.get(db, id=sale_id)
    if db_sale is None:
        raise NotFoundError("Sale not found")
    return db_sale


@router.delete("/{sale_id}", response_model=gem_schemas.MessageResponse)
async def delete_sale(sale_id: int, db: AsyncSession = Depends(deps.get_db_session)):
    """판매 기록을 삭제합니다. (재고는 복원되지 않습니다)"""
    deleted = await sales_crud.sale.delete(db, id=sale_id)
    if deleted is None:
        raise NotFoundError("Sale not found")
    return {"message": "Sale deleted"}
