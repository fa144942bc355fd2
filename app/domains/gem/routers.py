# app/domains/gem/routers.py

"""
'gem' 도메인 (보석 재고 로트)의 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List, Optional

from arq.connections import ArqRedis
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.exceptions import NotFoundError
from app.domains.gem import crud as gem_crud
from app.domains.gem import schemas as gem_schemas
from app.domains.sales import crud as sales_crud
from app.domains.sales import schemas as sales_schemas
from app.domains.sales import tasks as sales_tasks

router = APIRouter(
    tags=["Gemstone Inventory (보석 재고 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 보석 로트 등록 / 조회
# =============================================================================
@router.post("", response_model=gem_schemas.GemstoneResponse, status_code=status.HTTP_201_CREATED)
@router.post("/add", response_model=gem_schemas.GemstoneResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_gemstone(
    gemstone_in: gem_schemas.GemstoneCreate,
    db: AsyncSession = Depends(deps.get_db_session),
):
    """새로운 보석 로트를 등록합니다. 총액은 서버에서 계산됩니다."""
    return await gem_crud.gemstone.create(db=db, obj_in=gemstone_in)


@router.get("", response_model=List[gem_schemas.GemstoneResponse])
@router.get("/all", response_model=List[gem_schemas.GemstoneResponse], include_in_schema=False)
async def read_gemstones(db: AsyncSession = Depends(deps.get_db_session)):
    """모든 보석 로트 목록을 조회합니다."""
    return await gem_crud.gemstone.get_multi(db, order_by_field="id")


@router.get("/search", response_model=List[gem_schemas.GemstoneResponse])
async def search_gemstones(
    query: Optional[str] = Query("", description="코드/이름/형태/중량 부분 일치 검색어"),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """보석 로트를 검색합니다."""
    return await gem_crud.gemstone.search(db, query=query or "")


# =============================================================================
# 2. 판매
# =============================================================================
@router.post("/sell", response_model=sales_schemas.SellResult)
async def sell_gemstone(
    sale_in: sales_schemas.SaleCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(deps.get_db_session),
    arq_redis_pool: Optional[ArqRedis] = Depends(deps.get_arq_pool),
):
    """
    보석 로트를 판매합니다.
    판매 기록과 재고 차감이 커밋된 뒤 송장 생성이 예약되며, 응답은 송장 생성을 기다리지 않습니다.
    """
    sale = await sales_crud.sale.sell(db, sale_in=sale_in)
    invoice = await sales_tasks.schedule_invoice(sale, arq_redis_pool, background_tasks)
    return sales_schemas.SellResult(message="Sale successful", invoice=invoice, sale_id=sale.id)


# =============================================================================
# 3. 단건 조회 / 수정 / 삭제
# =============================================================================
@router.get("/{gemstone_id}", response_model=gem_schemas.GemstoneResponse)
async def read_gemstone(gemstone_id: int, db: AsyncSession = Depends(deps.get_db_session)):
    """특정 ID의 보석 로트를 조회합니다."""
    db_gemstone = await gem_crud.gemstone.get(db, id=gemstone_id)
    if db_gemstone is None:
        raise NotFoundError("Gemstone not found")
    return db_gemstone


@router.put("/{gemstone_id}", response_model=gem_schemas.GemstoneResponse)
async def update_gemstone(
    gemstone_id: int,
    gemstone_in: gem_schemas.GemstoneUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
):
    """보석 로트 정보를 수정합니다. 총액은 다시 계산됩니다."""
    db_gemstone = await gem_crud.gemstone.get(db, id=gemstone_id)
    if db_gemstone is None:
        raise NotFoundError("Gemstone not found")
    return await gem_crud.gemstone.update(db=db, db_obj=db_gemstone, obj_in=gemstone_in)


@router.delete("/{gemstone_id}", response_model=gem_schemas.MessageResponse)
async def delete_gemstone(gemstone_id: int, db: AsyncSession = Depends(deps.get_db_session)):
    """보석 로트를 삭제합니다."""
    deleted = await gem_crud.gemstone.delete(db, id=gemstone_id)
    if deleted is None:
        raise NotFoundError("Gemstone not found")
    return {"message": "Gemstone deleted"}
