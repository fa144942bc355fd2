# app/domains/sales/crud.py

"""
'sales' 도메인의 CRUD 작업을 위한 함수들을 정의하는 모듈입니다.

판매 기록 생성과 로트 차감/삭제는 하나의 세션, 하나의 커밋으로 처리됩니다.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import NotFoundError, StoreFailureError
from app.domains.gem import crud as gem_crud
from app.domains.gem import models as gem_models
from app.domains.sales import models as sales_models
from app.domains.sales import schemas as sales_schemas
from app.domains.sales.services import check_total_amount, plan_sale

logger = logging.getLogger(__name__)


class SaleCRUD(CRUDBase[sales_models.Sale, sales_schemas.SaleCreate, sales_schemas.SaleCreate]):
    """Sale 모델에 특화된 CRUD 작업을 처리합니다."""

    async def sell(self, db: AsyncSession, *, sale_in: sales_schemas.SaleCreate) -> sales_models.Sale:
        """
        보석 로트에 대한 판매를 정산합니다.

        1. 로트를 행 잠금과 함께 조회 (없으면 NotFoundError, 아무것도 기록하지 않음)
        2. 남은 중량/수량 계산
        3. 로트 정보를 복사한 판매 기록 생성
        4. 소진되면 로트 삭제, 아니면 중량/수량/총액 갱신
        5. 단일 커밋. SQLAlchemyError 발생 시 전체 롤백 후 StoreFailureError
        """
        try:
            lot = await gem_crud.gemstone.get_for_update(db, sale_in.gemstone_id)
            if lot is None:
                raise NotFoundError("Gemstone not found")

            plan = plan_sale(lot, sale_in)
            check_total_amount(sale_in)

            sale = self.model(
                gemstone_id=lot.id,
                code=lot.code,
                name=lot.name,
                shape=lot.shape,
                image_url=lot.image_url,
                remark=lot.remark,
                quantity=sale_in.quantity,
                carat_sold=gem_models.quantize_carat(sale_in.carat_sold),
                marking_price=lot.price_per_carat,
                selling_price=Decimal(str(sale_in.selling_price)),
                total_amount=Decimal(str(sale_in.total_amount)),
            )
            db.add(sale)

            if plan.exhausted:
                await db.delete(lot)
            else:
                lot.weight = plan.remaining_carat
                lot.quantity = plan.remaining_quantity
                lot.total_price = plan.new_total_price
                db.add(lot)

            await db.commit()
            await db.refresh(sale)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("Sale on gemstone %s rolled back", sale_in.gemstone_id)
            raise StoreFailureError() from e

        logger.info(
            "Sale %s recorded for gemstone %s (%s)",
            sale.id, sale.gemstone_id, "lot removed" if plan.exhausted else "lot updated",
        )
        return sale

    async def list_recent(self, db: AsyncSession) -> List[sales_models.Sale]:
        """전체 판매 기록을 판매 일시 내림차순으로 조회합니다."""
        return await self.get_filtered(db, order_by_field="sold_at", order_desc=True)

    async def list_between(
        self,
        db: AsyncSession,
        *,
        start: datetime,
        end: datetime,
        descending: bool = True,
    ) -> List[sales_models.Sale]:
        """start <= sold_at <= end 범위의 판매 기록을 조회합니다."""
        return await self.get_filtered(
            db,
            date_range_field="sold_at",
            start=start,
            end=end,
            order_by_field="sold_at",
            order_desc=descending,
        )


#  CRUD 클래스의 인스턴스 생성
sale = SaleCRUD(sales_models.Sale)
