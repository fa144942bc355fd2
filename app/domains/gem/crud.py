# app/domains/gem/crud.py

"""
'gem' 도메인의 CRUD 작업을 위한 함수들을 정의하는 모듈입니다.
보석 로트의 총액(total_price)은 생성/수정 시 항상 서버에서 다시 계산합니다.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import String, cast, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import ValidationMissingError
from app.domains.gem import models as gem_models
from app.domains.gem import schemas as gem_schemas

logger = logging.getLogger(__name__)

_DERIVED_FIELDS = {"total_price", "id", "created_at"}
# NOT NULL 컬럼: 수정 요청에서 명시적인 null 을 허용하지 않습니다.
_REQUIRED_FIELDS = {"code", "name", "quantity", "weight", "price_per_carat"}


def _to_decimal(value: Any) -> Decimal:
    return Decimal(str(value))


class GemstoneCRUD(
    CRUDBase[gem_models.Gemstone, gem_schemas.GemstoneCreate, gem_schemas.GemstoneUpdate]
):
    """Gemstone 모델에 특화된 CRUD 작업을 처리합니다."""

    async def get_for_update(self, db: AsyncSession, id: int) -> Optional[gem_models.Gemstone]:
        """
        판매 정산을 위해 로트를 행 잠금(SELECT ... FOR UPDATE)과 함께 조회합니다.
        같은 로트에 대한 동시 판매는 트랜잭션이 끝날 때까지 직렬화됩니다.
        """
        query = select(self.model).where(self.model.id == id).with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def search(self, db: AsyncSession, *, query: str) -> List[gem_models.Gemstone]:
        """코드, 이름, 형태, 중량에 대해 부분 일치 검색을 수행합니다."""
        pattern = f"%{query}%"
        statement = select(self.model).where(
            or_(
                cast(self.model.weight, String).like(pattern),
                self.model.name.like(pattern),
                self.model.code.like(pattern),
                self.model.shape.like(pattern),
            )
        ).order_by(self.model.id)
        result = await db.execute(statement)
        return result.scalars().all()

    async def create(
        self, db: AsyncSession, *, obj_in: gem_schemas.GemstoneCreate
    ) -> gem_models.Gemstone:
        """새로운 보석 로트를 생성합니다. 총액은 중량 x 단가로 계산됩니다."""
        data = obj_in.model_dump(exclude=_DERIVED_FIELDS)
        data["weight"] = gem_models.quantize_carat(data["weight"])
        data["price_per_carat"] = _to_decimal(data["price_per_carat"])
        data["total_price"] = gem_models.derive_total_price(data["weight"], data["price_per_carat"])

        if obj_in.total_price is not None and _to_decimal(obj_in.total_price) != data["total_price"]:
            logger.info(
                "Ignoring client total_price %s for code %s; derived %s",
                obj_in.total_price, obj_in.code, data["total_price"],
            )

        gemstone = self.model(**data)
        db.add(gemstone)
        await db.commit()
        await db.refresh(gemstone)
        return gemstone

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: gem_models.Gemstone,
        obj_in: Union[gem_schemas.GemstoneUpdate, Dict[str, Any]]
    ) -> gem_models.Gemstone:
        """보석 로트를 직접 수정합니다. 수정 후 총액을 다시 계산합니다."""
        update_data = (
            dict(obj_in)
            if isinstance(obj_in, dict)
            else obj_in.model_dump(exclude_unset=True)
        )
        for field in _DERIVED_FIELDS:
            update_data.pop(field, None)
        null_fields = sorted(
            field for field in _REQUIRED_FIELDS
            if field in update_data and update_data[field] is None
        )
        if null_fields:
            raise ValidationMissingError(f"Fields cannot be null: {', '.join(null_fields)}")
        if "weight" in update_data:
            update_data["weight"] = gem_models.quantize_carat(update_data["weight"])
        if "price_per_carat" in update_data:
            update_data["price_per_carat"] = _to_decimal(update_data["price_per_carat"])

        for key, value in update_data.items():
            setattr(db_obj, key, value)
        db_obj.refresh_total_price()

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj


#  CRUD 클래스의 인스턴스 생성
gemstone = GemstoneCRUD(gem_models.Gemstone)
