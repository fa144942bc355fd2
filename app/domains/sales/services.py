# app/domains/sales/services.py

"""
판매 정산(reconciliation)의 순수 계산 로직을 정의하는 모듈입니다.

DB 세션에 의존하지 않으므로 crud 모듈과 테스트에서 그대로 재사용합니다.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from app.domains.gem import models as gem_models
from app.domains.sales import schemas as sales_schemas

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class SalePlan:
    """판매 한 건이 로트에 미치는 영향."""
    remaining_carat: Decimal
    remaining_quantity: int
    exhausted: bool
    new_total_price: Optional[Decimal]


def plan_sale(
    lot: gem_models.Gemstone, sale_in: sales_schemas.SaleCreate
) -> SalePlan:
    """
    남은 중량/수량을 단순 차감으로 계산합니다 (0 미만으로 보정하지 않음).
    둘 중 하나라도 0 이하가 되면 로트는 모두 소진된 것으로 보고 삭제 대상이 됩니다.
    중량은 weight 컬럼 정밀도(0.001 ct)로 반올림한 뒤 판단하므로,
    저장되는 중량과 총액이 항상 일치합니다.
    """
    carat_sold = gem_models.quantize_carat(sale_in.carat_sold)
    remaining_carat = gem_models.quantize_carat(Decimal(lot.weight) - carat_sold)
    remaining_quantity = lot.quantity - sale_in.quantity

    exhausted = remaining_carat <= 0 or remaining_quantity <= 0
    if remaining_carat < 0 or remaining_quantity < 0:
        logger.warning(
            "Oversell on gemstone %s: sold %s ct / %s pcs against %s ct / %s pcs in stock",
            lot.id, carat_sold, sale_in.quantity, lot.weight, lot.quantity,
        )

    new_total_price = None
    if not exhausted:
        new_total_price = gem_models.derive_total_price(remaining_carat, lot.price_per_carat)

    return SalePlan(
        remaining_carat=remaining_carat,
        remaining_quantity=remaining_quantity,
        exhausted=exhausted,
        new_total_price=new_total_price,
    )


def check_total_amount(sale_in: sales_schemas.SaleCreate) -> bool:
    """
    total_amount 는 요청값 그대로 저장합니다.
    selling_price x carat_sold 와 0.01 넘게 차이가 나면 경고만 남기고 False 를 반환합니다.
    """
    expected = Decimal(str(sale_in.selling_price)) * Decimal(str(sale_in.carat_sold))
    actual = Decimal(str(sale_in.total_amount))
    if abs(expected - actual) > AMOUNT_TOLERANCE:
        logger.warning(
            "total_amount %s for gemstone %s differs from selling_price x carat_sold (%s)",
            actual, sale_in.gemstone_id, expected,
        )
        return False
    return True
