# app/domains/rpt/services.py

"""
판매 명세서(statement) 집계 서비스 모듈입니다.

- 기간 토큰(month, six_months, year / last-month, last-6-months, last-year)을 [start, end] 로 변환
- 해당 기간의 판매 기록 조회 및 합계(건수, 총 캐럿, 총액) 계산

기간 계산은 주입 가능한 now 를 기준으로 하므로 테스트에서 시점을 고정할 수 있습니다.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import datetime, time, UTC
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.domains.sales import crud as sales_crud
from app.domains.sales import models as sales_models

logger = logging.getLogger(__name__)

DateRange = Tuple[datetime, datetime]

ALL_TIME_LABEL = "all"


# =============================================================================
# 1. 날짜 계산 유틸리티
# =============================================================================
def shift_months(value: datetime, months: int) -> datetime:
    """월 단위로 이동합니다. 일(day)은 대상 월의 말일을 넘지 않도록 보정합니다."""
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def start_of_month(value: datetime) -> datetime:
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def end_of_month(value: datetime) -> datetime:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return value.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)


def _floor_range(now: datetime) -> DateRange:
    floor = datetime.combine(settings.STATEMENT_FLOOR_DATE, time.min, tzinfo=now.tzinfo)
    return floor, now


def _resolve_now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(UTC)


# =============================================================================
# 2. 기간 토큰 해석
# =============================================================================
SYMBOLIC_RANGES: Dict[str, Callable[[datetime], DateRange]] = {
    "month": lambda now: (shift_months(now, -1), now),
    "six_months": lambda now: (shift_months(now, -6), now),
    "year": lambda now: (shift_months(now, -12), now),
}

EXPLICIT_RANGES: Dict[str, Callable[[datetime], DateRange]] = {
    "last-month": lambda now: (
        start_of_month(shift_months(start_of_month(now), -1)),
        end_of_month(shift_months(start_of_month(now), -1)),
    ),
    "last-6-months": lambda now: (
        start_of_month(shift_months(start_of_month(now), -6)),
        end_of_month(now),
    ),
    "last-year": lambda now: (
        now.replace(year=now.year - 1, month=1, day=1, hour=0, minute=0, second=0, microsecond=0),
        now.replace(year=now.year - 1, month=12, day=31, hour=23, minute=59, second=59, microsecond=999999),
    ),
}


def resolve_symbolic_range(token: Optional[str], now: Optional[datetime] = None) -> DateRange:
    """
    /invoices/statement 용 기간 토큰을 해석합니다.
    알 수 없거나 비어 있는 토큰은 [STATEMENT_FLOOR_DATE, now] 전체 기간이 됩니다.
    """
    now = _resolve_now(now)
    resolver = SYMBOLIC_RANGES.get(token or "")
    if resolver is None:
        return _floor_range(now)
    return resolver(now)


def resolve_explicit_range(token: Optional[str], now: Optional[datetime] = None) -> DateRange:
    """/sales/download-statement/{range} 용 달력 기준 기간 토큰을 해석합니다."""
    now = _resolve_now(now)
    resolver = EXPLICIT_RANGES.get(token or "")
    if resolver is None:
        return _floor_range(now)
    return resolver(now)


def range_label(token: Optional[str], known: Dict[str, Callable]) -> str:
    """
    파일명에 쓰일 기간 라벨. 알 수 없는 토큰은 'all' 로 표시합니다.

    라벨은 Content-Disposition 헤더의 파일명에 그대로 들어가므로,
    요청 경로의 원문 대신 알려진 토큰만 사용합니다.
    """
    return token if token in known else ALL_TIME_LABEL


# =============================================================================
# 3. 명세서 집계
# =============================================================================
@dataclass
class Statement:
    """저장되지 않는 명세서 뷰. 합계는 판매 기록에서 파생됩니다."""
    start: datetime
    end: datetime
    label: str
    sales: List[sales_models.Sale] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.sales)

    @property
    def total_carat(self) -> Decimal:
        return sum((Decimal(s.carat_sold) for s in self.sales), Decimal("0"))

    @property
    def grand_total(self) -> Decimal:
        return sum((Decimal(s.total_amount) for s in self.sales), Decimal("0"))


async def build_statement(
    db: AsyncSession,
    *,
    start: datetime,
    end: datetime,
    label: str,
    descending: bool = True,
) -> Statement:
    """start <= sold_at <= end 범위의 판매 기록으로 명세서를 구성합니다."""
    sales = await sales_crud.sale.list_between(db, start=start, end=end, descending=descending)
    statement = Statement(start=start, end=end, label=label, sales=list(sales))
    logger.info(
        "Statement '%s' built: %s sales between %s and %s",
        label, statement.count, start.isoformat(), end.isoformat(),
    )
    return statement
