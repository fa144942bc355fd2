# app/domains/rpt/routers.py

"""
'rpt' 도메인 (판매 명세서)의 API 엔드포인트를 정의하는 모듈입니다.

- router: /invoices 아래의 기간 토큰(month, six_months, year) 명세서. 기본 정렬은 최신순.
- download_router: /sales/download-statement/{range} 달력 기준 명세서. 기본 정렬은 오래된 순.
"""

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.domains.rpt import pdf as rpt_pdf
from app.domains.rpt import schemas as rpt_schemas
from app.domains.rpt import services as rpt_services

router = APIRouter(
    tags=["Statements (판매 명세서)"],
    responses={404: {"description": "Not found"}},
)

download_router = APIRouter(tags=["Statements (판매 명세서)"])

SortOrder = Literal["asc", "desc"]


def _pdf_response(statement: rpt_services.Statement) -> Response:
    generated_at = datetime.now()
    content = rpt_pdf.render_statement_pdf(statement, generated_at=generated_at)
    filename = rpt_pdf.statement_filename(statement.label, generated_at)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/statement", response_class=Response)
async def download_symbolic_statement(
    range_token: Optional[str] = Query(None, alias="range", description="month | six_months | year"),
    order: SortOrder = Query("desc", description="판매 일시 정렬 방향"),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """기간 토큰 기준 판매 명세서 PDF를 다운로드합니다."""
    start, end = rpt_services.resolve_symbolic_range(range_token)
    statement = await rpt_services.build_statement(
        db,
        start=start,
        end=end,
        label=rpt_services.range_label(range_token, rpt_services.SYMBOLIC_RANGES),
        descending=order == "desc",
    )
    return _pdf_response(statement)


@router.get("/statement/summary", response_model=rpt_schemas.StatementSummary)
async def read_statement_summary(
    range_token: Optional[str] = Query(None, alias="range", description="month | six_months | year"),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """기간 토큰 기준 판매 합계를 JSON 으로 조회합니다."""
    start, end = rpt_services.resolve_symbolic_range(range_token)
    statement = await rpt_services.build_statement(
        db,
        start=start,
        end=end,
        label=rpt_services.range_label(range_token, rpt_services.SYMBOLIC_RANGES),
    )
    return rpt_schemas.StatementSummary(
        label=statement.label,
        start=statement.start,
        end=statement.end,
        count=statement.count,
        total_carat=float(statement.total_carat),
        grand_total=float(statement.grand_total),
    )


@download_router.get("/download-statement/{range_token}", response_class=Response)
async def download_calendar_statement(
    range_token: str,
    order: SortOrder = Query("asc", description="판매 일시 정렬 방향"),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """달력 기준(last-month, last-6-months, last-year) 판매 명세서 PDF를 다운로드합니다."""
    start, end = rpt_services.resolve_explicit_range(range_token)
    statement = await rpt_services.build_statement(
        db,
        start=start,
        end=end,
        label=rpt_services.range_label(range_token, rpt_services.EXPLICIT_RANGES),
        descending=order == "desc",
    )
    return _pdf_response(statement)
