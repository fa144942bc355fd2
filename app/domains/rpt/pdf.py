# app/domains/rpt/pdf.py

"""
판매 명세서 PDF 렌더러 모듈입니다.

렌더링은 두 단계로 진행합니다.
1. plan_pages(row_count): 행 수만으로 페이지 분할을 계산 (순수 연산)
2. render_statement_pdf(): 계획에 따라 페이지를 그리며, 전체 페이지 수 N 을 이미 알고 있으므로
   각 페이지의 "Page X of N" 꼬리말을 즉시 그립니다.

좌표 계산은 페이지 상단 기준 커서(top-down)로 하고, 그릴 때 reportlab 좌표(하단 기준)로 변환합니다.
"""

import io
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from app.core.config import settings
from app.domains.rpt.services import Statement

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 40
TABLE_WIDTH = 515
ROW_HEIGHT = 20
CELL_PADDING = 5

HEADER_BLOCK_HEIGHT = 80
SUMMARY_BOX_HEIGHT = 60
SUMMARY_GAP = 20
FIRST_PAGE_TABLE_TOP = MARGIN + HEADER_BLOCK_HEIGHT + SUMMARY_BOX_HEIGHT + SUMMARY_GAP
NEXT_PAGE_TABLE_TOP = MARGIN
BOTTOM_LIMIT = PAGE_HEIGHT - 60
GRAND_TOTAL_BLOCK_HEIGHT = 30

PRIMARY_COLOR = colors.HexColor("#2e7d32")
SHADE_COLOR = colors.HexColor("#f5f5f5")
TEXT_COLOR = colors.HexColor("#333333")
BORDER_COLOR = colors.HexColor("#dddddd")

# (제목, 너비, 오른쪽 정렬 여부)
COLUMNS: Tuple[Tuple[str, float, bool], ...] = (
    ("#", 25, False),
    ("Date", 65, False),
    ("Code", 55, False),
    ("Name", 95, False),
    ("Shape", 55, False),
    ("Carat", 60, True),
    ("Price/CT", 80, True),
    ("Total", 80, True),
)


# =============================================================================
# 1. 페이지 분할 계획
# =============================================================================
@dataclass(frozen=True)
class PagePlan:
    """
    rows: 페이지별 (시작, 끝) 행 인덱스 (끝은 포함하지 않음)
    table_pages: 표가 그려지는 페이지 수. 이를 넘는 페이지는 합계 줄만 가집니다.
    """
    rows: Tuple[Tuple[int, int], ...]
    table_pages: int

    @property
    def page_count(self) -> int:
        return len(self.rows)

    @property
    def grand_total_page(self) -> int:
        return self.page_count - 1


def plan_pages(row_count: int) -> PagePlan:
    """행 수만으로 각 페이지에 들어갈 행 범위와 합계 줄 위치를 계산합니다."""
    pages: List[Tuple[int, int]] = []
    page_start = 0
    cursor = FIRST_PAGE_TABLE_TOP + ROW_HEIGHT

    for index in range(row_count):
        if cursor + ROW_HEIGHT > BOTTOM_LIMIT:
            pages.append((page_start, index))
            page_start = index
            cursor = NEXT_PAGE_TABLE_TOP + ROW_HEIGHT
        cursor += ROW_HEIGHT
    pages.append((page_start, row_count))
    table_pages = len(pages)

    if cursor + GRAND_TOTAL_BLOCK_HEIGHT > BOTTOM_LIMIT:
        pages.append((row_count, row_count))

    return PagePlan(rows=tuple(pages), table_pages=table_pages)


# =============================================================================
# 2. 포맷 유틸리티
# =============================================================================
def format_money(value: Decimal) -> str:
    return f"{settings.CURRENCY_SYMBOL}{Decimal(value):,.2f}"


def format_carat(value: Decimal) -> str:
    return f"{Decimal(value):.2f}"


def statement_filename(label: str, generated_at: datetime) -> str:
    return f"sales_statement_{label}_{generated_at.strftime('%Y%m%d_%H%M')}.pdf"


def _fit(text: str, width: float, font: str, size: float) -> str:
    """셀 너비를 넘는 문자열은 말줄임표로 자릅니다."""
    limit = width - CELL_PADDING * 2
    if stringWidth(text, font, size) <= limit:
        return text
    while text and stringWidth(text + "...", font, size) > limit:
        text = text[:-1]
    return text + "..."


def _y(cursor: float) -> float:
    return PAGE_HEIGHT - cursor


# =============================================================================
# 3. 그리기
# =============================================================================
def _draw_header_block(pdf: canvas.Canvas, statement: Statement, generated_at: datetime) -> None:
    pdf.setFillColor(PRIMARY_COLOR)
    pdf.setFont("Helvetica-Bold", 20)
    pdf.drawCentredString(PAGE_WIDTH / 2, _y(MARGIN + 20), "SALES STATEMENT")

    pdf.setFillColor(TEXT_COLOR)
    pdf.setFont("Helvetica", 10)
    pdf.drawString(MARGIN, _y(MARGIN + 45), settings.COMPANY_NAME)
    pdf.drawRightString(
        MARGIN + TABLE_WIDTH, _y(MARGIN + 45),
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M')}",
    )
    period = f"{statement.start.strftime('%Y-%m-%d')} to {statement.end.strftime('%Y-%m-%d')}"
    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(MARGIN, _y(MARGIN + 65), "Report Period:")
    pdf.setFont("Helvetica", 10)
    pdf.drawString(MARGIN + 75, _y(MARGIN + 65), period)


def _draw_summary_box(pdf: canvas.Canvas, statement: Statement) -> None:
    top = MARGIN + HEADER_BLOCK_HEIGHT
    pdf.setFillColor(SHADE_COLOR)
    pdf.setStrokeColor(BORDER_COLOR)
    pdf.rect(MARGIN, _y(top + SUMMARY_BOX_HEIGHT), TABLE_WIDTH, SUMMARY_BOX_HEIGHT, fill=1, stroke=1)

    pdf.setFillColor(PRIMARY_COLOR)
    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(MARGIN + 10, _y(top + 20), "SUMMARY")

    pdf.setFillColor(TEXT_COLOR)
    pdf.setFont("Helvetica", 10)
    pdf.drawString(MARGIN + 10, _y(top + 42), f"Total Transactions: {statement.count}")
    pdf.drawString(MARGIN + 170, _y(top + 42), f"Total Carat Sold: {format_carat(statement.total_carat)} ct")
    pdf.drawRightString(
        MARGIN + TABLE_WIDTH - 10, _y(top + 42),
        f"Grand Total: {format_money(statement.grand_total)}",
    )


def _draw_cells(pdf: canvas.Canvas, cursor: float, values: Sequence[str], font: str, size: float) -> None:
    pdf.setFont(font, size)
    baseline = _y(cursor + 14)
    x = MARGIN
    for (_, width, right_aligned), value in zip(COLUMNS, values):
        text = _fit(value, width, font, size)
        if right_aligned:
            pdf.drawRightString(x + width - CELL_PADDING, baseline, text)
        else:
            pdf.drawString(x + CELL_PADDING, baseline, text)
        x += width


def _draw_table_header(pdf: canvas.Canvas, cursor: float) -> float:
    pdf.setStrokeColor(BORDER_COLOR)
    pdf.setFillColor(colors.white)
    pdf.rect(MARGIN, _y(cursor + ROW_HEIGHT), TABLE_WIDTH, ROW_HEIGHT, fill=1, stroke=1)
    pdf.setFillColor(PRIMARY_COLOR)
    _draw_cells(pdf, cursor, [title for title, _, _ in COLUMNS], "Helvetica-Bold", 10)
    return cursor + ROW_HEIGHT


def _draw_row(pdf: canvas.Canvas, cursor: float, index: int, sale) -> float:
    if index % 2 == 0:
        pdf.setFillColor(SHADE_COLOR)
        pdf.rect(MARGIN, _y(cursor + ROW_HEIGHT), TABLE_WIDTH, ROW_HEIGHT, fill=1, stroke=0)
    pdf.setFillColor(TEXT_COLOR)
    values = [
        str(index + 1),
        sale.sold_at.strftime("%Y-%m-%d") if sale.sold_at else "",
        sale.code or "",
        sale.name or "",
        sale.shape or "",
        format_carat(sale.carat_sold),
        format_money(sale.marking_price),
        format_money(sale.total_amount),
    ]
    _draw_cells(pdf, cursor, values, "Helvetica", 9)
    return cursor + ROW_HEIGHT


def _draw_grand_total(pdf: canvas.Canvas, cursor: float, statement: Statement) -> None:
    pdf.setStrokeColor(TEXT_COLOR)
    pdf.line(MARGIN, _y(cursor), MARGIN + TABLE_WIDTH, _y(cursor))
    pdf.setFillColor(PRIMARY_COLOR)
    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawRightString(
        MARGIN + TABLE_WIDTH, _y(cursor + 20),
        f"Grand Total: {format_money(statement.grand_total)}",
    )


def _draw_page_footer(pdf: canvas.Canvas, page_number: int, page_count: int) -> None:
    pdf.setFillColor(TEXT_COLOR)
    pdf.setFont("Helvetica", 8)
    pdf.drawCentredString(PAGE_WIDTH / 2, 30, f"Page {page_number} of {page_count}")
    pdf.drawCentredString(PAGE_WIDTH / 2, 20, f"Confidential - {settings.COMPANY_NAME}")


def render_statement_pdf(
    statement: Statement,
    *,
    generated_at: Optional[datetime] = None,
    compress: bool = True,
) -> bytes:
    """명세서를 PDF 바이트로 렌더링합니다. 판매 기록이 없어도 유효한 문서를 만듭니다."""
    generated_at = generated_at or datetime.now()
    plan = plan_pages(statement.count)

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4, pageCompression=1 if compress else 0)
    pdf.setTitle(f"Sales Statement {statement.label}")
    pdf.setAuthor(settings.COMPANY_NAME)

    cursor = 0.0
    for page_index, (first_row, last_row) in enumerate(plan.rows):
        if page_index == 0:
            _draw_header_block(pdf, statement, generated_at)
            _draw_summary_box(pdf, statement)
            cursor = _draw_table_header(pdf, FIRST_PAGE_TABLE_TOP)
        elif page_index < plan.table_pages:
            cursor = _draw_table_header(pdf, NEXT_PAGE_TABLE_TOP)
        else:
            cursor = NEXT_PAGE_TABLE_TOP

        for index in range(first_row, last_row):
            cursor = _draw_row(pdf, cursor, index, statement.sales[index])

        if page_index == plan.grand_total_page:
            _draw_grand_total(pdf, cursor, statement)

        _draw_page_footer(pdf, page_index + 1, plan.page_count)
        pdf.showPage()

    pdf.save()
    return buffer.getvalue()
