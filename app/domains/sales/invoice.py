# app/domains/sales/invoice.py

"""
판매 송장(invoice) PDF 생성 모듈입니다.

송장은 A4 한 페이지로 reportlab canvas 에 직접 그립니다.
송장 생성 실패는 판매 결과에 영향을 주지 않으며 로그로만 남습니다.
"""

import logging
import os
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from app.core.config import settings

logger = logging.getLogger(__name__)

TITLE = "Gemstone Sale Invoice"


@dataclass
class InvoiceData:
    sale_id: Optional[int]
    code: Optional[str]
    name: Optional[str]
    shape: Optional[str]
    quantity: int
    carat_sold: Any
    selling_price: Any
    total_amount: Any

    @classmethod
    def from_sale(cls, sale) -> "InvoiceData":
        return cls(
            sale_id=sale.id,
            code=sale.code,
            name=sale.name,
            shape=sale.shape,
            quantity=sale.quantity,
            carat_sold=sale.carat_sold,
            selling_price=sale.selling_price,
            total_amount=sale.total_amount,
        )

    def to_payload(self) -> Dict[str, Any]:
        """arq 직렬화용 dict (숫자는 문자열로 보존)."""
        return {
            "sale_id": self.sale_id,
            "code": self.code,
            "name": self.name,
            "shape": self.shape,
            "quantity": self.quantity,
            "carat_sold": str(self.carat_sold),
            "selling_price": str(self.selling_price),
            "total_amount": str(self.total_amount),
        }


def invoice_filename(sale_id: Optional[int]) -> str:
    """invoice_<saleId>.pdf, ID가 없으면 invoice_<epoch-millis>.pdf"""
    if sale_id:
        return f"invoice_{sale_id}.pdf"
    return f"invoice_{int(time.time() * 1000)}.pdf"


def generate_invoice_pdf(
    data: InvoiceData,
    output_dir: Optional[str] = None,
    on_complete: Optional[Callable[[str], None]] = None,
    *,
    issued_on: Optional[date] = None,
) -> str:
    """
    송장 PDF 파일을 작성하고 파일명을 반환합니다.
    파일이 저장된 뒤에 on_complete(filename) 을 호출합니다.
    """
    output_dir = output_dir or settings.INVOICE_DIR
    issued_on = issued_on or date.today()
    os.makedirs(output_dir, exist_ok=True)

    filename = invoice_filename(data.sale_id)
    file_path = os.path.join(output_dir, filename)

    pdf = canvas.Canvas(file_path, pagesize=A4)
    width, height = A4

    pdf.setFont("Helvetica-Bold", 18)
    pdf.drawCentredString(width / 2, height - 30 * mm, TITLE)

    lines = [
        ("Gemstone Code", data.code),
        ("Name", data.name),
        ("Shape", data.shape),
        ("Quantity", data.quantity),
        ("Weight (Carat)", data.carat_sold),
        ("Price/Carat", data.selling_price),
        ("Total Amount", data.total_amount),
        ("Sold Date", issued_on.isoformat()),
    ]
    pdf.setFont("Helvetica", 12)
    y = height - 50 * mm
    for label, value in lines:
        pdf.drawString(25 * mm, y, f"{label}: {'' if value is None else value}")
        y -= 8 * mm

    pdf.showPage()
    pdf.save()

    if on_complete:
        on_complete(filename)
    return filename


def emit_invoice(
    data: InvoiceData,
    output_dir: Optional[str] = None,
    on_complete: Optional[Callable[[str], None]] = None,
) -> Optional[str]:
    """
    송장을 생성합니다. 실패하면 로그만 남기고 None 을 반환합니다 (재시도 없음).
    BackgroundTasks 와 arq 작업 양쪽에서 호출됩니다.
    """
    try:
        filename = generate_invoice_pdf(data, output_dir, on_complete)
    except Exception:
        logger.exception("Invoice generation failed for sale %s", data.sale_id)
        return None
    logger.info("Invoice saved: %s", filename)
    return filename
