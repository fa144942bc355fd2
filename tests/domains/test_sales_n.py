# flake8: noqa
"""
'sales' (판매) 도메인 관련 테스트 모듈입니다.
판매 정산(재고 차감/소진), 단일 트랜잭션 롤백, 송장 생성, 판매 기록 조회/삭제를 테스트합니다.
"""
import logging
import os
from datetime import datetime, timedelta, UTC
from decimal import Decimal

import pytest
from fastapi import BackgroundTasks
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import StoreFailureError
from app.domains.gem import models as gem_models
from app.domains.sales import crud as sales_crud
from app.domains.sales import models as sales_models
from app.domains.sales import schemas as sales_schemas
from app.domains.sales import tasks as sales_tasks
from app.domains.sales.invoice import InvoiceData, emit_invoice, generate_invoice_pdf, invoice_filename
from app.domains.sales.services import check_total_amount, plan_sale

#  API 경로 정의
SELL_URL = "/api/v1/gemstones/sell"
SALES_API_PREFIX = "/api/v1/sales"


async def _all_sales(db_session: AsyncSession):
    result = await db_session.exec(select(sales_models.Sale))
    return result.all()


# =============================================================================
# 1. 정산 계산 (순수 함수)
# =============================================================================
def test_plan_sale_partial():
    """부분 판매는 남은 중량/수량과 새 총액을 계산합니다."""
    lot = gem_models.Gemstone(
        id=1, code="RB", name="Ruby", quantity=5,
        weight=Decimal("10.500"), price_per_carat=Decimal("100.00"), total_price=Decimal("1050.00"),
    )
    sale_in = sales_schemas.SaleCreate(
        gemstone_id=1, quantity=2, carat_sold=2.5, selling_price=120, total_amount=300
    )
    plan = plan_sale(lot, sale_in)
    assert plan.remaining_carat == Decimal("8.000")
    assert plan.remaining_quantity == 3
    assert plan.exhausted is False
    assert plan.new_total_price == Decimal("800.00")


@pytest.mark.parametrize(
    "quantity, carat",
    [(1, 10.5), (5, 1.0), (1, 11.0), (6, 1.0)],
)
def test_plan_sale_exhausts_lot(quantity, carat):
    """중량 또는 수량이 0 이하가 되면 로트는 소진됩니다 (초과 판매 포함)."""
    lot = gem_models.Gemstone(
        id=1, code="RB", name="Ruby", quantity=5,
        weight=Decimal("10.500"), price_per_carat=Decimal("100.00"), total_price=Decimal("1050.00"),
    )
    sale_in = sales_schemas.SaleCreate(
        gemstone_id=1, quantity=quantity, carat_sold=carat, selling_price=100, total_amount=100 * carat
    )
    plan = plan_sale(lot, sale_in)
    assert plan.exhausted is True
    assert plan.new_total_price is None


def test_oversell_is_logged(caplog):
    """재고보다 많이 판매하면 경고 로그를 남깁니다."""
    lot = gem_models.Gemstone(
        id=7, code="RB", name="Ruby", quantity=1,
        weight=Decimal("1.000"), price_per_carat=Decimal("100.00"), total_price=Decimal("100.00"),
    )
    sale_in = sales_schemas.SaleCreate(
        gemstone_id=7, quantity=1, carat_sold=2, selling_price=100, total_amount=200
    )
    with caplog.at_level(logging.WARNING, logger="app.domains.sales.services"):
        plan_sale(lot, sale_in)
    assert "Oversell on gemstone 7" in caplog.text


def test_plan_sale_rounds_to_weight_precision():
    """남은 중량이 0.001 ct 미만이면 0으로 반올림되어 로트가 소진됩니다."""
    lot = gem_models.Gemstone(
        id=1, code="RB", name="Ruby", quantity=5,
        weight=Decimal("1.000"), price_per_carat=Decimal("100.00"), total_price=Decimal("100.00"),
    )
    tiny_remainder = sales_schemas.SaleCreate(
        gemstone_id=1, quantity=1, carat_sold=0.9999, selling_price=100, total_amount=99.99
    )
    plan = plan_sale(lot, tiny_remainder)
    assert plan.remaining_carat == Decimal("0.000")
    assert plan.exhausted is True

    tiny_sale = sales_schemas.SaleCreate(
        gemstone_id=1, quantity=1, carat_sold=0.0004, selling_price=100, total_amount=0.04
    )
    plan = plan_sale(lot, tiny_sale)
    assert plan.remaining_carat == Decimal("1.000")
    assert plan.exhausted is False
    assert plan.new_total_price == Decimal("100.00")


def test_total_amount_mismatch_is_logged(caplog):
    """total_amount 가 selling_price x carat_sold 와 다르면 경고만 남깁니다."""
    matching = sales_schemas.SaleCreate(gemstone_id=1, quantity=1, carat_sold=2.5, selling_price=120, total_amount=300)
    mismatched = sales_schemas.SaleCreate(gemstone_id=1, quantity=1, carat_sold=2.5, selling_price=120, total_amount=250)
    with caplog.at_level(logging.WARNING, logger="app.domains.sales.services"):
        assert check_total_amount(matching) is True
        assert check_total_amount(mismatched) is False
    assert "total_amount 250" in caplog.text


# =============================================================================
# 2. 판매 API
# =============================================================================
@pytest.mark.asyncio
async def test_partial_sale_updates_lot(
    client: AsyncClient, db_session: AsyncSession, gemstone_factory, invoice_dir: str
):
    """(성공) 부분 판매 후 로트는 weight - carat, quantity - q, 총액 재계산 상태가 됩니다."""
    lot = await gemstone_factory(code="RB-001", name="Ruby", shape="Oval", weight="10.5",
                                 price_per_carat="100.00", quantity=5, remark="pigeon blood")

    response = await client.post(SELL_URL, json={
        "gemstone_id": lot.id, "quantity": 2, "carat_sold": 2.5,
        "selling_price": 120, "total_amount": 300,
    })
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Sale successful"
    assert body["invoice"] == f"invoice_{body['sale_id']}.pdf"

    await db_session.refresh(lot)
    assert lot.weight == Decimal("8.000")
    assert lot.quantity == 3
    assert lot.total_price == Decimal("800.00")

    sales = await _all_sales(db_session)
    assert len(sales) == 1
    sale = sales[0]
    assert sale.id == body["sale_id"]
    assert sale.gemstone_id == lot.id
    assert (sale.code, sale.name, sale.shape, sale.remark) == ("RB-001", "Ruby", "Oval", "pigeon blood")
    assert sale.marking_price == Decimal("100.00")
    assert sale.selling_price == Decimal("120.00")
    assert sale.total_amount == Decimal("300.00")


@pytest.mark.asyncio
async def test_sale_consuming_all_carats_removes_lot(
    client: AsyncClient, db_session: AsyncSession, gemstone_factory, invoice_dir: str
):
    """(성공) 판매 중량이 남은 중량 이상이면 로트가 삭제됩니다."""
    lot = await gemstone_factory(weight="3.0", quantity=5)
    lot_id = lot.id

    response = await client.post(SELL_URL, json={
        "gemstone_id": lot_id, "quantity": 1, "carat_sold": 3.0,
        "selling_price": 100, "total_amount": 300,
    })
    assert response.status_code == 200
    assert (await client.get(f"/api/v1/gemstones/{lot_id}")).status_code == 404
    assert len(await _all_sales(db_session)) == 1


@pytest.mark.asyncio
async def test_sale_consuming_all_pieces_removes_lot(
    client: AsyncClient, db_session: AsyncSession, gemstone_factory, invoice_dir: str
):
    """(성공) 판매 수량이 남은 수량 이상이면 중량이 남아도 로트가 삭제됩니다."""
    lot = await gemstone_factory(weight="10.0", quantity=2)
    lot_id = lot.id

    response = await client.post(SELL_URL, json={
        "gemstone_id": lot_id, "quantity": 2, "carat_sold": 1.0,
        "selling_price": 100, "total_amount": 100,
    })
    assert response.status_code == 200
    assert (await client.get(f"/api/v1/gemstones/{lot_id}")).status_code == 404


@pytest.mark.asyncio
async def test_sale_below_weight_precision_removes_lot(
    client: AsyncClient, db_session: AsyncSession, gemstone_factory, invoice_dir: str
):
    """(성공) 남은 중량이 0.001 ct 미만으로 떨어지면 0 ct 로트를 남기지 않고 삭제합니다."""
    lot = await gemstone_factory(weight="1.000", price_per_carat="100.00", quantity=5)
    lot_id = lot.id

    response = await client.post(SELL_URL, json={
        "gemstone_id": lot_id, "quantity": 1, "carat_sold": 0.9999,
        "selling_price": 100, "total_amount": 99.99,
    })
    assert response.status_code == 200
    assert (await client.get(f"/api/v1/gemstones/{lot_id}")).status_code == 404

    sales = await _all_sales(db_session)
    assert len(sales) == 1
    assert sales[0].carat_sold == Decimal("1.000")


@pytest.mark.asyncio
async def test_sale_unknown_lot_writes_nothing(client: AsyncClient, db_session: AsyncSession, invoice_dir: str):
    """(실패) 존재하지 않는 로트에 대한 판매는 404이며 아무것도 기록되지 않습니다."""
    response = await client.post(SELL_URL, json={
        "gemstone_id": 9999, "quantity": 1, "carat_sold": 1.0,
        "selling_price": 100, "total_amount": 100,
    })
    assert response.status_code == 404
    assert response.json() == {"message": "Gemstone not found"}
    assert await _all_sales(db_session) == []
    assert os.listdir(invoice_dir) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["gemstone_id", "quantity", "carat_sold", "selling_price", "total_amount"])
async def test_sale_missing_field(client: AsyncClient, missing: str):
    """(실패) 판매 요청의 필수 필드가 없으면 400."""
    payload = {"gemstone_id": 1, "quantity": 1, "carat_sold": 1.0, "selling_price": 100, "total_amount": 100}
    payload.pop(missing)
    response = await client.post(SELL_URL, json=payload)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_sale_store_failure_rolls_back_both_writes(
    client: AsyncClient, db_session: AsyncSession, gemstone_factory, invoice_dir: str, monkeypatch
):
    """(실패) 커밋 중 DB 오류가 나면 판매 기록과 재고 차감이 모두 롤백되고 500을 반환합니다."""
    lot = await gemstone_factory(weight="10.5", quantity=5)

    async def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    response = await client.post(SELL_URL, json={
        "gemstone_id": lot.id, "quantity": 2, "carat_sold": 2.5,
        "selling_price": 120, "total_amount": 300,
    })

    assert response.status_code == 500
    assert response.json() == {"message": "Database error"}

    await db_session.refresh(lot)
    assert lot.weight == Decimal("10.500")
    assert lot.quantity == 5
    assert await _all_sales(db_session) == []
    assert os.listdir(invoice_dir) == []


@pytest.mark.asyncio
async def test_sell_crud_raises_store_failure(db_session: AsyncSession, gemstone_factory, monkeypatch):
    """(실패) crud 수준에서는 StoreFailureError 로 변환됩니다."""
    lot = await gemstone_factory()

    async def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("connection lost"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    sale_in = sales_schemas.SaleCreate(
        gemstone_id=lot.id, quantity=1, carat_sold=1.0, selling_price=100, total_amount=100
    )
    with pytest.raises(StoreFailureError):
        await sales_crud.sale.sell(db_session, sale_in=sale_in)


@pytest.mark.asyncio
async def test_invoice_file_written_after_sale(
    client: AsyncClient, gemstone_factory, invoice_dir: str
):
    """(성공) 프로세스 내 처리 시 판매 후 invoice_<id>.pdf 파일이 생성됩니다."""
    lot = await gemstone_factory()
    response = await client.post(SELL_URL, json={
        "gemstone_id": lot.id, "quantity": 1, "carat_sold": 1.0,
        "selling_price": 100, "total_amount": 100,
    })
    assert response.status_code == 200
    invoice_path = os.path.join(invoice_dir, response.json()["invoice"])
    assert os.path.exists(invoice_path)
    with open(invoice_path, "rb") as f:
        assert f.read(4) == b"%PDF"


# =============================================================================
# 3. 송장 생성
# =============================================================================
def _invoice_data(sale_id=42):
    return InvoiceData(
        sale_id=sale_id, code="RB-001", name="Ruby", shape="Oval", quantity=1,
        carat_sold=Decimal("1.500"), selling_price=Decimal("120.00"), total_amount=Decimal("180.00"),
    )


def test_generate_invoice_calls_on_complete(tmp_path):
    """송장 파일이 저장된 뒤 on_complete 콜백이 파일명과 함께 호출됩니다."""
    completed = []
    filename = generate_invoice_pdf(_invoice_data(), str(tmp_path), completed.append)
    assert filename == "invoice_42.pdf"
    assert completed == ["invoice_42.pdf"]
    assert (tmp_path / "invoice_42.pdf").exists()


def test_invoice_filename_fallback_uses_epoch_millis():
    """판매 ID가 없으면 invoice_<epoch-millis>.pdf 이름을 사용합니다."""
    name = invoice_filename(None)
    millis = int(name[len("invoice_"):-len(".pdf")])
    assert abs(millis - int(datetime.now(UTC).timestamp() * 1000)) < 60_000


def test_emit_invoice_swallows_failures(tmp_path, caplog):
    """송장 생성 실패는 예외를 전파하지 않고 로그만 남깁니다."""
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("occupied")
    with caplog.at_level(logging.ERROR, logger="app.domains.sales.invoice"):
        assert emit_invoice(_invoice_data(), str(blocker)) is None
    assert "Invoice generation failed for sale 42" in caplog.text


class _RecordingPool:
    def __init__(self):
        self.jobs = []

    async def enqueue_job(self, function, *args):
        self.jobs.append((function, args))


@pytest.mark.asyncio
async def test_schedule_invoice_uses_arq_pool_when_available(sale_factory):
    """Redis 풀이 있으면 송장 작업은 ARQ 큐에 한 번만 등록됩니다."""
    sale = await sale_factory()
    pool = _RecordingPool()
    background_tasks = BackgroundTasks()

    filename = await sales_tasks.schedule_invoice(sale, pool, background_tasks)

    assert filename == f"invoice_{sale.id}.pdf"
    assert len(pool.jobs) == 1
    function_name, args = pool.jobs[0]
    assert function_name == "emit_invoice_task"
    assert args[0]["sale_id"] == sale.id
    assert args[0]["carat_sold"] == "1.000"
    assert background_tasks.tasks == []


@pytest.mark.asyncio
async def test_schedule_invoice_falls_back_to_background_tasks(sale_factory):
    """Redis 풀이 없으면 BackgroundTasks 에 한 번 등록됩니다."""
    sale = await sale_factory()
    background_tasks = BackgroundTasks()
    await sales_tasks.schedule_invoice(sale, None, background_tasks)
    assert len(background_tasks.tasks) == 1


@pytest.mark.asyncio
async def test_emit_invoice_task_writes_file(invoice_dir: str):
    """ARQ 작업은 직렬화된 payload 로 송장을 생성합니다."""
    result = await sales_tasks.emit_invoice_task({}, _invoice_data(sale_id=7).to_payload())
    assert result == {"status": "success", "filename": "invoice_7.pdf"}
    assert os.path.exists(os.path.join(invoice_dir, "invoice_7.pdf"))


# =============================================================================
# 4. 판매 기록 조회 / 삭제
# =============================================================================
@pytest.mark.asyncio
async def test_read_sales_newest_first(client: AsyncClient, sale_factory):
    """(성공) 판매 목록은 판매 일시 내림차순입니다."""
    now = datetime.now(UTC)
    await sale_factory(sold_at=now - timedelta(days=3), code="OLD")
    await sale_factory(sold_at=now - timedelta(days=1), code="NEW")
    await sale_factory(sold_at=now - timedelta(days=2), code="MID")

    response = await client.get(SALES_API_PREFIX)
    assert response.status_code == 200
    assert [s["code"] for s in response.json()] == ["NEW", "MID", "OLD"]


@pytest.mark.asyncio
async def test_read_and_delete_sale(client: AsyncClient, sale_factory):
    """(성공) 판매 기록을 조회하고 삭제합니다. 삭제 후에는 404."""
    sale = await sale_factory(carat_sold="1.250", total_amount="150.00")

    response = await client.get(f"{SALES_API_PREFIX}/{sale.id}")
    assert response.status_code == 200
    assert response.json()["carat_sold"] == pytest.approx(1.25)

    delete_response = await client.delete(f"{SALES_API_PREFIX}/{sale.id}")
    assert delete_response.status_code == 200
    assert delete_response.json() == {"message": "Sale deleted"}

    assert (await client.get(f"{SALES_API_PREFIX}/{sale.id}")).status_code == 404
    missing = await client.delete(f"{SALES_API_PREFIX}/{sale.id}")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Sale not found"}
