# app/domains/sales/tasks.py

"""
'sales' 도메인의 ARQ 백그라운드 작업 모듈입니다.
"""

import logging
from typing import Any, Dict, Optional

from arq.connections import ArqRedis
from fastapi import BackgroundTasks
from redis.exceptions import RedisError

from app.domains.sales.invoice import InvoiceData, emit_invoice, invoice_filename

logger = logging.getLogger(__name__)


async def emit_invoice_task(ctx, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    판매 송장 PDF를 생성하는 백그라운드 작업.
    payload 는 InvoiceData.to_payload() 결과입니다.
    """
    logger.info("백그라운드 작업 시작: 판매 %s 송장 생성", payload.get("sale_id"))
    filename = emit_invoice(InvoiceData(**payload))
    if filename is None:
        return {"status": "error", "sale_id": payload.get("sale_id")}
    return {"status": "success", "filename": filename}


async def schedule_invoice(
    sale,
    arq_redis_pool: Optional[ArqRedis],
    background_tasks: BackgroundTasks,
) -> str:
    """
    판매 한 건에 대해 송장 생성을 정확히 한 번 예약하고 예상 파일명을 반환합니다.
    Redis 풀이 있으면 ARQ 큐에, 없으면 FastAPI BackgroundTasks 에 등록합니다.
    """
    data = InvoiceData.from_sale(sale)
    if arq_redis_pool:
        try:
            await arq_redis_pool.enqueue_job(emit_invoice_task.__name__, data.to_payload())
            logger.info("ARQ Job enqueued: emit_invoice_task for sale %s", sale.id)
            return invoice_filename(sale.id)
        except RedisError:
            logger.warning("ARQ enqueue failed for sale %s, running invoice in-process", sale.id)
    background_tasks.add_task(emit_invoice, data)
    return invoice_filename(sale.id)
