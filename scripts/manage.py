# flake8: noqa
# scripts/manage.py

import asyncio
from datetime import datetime
from typing import Optional

import typer

from app.core.database import AsyncSessionLocal, create_db_and_tables, engine
from app.domains.rpt import pdf as rpt_pdf
from app.domains.rpt import services as rpt_services

cli = typer.Typer(help="SpheneGem 운영 관리 명령")


@cli.command("init-db")
def init_db():
    """
    데이터베이스 테이블을 생성합니다. (기존 테이블은 유지)
    """
    async def run():
        await create_db_and_tables()
        await engine.dispose()

    asyncio.run(run())
    print("데이터베이스 테이블 생성이 완료되었습니다.")


@cli.command("statement")
def statement(
    range_token: str = typer.Argument(
        ..., metavar="RANGE",
        help="month | six_months | year | last-month | last-6-months | last-year (그 외: 전체 기간)"
    ),
    out: Optional[str] = typer.Option(
        None, '--out', '-o',
        help="저장할 PDF 경로입니다. 생략하면 현재 디렉토리에 기본 파일명으로 저장합니다."
    ),
):
    """
    판매 명세서 PDF를 파일로 저장합니다.
    """
    if range_token in rpt_services.EXPLICIT_RANGES:
        start, end = rpt_services.resolve_explicit_range(range_token)
        known, descending = rpt_services.EXPLICIT_RANGES, False
    else:
        start, end = rpt_services.resolve_symbolic_range(range_token)
        known, descending = rpt_services.SYMBOLIC_RANGES, True
    label = rpt_services.range_label(range_token, known)

    async def run():
        async with AsyncSessionLocal() as db:
            result = await rpt_services.build_statement(
                db, start=start, end=end, label=label, descending=descending
            )
        await engine.dispose()
        return result

    statement_view = asyncio.run(run())
    generated_at = datetime.now()
    content = rpt_pdf.render_statement_pdf(statement_view, generated_at=generated_at)
    path = out or rpt_pdf.statement_filename(label, generated_at)
    with open(path, "wb") as f:
        f.write(content)
    print(f"명세서 저장 완료: {path} ({statement_view.count}건)")


if __name__ == "__main__":
    cli()
