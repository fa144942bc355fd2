# tests/conftest.py

from typing import AsyncGenerator, Awaitable, Callable, Optional
from datetime import datetime, UTC
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# app.main을 임포트하여 FastAPI 앱 인스턴스에 접근합니다.
from app.main import app as main_app
from app.core import dependencies as deps
from app.core.config import settings
from app.core.database import get_session, create_db_and_tables

from app.domains.gem import models as gem_models
from app.domains.sales import models as sales_models


# --- 테스트용 데이터베이스 설정 ---
# 테스트마다 독립된 인메모리 SQLite 데이터베이스를 사용합니다.
# StaticPool 로 하나의 연결을 공유해야 인메모리 DB가 세션 간에 유지됩니다.
TEST_DATABASE_URL = "sqlite+aiosqlite://"


# --- 데이터베이스 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    각 테스트 함수마다 새 데이터베이스와 테이블을 만들고,
    테스트 완료 후 엔진을 폐기하여 테스트 간의 격리를 보장합니다.
    """
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_db_and_tables(test_engine)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        await session.close()
        async with test_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)
        await test_engine.dispose()


@pytest.fixture(scope="function")
def invoice_dir(tmp_path, monkeypatch) -> str:
    """송장 PDF 저장 경로를 테스트 임시 디렉토리로 바꿉니다."""
    path = tmp_path / "invoices"
    path.mkdir()
    monkeypatch.setattr(settings, "INVOICE_DIR", str(path))
    return str(path)


# --- 데이터 팩토리 픽스처 ---
@pytest.fixture(scope="function")
def gemstone_factory(db_session: AsyncSession) -> Callable[..., Awaitable[gem_models.Gemstone]]:
    """
    속성을 지정하여 테스트용 보석 로트를 생성하는 팩토리 함수를 반환합니다.
    총액은 weight x price_per_carat 로 계산해 저장합니다.
    """
    async def _create_gemstone(
        code: str = "RB-001",
        name: str = "Ruby",
        weight: str = "10.5",
        price_per_carat: str = "100.00",
        quantity: int = 5,
        **kwargs,
    ) -> gem_models.Gemstone:
        weight_value = Decimal(weight)
        ppc_value = Decimal(price_per_carat)
        gemstone = gem_models.Gemstone(
            code=code,
            name=name,
            weight=weight_value,
            price_per_carat=ppc_value,
            quantity=quantity,
            total_price=gem_models.derive_total_price(weight_value, ppc_value),
            **kwargs,
        )
        db_session.add(gemstone)
        await db_session.commit()
        await db_session.refresh(gemstone)
        return gemstone
    return _create_gemstone


@pytest.fixture(scope="function")
def sale_factory(db_session: AsyncSession) -> Callable[..., Awaitable[sales_models.Sale]]:
    """판매 일시를 지정하여 판매 기록을 직접 생성하는 팩토리 함수를 반환합니다."""
    async def _create_sale(
        sold_at: Optional[datetime] = None,
        carat_sold: str = "1.000",
        total_amount: str = "100.00",
        code: str = "RB-001",
        **kwargs,
    ) -> sales_models.Sale:
        sale_data = {
            "gemstone_id": 1,
            "code": code,
            "name": "Ruby",
            "shape": "Oval",
            "quantity": 1,
            "carat_sold": Decimal(carat_sold),
            "marking_price": Decimal("100.00"),
            "selling_price": Decimal("100.00"),
            "total_amount": Decimal(total_amount),
            "sold_at": sold_at or datetime.now(UTC),
            **kwargs,
        }
        sale = sales_models.Sale(**sale_data)
        db_session.add(sale)
        await db_session.commit()
        await db_session.refresh(sale)
        return sale
    return _create_sale


# --- 클라이언트 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient 인스턴스를 생성하고, 테스트용 비동기 DB 세션을 주입합니다.
    ASGITransport 는 lifespan 을 실행하지 않으므로 app.state.redis 가 없고,
    송장은 BackgroundTasks 로 처리됩니다.
    """

    def override_get_session_and_dependency():
        yield db_session

    original_overrides = main_app.dependency_overrides.copy()

    try:
        # get_session과 deps.get_db_session 모두 오버라이드
        main_app.dependency_overrides[get_session] = override_get_session_and_dependency
        main_app.dependency_overrides[deps.get_db_session] = override_get_session_and_dependency

        async with AsyncClient(transport=ASGITransport(app=main_app), base_url="http://test") as async_client:
            yield async_client
    finally:
        main_app.dependency_overrides = original_overrides
