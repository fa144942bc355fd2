import os
import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager
from arq.connections import create_pool, RedisSettings
from arq.cron import cron
from redis.exceptions import RedisError

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# 핵심 설정 및 데이터베이스 모듈 임포트
from app.core.config import settings
from app.core.database import engine, get_session
from app.core.exceptions import StoreFailureError, register_exception_handlers

from app import API_PREFIX

# 태스크 모듈 임포트
from app.core import tasks as core_tasks
from app.domains.sales import tasks as sales_tasks

# 도메인 라우터 임포트
from app.domains.gem.routers import router as gem_router
from app.domains.sales.routers import router as sales_router
from app.domains.rpt.routers import router as rpt_router, download_router as statement_download_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ARQ 워커가 실행할 태스크 함수 목록
worker_functions = [
    core_tasks.health_check_database_task,
    sales_tasks.emit_invoice_task,
]


# ARQ 워커 설정 클래스 (arq app.main.ArqWorkerSettings 로 실행)
class ArqWorkerSettings:
    redis_settings = RedisSettings(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    functions = worker_functions
    cron_jobs = [
        # 매일 자정 데이터베이스 헬스 체크
        cron(core_tasks.health_check_database_task, name="daily_db_health_check",
             hour=0, minute=0, timeout=300, keep_result=600),
    ]


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트(데이터베이스, ARQ Redis)를 함께 처리합니다.
    Redis 에 연결할 수 없으면 송장 생성은 BackgroundTasks 로 처리됩니다.
    """
    logger.info("FastAPI 애플리케이션 시작 중...")
    app.state.redis = None
    if settings.ARQ_ENABLED:
        try:
            app.state.redis = await create_pool(ArqWorkerSettings.redis_settings)
            logger.info("ARQ Redis 커넥션 풀 생성 완료.")
        except (RedisError, OSError) as e:
            logger.warning("ARQ Redis 연결 실패, 송장은 프로세스 내에서 생성합니다: %s", e)

    yield  # 애플리케이션 실행

    logger.info("FastAPI 애플리케이션 종료 중...")
    if app.state.redis:
        await app.state.redis.close()
        logger.info("ARQ Redis 연결 풀 종료 완료.")
    await engine.dispose()
    logger.info("데이터베이스 연결 풀 종료 완료.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

register_exception_handlers(app)

# 생성된 송장 PDF 정적 서비스
os.makedirs(settings.INVOICE_DIR, exist_ok=True)
app.mount(
    f"{API_PREFIX}/invoices/files",
    StaticFiles(directory=settings.INVOICE_DIR),
    name="invoice_files",
)

# -- CORS (Cross-Origin Resource Sharing) 미들웨어 설정 --
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 도메인 라우터 포함 --
app.include_router(gem_router, prefix=f"{API_PREFIX}/gemstones", tags=["Gemstone Inventory (보석 재고 관리)"])
app.include_router(sales_router, prefix=f"{API_PREFIX}/sales", tags=["Sales (판매 기록)"])
app.include_router(statement_download_router, prefix=f"{API_PREFIX}/sales", tags=["Statements (판매 명세서)"])
app.include_router(rpt_router, prefix=f"{API_PREFIX}/invoices", tags=["Statements (판매 명세서)"])


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """
    SpheneGem API의 루트 엔드포인트입니다.
    API의 시작점을 알리고 문서 링크를 제공합니다.
    """
    return {"message": f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    애플리케이션의 헬스 체크 엔드포인트입니다.
    데이터베이스 연결을 테스트하여 서비스의 정상 작동 여부를 확인합니다.
    """
    result = await session.exec(select(1))
    if result.first() is None:
        raise StoreFailureError("Database health check failed: No result from test query")
    return {"status": "ok", "database_connection": "successful"}


# -- Uvicorn 서버 직접 실행 (개발용) --
# if __name__ == "__main__":
#     import uvicorn
#     uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
