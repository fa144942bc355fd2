# tests/__init__.py

"""
FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

테스트 코드는 `pytest`, `pytest-asyncio`, `httpx.AsyncClient` 를 기반으로 작성되었으며,
각 비즈니스 도메인에 따라 하위 디렉토리로 구조화됩니다.

- `domains/`: 각 비즈니스 도메인(gem, sales, rpt)에 대한 테스트 모듈.
- `conftest.py`: 테스트용 인메모리 데이터베이스, 테스트 클라이언트, 데이터 팩토리 픽스처.
"""

__title__ = "SpheneGem API Tests"
__description__ = "Test suite for the SpheneGem FastAPI application."
__version__ = "0.1.0"
__all__ = []
