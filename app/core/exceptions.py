# app/core/exceptions.py

"""
애플리케이션 공통 예외와 FastAPI 예외 핸들러를 정의하는 모듈입니다.

모든 오류 응답은 {"message": "..."} 형태의 JSON 본문을 사용합니다.
- NotFoundError: 참조한 보석/판매 ID가 존재하지 않음 (404)
- ValidationMissingError: 필수 필드 누락 또는 숫자 파싱 실패 (400)
- StoreFailureError: 데이터베이스 읽기/쓰기 실패 (500, 상세 내용은 로그에만 기록)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """HTTP 상태 코드와 클라이언트용 메시지를 가지는 기본 예외."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationMissingError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Required fields are missing"


class StoreFailureError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Database error"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": ValidationMissingError.default_message,
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # 상세 오류는 로그에만 남기고 클라이언트에는 일반 메시지만 반환합니다.
    logger.exception("Unhandled database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": StoreFailureError.default_message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """애플리케이션에 공통 예외 핸들러를 등록합니다."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
