"""
Response envelope and exception handlers.

Every response has the shape ``{success, message, data, error}``.
"""

from typing import Any, Callable, Optional, Type

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from homestay.core.exceptions import BaseAppException, ErrorCode
from homestay.core.logging import get_logger
from homestay.services.base.service_result import ServiceResult

logger = get_logger(__name__)


def error_response(status_code: int, code: str, message: str, details: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            {
                "success": False,
                "message": message,
                "data": None,
                "error": {"code": code, "message": message, "details": details},
            }
        ),
    )


def respond(
    result: ServiceResult,
    transform: Optional[Callable[[Any], Any]] = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Render a ServiceResult, mapping failures to their HTTP status."""
    if not result.is_success:
        return JSONResponse(status_code=result.error.status_code, content=jsonable_encoder(result.envelope()))

    data = transform(result.data) if transform is not None else result.data
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            {"success": True, "message": result.message, "data": data, "error": None}
        ),
    )


def dump_as(schema: Type[BaseModel]) -> Callable[[Any], Any]:
    """Transform for :func:`respond` rendering the data through ``schema``."""

    def transform(data):
        return schema.model_validate(data).model_dump(mode="json")

    return transform


def dump_each(schema: Type[BaseModel]) -> Callable[[Any], Any]:
    def transform(items):
        return [schema.model_validate(item).model_dump(mode="json") for item in items]

    return transform


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    logger.warning(
        f"Application exception: {exc.error_code.value} - {exc.message}",
        extra={"path": request.url.path, "method": request.method},
    )
    return error_response(exc.status_code, exc.error_code.value, exc.message, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors = {}
    for error in exc.errors():
        field_path = ".".join(str(part) for part in error["loc"])
        field_errors.setdefault(field_path, []).append(error["msg"])

    logger.info(
        f"Validation error: {len(field_errors)} field(s) failed validation",
        extra={"path": request.url.path, "method": request.method},
    )
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorCode.VALIDATION_ERROR.value,
        "Request validation failed",
        {"field_errors": field_errors},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
