"""Global exception handlers for FastAPI application."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import OperationalError

from flag_service.core.exceptions import AppException, default_title
from flag_service.core.schemas.error import (
    ProblemDetail,
    ValidationError,
    ValidationProblemDetail,
)
from flag_service.features.featureflags.evaluation import FlagContractError
from flag_service.infra.metrics import tracking

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state."""
    return getattr(request.state, "request_id", None)


def _get_endpoint(request: Request) -> str:
    """Route path template for metric labels, falling back to the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _create_problem_detail(
    status_code: int,
    detail: str,
    type_: str = "about:blank",
    title: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create RFC 7807 Problem Details response.

    Args:
        status_code: HTTP status code.
        detail: Human-readable error description.
        type_: Error type identifier.
        title: Short human-readable summary.
        instance: URI identifying this occurrence.
        extra: Additional context information.

    Returns:
        Dictionary representing the problem detail.
    """
    problem = ProblemDetail(
        type=type_,
        title=title or default_title(status_code),
        status=status_code,
        detail=detail,
        instance=instance,
    )

    response_data = problem.model_dump(mode="json", exclude_none=True)
    if extra:
        response_data.update(extra)

    return response_data


def _problem_response(
    request: Request,
    status_code: int,
    content: dict[str, Any],
) -> JSONResponse:
    request_id = _get_request_id(request)
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=content)


def _collect_validation_errors(errors: list[dict[str, Any]]) -> list[ValidationError]:
    return [
        ValidationError(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
            value=error.get("input"),
        )
        for error in errors
    ]


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException as RFC 7807 Problem Details."""
    tracking.track_error(
        error_type=exc.type,
        endpoint=_get_endpoint(request),
        status_code=exc.status_code,
    )

    logger.warning(
        "Application exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    problem_data = _create_problem_detail(
        status_code=exc.status_code,
        detail=exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance or request.url.path,
        extra=exc.extra,
    )
    return _problem_response(request, exc.status_code, problem_data)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Handle request validation errors with field-level details.

    Malformed keys, rollouts outside 0..100, negative weights and bodies
    that are not JSON objects all end up here as 422.
    """
    endpoint = _get_endpoint(request)
    validation_errors = _collect_validation_errors(list(exc.errors()))
    for error in validation_errors:
        tracking.track_validation_error(endpoint, error.field)

    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
            "errors": [e.model_dump(mode="json") for e in validation_errors],
        },
    )

    problem = ValidationProblemDetail(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(validation_errors)} field(s)",
        instance=request.url.path,
        errors=validation_errors,
    )
    return _problem_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        problem.model_dump(mode="json", exclude_none=True),
    )


async def pydantic_validation_exception_handler(
    request: Request, exc: PydanticValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors raised outside request parsing."""
    validation_errors = _collect_validation_errors(list(exc.errors()))

    logger.warning(
        "Pydantic validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
        },
    )

    problem = ValidationProblemDetail(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Data validation failed for {len(validation_errors)} field(s)",
        instance=request.url.path,
        errors=validation_errors,
    )
    return _problem_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        problem.model_dump(mode="json", exclude_none=True),
    )


async def flag_contract_exception_handler(
    request: Request, exc: FlagContractError,
) -> JSONResponse:
    """Handle a stored flag that breaks the evaluator's input contract.

    Rows written through the API cannot reach this state; it means the
    database was edited directly.
    """
    tracking.track_error(
        error_type="flag-contract-violation",
        endpoint=_get_endpoint(request),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    logger.error(
        "Stored flag violates evaluation contract",
        extra={"path": request.url.path, "error": str(exc)},
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
        type_="flag-contract-violation",
        instance=request.url.path,
    )
    return _problem_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, problem_data)


async def database_unavailable_handler(
    request: Request, exc: OperationalError,
) -> JSONResponse:
    """Map an unreachable or locked database to 503."""
    tracking.track_error(
        error_type="database-unavailable",
        endpoint=_get_endpoint(request),
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    logger.error(
        "Database operation failed",
        extra={"path": request.url.path, "error": str(exc.orig)},
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="The flag store is temporarily unavailable",
        type_="database-unavailable",
        instance=request.url.path,
    )
    return _problem_response(request, status.HTTP_503_SERVICE_UNAVAILABLE, problem_data)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected exceptions.

    Logs the full traceback and returns a generic 500 without internal details.
    """
    tracking.track_unhandled_exception(
        exception_type=type(exc).__name__,
        endpoint=_get_endpoint(request),
    )

    logger.error(
        "Unexpected exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=exc,
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        type_="internal-error",
        title="Internal Server Error",
        instance=request.url.path,
    )
    return _problem_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, problem_data)


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the handlers that turn exceptions into Problem Details.

    Example:
        app = FastAPI()
        configure_exception_handlers(app)
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, pydantic_validation_exception_handler)
    app.add_exception_handler(FlagContractError, flag_contract_exception_handler)
    app.add_exception_handler(OperationalError, database_unavailable_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers configured")
