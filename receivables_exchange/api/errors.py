"""Map domain exceptions onto HTTP responses"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from receivables_exchange.domain.exceptions import (
    ConflictError,
    DomainException,
    ForbiddenError,
    InsufficientFundsError,
    NotFoundError,
    PreconditionFailedError,
    UnauthorizedError,
    ValidationError,
)

# Most specific first: AlreadyPurchasedError is a ConflictError, etc.
STATUS_CODES = (
    (UnauthorizedError, 401),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PreconditionFailedError, 400),
    (InsufficientFundsError, 400),
    (ValidationError, 422),
)


def status_code_for(exc: DomainException) -> int:
    for exc_type, status_code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 400


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = status_code_for(exc)
    logging.warning(
        f"{type(exc).__name__}: {exc}",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "path": request.url.path,
            "status": status_code,
        },
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
