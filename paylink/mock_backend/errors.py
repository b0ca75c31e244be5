"""Structured `{message, code}` errors for the mock backend"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..models.payment_link import ApiErrorBody

logger = logging.getLogger(__name__)

PAYMENT_LINK_NOT_FOUND = "PAYMENT_LINK_NOT_FOUND"
PAYMENT_LINK_NOT_PAYABLE = "PAYMENT_LINK_NOT_PAYABLE"
PAYMENT_LINK_NOT_EDITABLE = "PAYMENT_LINK_NOT_EDITABLE"
MERCHANT_NOT_FOUND = "MERCHANT_NOT_FOUND"
INVALID_INPUT = "INVALID_INPUT"
INVALID_CARD_NUMBER = "INVALID_CARD_NUMBER"
PSP_SDK_ERROR = "PSP_SDK_ERROR"
PSP_ROUTING_FAILED = "PSP_ROUTING_FAILED"


class BackendError(Exception):
    """Error rendered as a `{message, code}` JSON body"""

    def __init__(self, status_code: int, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code


def link_not_found(slug: str) -> BackendError:
    return BackendError(404, f"Payment link {slug} not found", PAYMENT_LINK_NOT_FOUND)


async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    body = ApiErrorBody(message=exc.message, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=body.to_wire())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = ", ".join(".".join(str(part) for part in err["loc"][1:]) for err in exc.errors())
    body = ApiErrorBody(message=f"Invalid request: {fields}", code=INVALID_INPUT)
    return JSONResponse(status_code=400, content=body.to_wire())
