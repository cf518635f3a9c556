import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_502_BAD_GATEWAY,
)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Ошибка, которую отдаём клиенту как {"message": ...}."""

    status_code = HTTP_401_UNAUTHORIZED
    message = "Error."

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class AuthenticationFailure(ApiError):
    status_code = HTTP_401_UNAUTHORIZED
    message = "Could not verify the login code."


class Unauthenticated(ApiError):
    status_code = HTTP_401_UNAUTHORIZED
    message = "Unauthenticated."


class NotificationError(ApiError):
    status_code = HTTP_502_BAD_GATEWAY
    message = "Could not deliver the login code."


async def api_error_handler(request: Request, exc: ApiError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)


def _field_name(loc) -> str:
    # loc выглядит как ("body", "phone"); "body" нам не интересен
    parts = [str(p) for p in loc if p != "body"]
    return ".".join(parts) or "body"


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(error.get("loc", ())), []).append(error.get("msg", "Invalid value."))

    first = next(iter(errors.values()), ["The given data was invalid."])[0]
    logger.info("Ошибка валидации %s %s: %s", request.method, request.url.path, list(errors))
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": first, "errors": errors},
    )
