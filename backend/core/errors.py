# backend/core/errors.py

from typing import Any
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# -------------------------------
# Web Errors
# -------------------------------

class WebError(Exception):
    """
    Error carrying the HTTP status and payload that the client should see.
    Raised by providers; translated to a response by the global handler only.
    """
    code: int | None = None

    def __init__(self, scope: str, data: Any = None, code: int | None = None):
        super().__init__(scope)
        self.scope = scope
        self.data = data
        if code is not None:
            self.code = code


class ValidationFailed(WebError):
    code = 400


class InvalidCredentials(WebError):
    code = 401


class UserNotFound(WebError):
    code = 404


class UsernameTaken(WebError):
    code = 409


def web_error_response(error: WebError) -> JSONResponse:
    status_code = error.code if error.code is not None else 500
    content = error.data if error.data is not None else {"message": error.scope}
    return JSONResponse(status_code=status_code, content=content)


def register_error_handler(app: FastAPI):
    """
    Installs the translator for WebError. Every other exception keeps
    FastAPI's default handling.
    """
    @app.exception_handler(WebError)
    async def handle_web_error(request: Request, error: WebError):
        return web_error_response(error)
