from fastapi import HTTPException, Request
from fastapi.responses import PlainTextResponse


class PlainTextHTTPException(HTTPException):
    """HTTPException answered with a text/plain body instead of JSON."""


async def plain_text_http_exception_handler(request: Request, exc: PlainTextHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)
