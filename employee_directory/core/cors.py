"""
허용 목록(allow-list) 기반 CORS 미들웨어.

- 목록에 있는 Origin만 그대로 돌려주고 credentials를 허용한다 ("*" 사용 안 함)
- preflight(OPTIONS + Access-Control-Request-Method)는 204 No Content로 응답
"""

from typing import Dict, Iterable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
ALLOW_HEADERS = (
    "Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, "
    "Authorization, Accept, Origin, Cache-Control, X-Requested-With"
)
MAX_AGE = "86400"


def cors_headers(origin: str | None, allowed_origins: Iterable[str]) -> Dict[str, str]:
    """허용된 Origin이면 응답에 붙일 CORS 헤더, 아니면 빈 dict."""
    if not origin or origin not in allowed_origins:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
        "Vary": "Origin",
    }


class AllowListCORSMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        headers = cors_headers(origin, self.allowed_origins)

        is_preflight = (
            request.method == "OPTIONS"
            and "access-control-request-method" in request.headers
        )
        if is_preflight:
            response = Response(status_code=204)
            if headers:
                headers.update({
                    "Access-Control-Allow-Methods": ALLOW_METHODS,
                    "Access-Control-Allow-Headers": ALLOW_HEADERS,
                    "Access-Control-Max-Age": MAX_AGE,
                })
            response.headers.update(headers)
            return response

        response = await call_next(request)
        response.headers.update(headers)
        return response
