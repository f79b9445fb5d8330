"""Identity middleware - reads the authenticated email set by the proxy."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from learnscore.services.auth import get_auth_email


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request.state.user_email = get_auth_email(request.headers)
        return await call_next(request)
