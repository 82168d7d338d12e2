"""Middleware for request correlation and authentication."""

import logging
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from interview_prep.api.auth import JWTService
from interview_prep.api.error_responses import AuthenticationError
from interview_prep.core.logging import audit_log, log_event, set_request_id, span

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id that appears in all its logs and in the response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        set_request_id(request_id)

        log_event(
            "request.started",
            component="middleware",
            operation="request_id",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            log_event(
                "request.completed",
                component="middleware",
                operation="request_id",
                status_code=response.status_code,
            )
            return response
        finally:
            set_request_id(None)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Require a valid bearer token on every non-public route.

    The token is read from the Authorization header, falling back to the
    ``access_token`` cookie. On success the user id lands in
    ``request.state.user_id``.
    """

    def __init__(self, app, jwt_service: JWTService):
        super().__init__(app)
        self.jwt_service = jwt_service
        self.public_routes = {"/docs", "/redoc", "/openapi.json", "/health"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self._is_public_route(request.url.path) or request.method == "OPTIONS":
            response = await call_next(request)
            self._add_security_headers(response)
            return response

        with span(
            "auth.authenticate_request",
            component="auth",
            operation="authenticate",
            path=request.url.path,
            method=request.method,
        ):
            try:
                user_info = self.jwt_service.verify_token(self._extract_token(request))
            except AuthenticationError as exc:
                self._log_authentication_failed(request, exc)
                return self._create_auth_error_response(exc)

        request.state.user_id = user_info["user_id"]
        request.state.user_email = user_info.get("email")
        log_event(
            "auth.authentication_success",
            component="auth",
            operation="authenticate",
            user_id=user_info["user_id"],
            path=request.url.path,
        )
        response = await call_next(request)
        self._add_security_headers(response)
        return response

    def _is_public_route(self, path: str) -> bool:
        # "/" must match exactly or every path would be public
        if path == "/":
            return True
        return any(path == route or path.startswith(f"{route}/") for route in self.public_routes)

    def _extract_token(self, request: Request) -> str:
        authorization = request.headers.get("Authorization")
        if authorization:
            scheme, _, token = authorization.partition(" ")
            if scheme.lower() == "bearer" and token.strip():
                return token.strip()
            log_event(
                "auth.invalid_authorization_header",
                level=logging.WARNING,
                component="auth",
                operation="extract_token",
                scheme=scheme,
            )

        cookie_token = request.cookies.get("access_token")
        if cookie_token:
            return cookie_token

        raise AuthenticationError("No authentication token found")

    def _log_authentication_failed(self, request: Request, exc: AuthenticationError) -> None:
        audit_log(
            "auth.authentication_failed",
            user_id=None,
            client_ip=request.client.host if request.client else None,
            path=request.url.path,
            method=request.method,
            reason=exc.message,
        )

    def _add_security_headers(self, response: Response) -> None:
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)

    def _create_auth_error_response(self, exc: AuthenticationError) -> JSONResponse:
        headers = dict(exc.headers or {})
        headers.update(SECURITY_HEADERS)
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=headers)
