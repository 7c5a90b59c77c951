from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logging import get_logger, set_correlation_id
from ..tokens.context import ANONYMOUS
from ..tokens.errors import AccessDenied, AuthenticationError
from ..tokens.service import TokenLifecycleService

logger = get_logger(__name__)

# One message for every failure kind, so clients cannot tell revoked from expired
UNAUTHORIZED_DETAIL = "Invalid or expired token"


def unauthorized_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": UNAUTHORIZED_DETAIL},
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_bearer(authorization: str | None) -> str | None:
    """
    Returns the credential of a `Bearer` authorization header, "" for a bearer
    header without one, and None when there is no bearer header at all.
    """
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip()


class TokenAuthMiddleware(BaseHTTPMiddleware):
    """
    Resolves the bearer token of every request into an AuthContext on
    `request.state.auth`. Requests without a bearer token continue anonymously;
    routes decide whether they need a principal.
    """

    def __init__(self, app, service: TokenLifecycleService):
        super().__init__(app)
        self.service = service

    async def dispatch(self, request: Request, call_next):
        set_correlation_id(request.headers.get("X-Request-ID"))
        token = extract_bearer(request.headers.get("Authorization"))

        if token is None:
            request.state.auth = ANONYMOUS
            return await call_next(request)

        if not token:
            logger.warning("request_rejected", path=request.url.path, reason="empty_bearer")
            return unauthorized_response()

        # Store errors are not AuthenticationErrors and propagate as a 500
        try:
            context = await run_in_threadpool(self.service.authenticate, token)
        except AuthenticationError as e:
            logger.warning("request_rejected", path=request.url.path, reason=e.kind)
            return unauthorized_response()

        request.state.auth = context
        return await call_next(request)


def install_token_auth(app: FastAPI, service: TokenLifecycleService) -> None:
    """Installs the interceptor and the handlers translating auth errors to HTTP."""
    app.add_middleware(TokenAuthMiddleware, service=service)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        logger.warning("request_rejected", path=request.url.path, method=request.method, reason=exc.kind)
        return unauthorized_response()

    @app.exception_handler(AccessDenied)
    async def handle_access_denied(request: Request, exc: AccessDenied):
        logger.warning("request_forbidden", path=request.url.path, method=request.method, role=exc.role)
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": "Access denied"})
