"""
Security gate middleware.

Runs once per request before routing: authenticates the bearer token, binds
the AuthResult to ``request.state.auth`` and short-circuits with 401/403 when
the authorization policy denies the path.
"""

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from asha_assist.security.authenticator import Authenticated, authenticate
from asha_assist.security.policy import AuthorizationPolicy, Forbidden, Unauthenticated
from asha_assist.security.tokens import get_token_engine

logger = structlog.get_logger(__name__)


class SecurityGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, policy: AuthorizationPolicy):
        super().__init__(app)
        self.policy = policy

    async def dispatch(self, request: Request, call_next):
        auth = authenticate(request.headers.get("Authorization"), get_token_engine())
        request.state.auth = auth

        decision = self.policy.evaluate(request.method, request.url.path, auth)
        if isinstance(decision, Unauthenticated):
            return JSONResponse(status_code=401, content={"detail": "Authentication required"})
        if isinstance(decision, Forbidden):
            logger.info(
                "request_forbidden",
                path=request.url.path,
                method=request.method,
                username=auth.principal.username if isinstance(auth, Authenticated) else None,
            )
            return JSONResponse(status_code=403, content={"detail": "Forbidden"})
        return await call_next(request)
