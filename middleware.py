import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from exceptions import ShrinkrayError
from security.auth import authenticate, is_admin_key


class SecurityMiddleware(BaseHTTPMiddleware):
    """Request ID + API key authentication.

    Order of operations per request:
    1. Inject request ID (UUID)
    2. Authenticate (check Bearer token) and stash the client on request.state
    3. Process request
    4. Add X-Request-ID to response
    """

    async def dispatch(self, request: Request, call_next):
        # 1. Request ID
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        try:
            # 2. Authentication
            client_id = authenticate(request)
            request.state.client_id = client_id
            request.state.is_authenticated = client_id is not None
            request.state.is_admin = client_id is not None and is_admin_key(_bearer_key(request))

            # 3. Process request
            response = await call_next(request)

        except ShrinkrayError as exc:
            response = error_response(exc)

        # 4. Request ID header
        response.headers["X-Request-ID"] = request_id
        return response


def error_response(exc: ShrinkrayError) -> JSONResponse:
    """Render a ShrinkrayError as the standard JSON error body."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.error_code,
            "message": exc.message,
            **exc.details,
        },
    )


def _bearer_key(request: Request) -> str:
    return request.headers.get("Authorization", "")[7:]
