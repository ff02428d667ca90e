from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings


class HTTPSMiddleware(BaseHTTPMiddleware):
    """Reject plain-HTTP partner traffic once deployed behind TLS."""

    async def dispatch(self, request: Request, call_next):
        if settings.ENV == "production" and settings.ENFORCE_HTTPS:
            # Proxies terminate TLS and forward the original scheme
            forwarded_proto = request.headers.get("x-forwarded-proto", "")
            scheme = forwarded_proto.split(",")[0].strip() or request.url.scheme

            if scheme != "https":
                return JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={"ok": False, "error": "HTTPS required"},
                )

        return await call_next(request)
