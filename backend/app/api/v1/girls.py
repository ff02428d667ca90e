import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_client_ip, get_rate_limiter, get_request_log_recorder
from app.core.config import settings
from app.db.session import get_db
from app.schemas.girl_schema import GirlListMeta, GirlListResponse
from app.services.api_key_auth import extract_api_key, validate_api_key
from app.services.girl_directory import list_public_girls
from app.services.rate_limiter import RateLimiter, RateLimitResult
from app.services.request_log import RequestLogRecorder

router = APIRouter()
logger = logging.getLogger(__name__)

GIRLS_ENDPOINT = "/api/v1/girls"
MISSING_KEY_MESSAGE = (
    "Missing API key. Use Authorization: Bearer <api_key> or ?api_key=<api_key>"
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error": message},
    )


def _rate_limit_headers(limit: int, result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": result.reset_at.isoformat(),
    }


def _rate_limited(limit: int, result: RateLimitResult) -> JSONResponse:
    headers = _rate_limit_headers(limit, result)
    headers["Retry-After"] = str(result.retry_after)

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "ok": False,
            "error": "Rate limit exceeded",
            "retryAfter": result.retry_after,
        },
        headers=headers,
    )


@router.get("/girls", response_model=GirlListResponse)
def list_girls(
    request: Request,
    db: Session = Depends(get_db),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    recorder: RequestLogRecorder = Depends(get_request_log_recorder),
):
    started = time.perf_counter()
    ip_address = get_client_ip(request)
    user_agent = request.headers.get("user-agent")
    api_key_id: str | None = None

    def audit(response_status: int) -> None:
        # Audit is after-the-fact; its failure never changes the response
        try:
            recorder.log_api_request(
                api_key_id=api_key_id,
                endpoint=GIRLS_ENDPOINT,
                ip_address=ip_address,
                user_agent=user_agent,
                response_status=response_status,
                response_time_ms=int((time.perf_counter() - started) * 1000),
            )
        except Exception:
            logger.exception(f"Audit logging failed | api_key_id={api_key_id}")

    try:
        # ─────────────────────────────────────────────
        # 1️⃣ API KEY
        # ─────────────────────────────────────────────
        api_key = extract_api_key(request)
        if not api_key:
            return _error(status.HTTP_401_UNAUTHORIZED, MISSING_KEY_MESSAGE)

        validation = validate_api_key(db, api_key)
        if not validation.valid:
            logger.warning(
                f"Partner API auth rejected | ip={ip_address} reason={validation.error}"
            )
            return _error(
                status.HTTP_401_UNAUTHORIZED,
                validation.error or "Invalid API key",
            )

        api_key_id = validation.api_key_id
        # Only a missing quota falls back; 0 or less reaches the limiter and is denied
        per_minute = validation.rate_limit_per_minute
        if per_minute is None:
            per_minute = settings.DEFAULT_RATE_LIMIT_PER_MINUTE
        per_hour = validation.rate_limit_per_hour
        if per_hour is None:
            per_hour = settings.DEFAULT_RATE_LIMIT_PER_HOUR

        # ─────────────────────────────────────────────
        # 2️⃣ RATE LIMITING: API KEY (minute, then hour)
        # ─────────────────────────────────────────────
        key_result = rate_limiter.check_identity_limit(api_key_id, per_minute, per_hour)
        if not key_result.allowed:
            logger.warning(
                f"Rate limit exceeded | api_key_id={api_key_id} "
                f"retry_after={key_result.retry_after}"
            )
            audit(status.HTTP_429_TOO_MANY_REQUESTS)
            return _rate_limited(per_minute, key_result)

        # ─────────────────────────────────────────────
        # 3️⃣ RATE LIMITING: ORIGIN
        # ─────────────────────────────────────────────
        origin_result = rate_limiter.check_origin_limit(ip_address)
        if not origin_result.allowed:
            logger.warning(
                f"IP rate limit exceeded | ip={ip_address} "
                f"retry_after={origin_result.retry_after}"
            )
            audit(status.HTTP_429_TOO_MANY_REQUESTS)
            return _rate_limited(settings.IP_RATE_LIMIT_PER_HOUR, origin_result)

        # ─────────────────────────────────────────────
        # 4️⃣ QUERY
        # ─────────────────────────────────────────────
        girls = list_public_girls(db)
        payload = GirlListResponse(
            data=girls,
            meta=GirlListMeta(
                total=len(girls),
                timestamp=datetime.now(timezone.utc),
            ),
        )

        audit(status.HTTP_200_OK)

        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=payload.model_dump(mode="json"),
            headers=_rate_limit_headers(per_minute, key_result),
        )

    except Exception:
        logger.exception(f"Partner API failure | endpoint={GIRLS_ENDPOINT}")

        if api_key_id:
            audit(status.HTTP_500_INTERNAL_SERVER_ERROR)

        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@router.post("/girls", include_in_schema=False)
@router.put("/girls", include_in_schema=False)
@router.delete("/girls", include_in_schema=False)
def girls_method_not_allowed():
    return _error(status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")
