import logging
from typing import Callable

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.models.api_request_log import ApiRequestLog

logger = logging.getLogger(__name__)


class RequestLogRecorder:
    """
    Persists one audit row per partner API call.

    Uses its own session so a failed insert never rolls back or blocks the
    request it describes. Failures are logged and dropped.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    def log_api_request(
        self,
        api_key_id: str,
        endpoint: str,
        response_status: int,
        response_time_ms: int,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        try:
            db = self._session_factory()
        except Exception:
            logger.exception("API request log unavailable")
            return

        try:
            db.add(
                ApiRequestLog(
                    api_key_id=api_key_id,
                    endpoint=endpoint,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    response_status=response_status,
                    response_time_ms=response_time_ms,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(
                f"Failed to record API request | api_key_id={api_key_id} "
                f"endpoint={endpoint} status={response_status}"
            )
        finally:
            db.close()


request_log_recorder = RequestLogRecorder()
