import hashlib
import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.api_key import ApiKey

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "cbody_"
API_KEY_RANDOM_LENGTH = 32
_API_KEY_ALPHABET = string.ascii_letters + string.digits


@dataclass
class ApiKeyValidation:
    valid: bool
    api_key_id: str | None = None
    partner_name: str | None = None
    rate_limit_per_minute: int | None = None
    rate_limit_per_hour: int | None = None
    error: str | None = None


def extract_api_key(request: Request) -> str | None:
    """
    Bearer token wins; ``?api_key=`` is the fallback for partners that
    cannot set headers.
    """
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):]

    return request.query_params.get("api_key")


def hash_api_key(api_key: str) -> str:
    return hashlib.sha256(api_key.encode()).hexdigest()


def generate_api_key() -> str:
    suffix = "".join(
        secrets.choice(_API_KEY_ALPHABET) for _ in range(API_KEY_RANDOM_LENGTH)
    )
    return f"{API_KEY_PREFIX}{suffix}"


def validate_api_key(db: Session, api_key: str) -> ApiKeyValidation:
    try:
        record = (
            db.query(ApiKey)
            .filter_by(api_key_hash=hash_api_key(api_key))
            .first()
        )

        if record is None:
            return ApiKeyValidation(valid=False, error="Invalid API key")

        if not record.is_active:
            return ApiKeyValidation(valid=False, error="API key is inactive")

        validation = ApiKeyValidation(
            valid=True,
            api_key_id=record.id,
            partner_name=record.partner_name,
            rate_limit_per_minute=record.rate_limit_per_minute,
            rate_limit_per_hour=record.rate_limit_per_hour,
        )
    except SQLAlchemyError:
        logger.exception("API key validation failed")
        db.rollback()
        return ApiKeyValidation(valid=False, error="Authentication failed")

    _touch_last_used(db, record)
    return validation


def _touch_last_used(db: Session, record: ApiKey) -> None:
    # Bookkeeping only; a failed write must not reject the request
    try:
        record.last_used_at = datetime.now(timezone.utc)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning(f"Could not update last_used_at | api_key_id={record.id}")
