import hashlib
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError
from starlette.requests import Request

from app.models.api_key import ApiKey
from app.services.api_key_auth import (
    API_KEY_PREFIX,
    extract_api_key,
    generate_api_key,
    hash_api_key,
    validate_api_key,
)


def build_request(headers=None, query_string=b""):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/v1/girls",
        "headers": [
            (name.lower().encode(), value.encode())
            for name, value in (headers or {}).items()
        ],
        "query_string": query_string,
    }
    return Request(scope)


def test_bearer_header_preferred_over_query():
    request = build_request(
        {"Authorization": "Bearer header-key"},
        b"api_key=query-key",
    )

    assert extract_api_key(request) == "header-key"


def test_query_param_fallback():
    request = build_request(query_string=b"api_key=query-key")

    assert extract_api_key(request) == "query-key"


def test_non_bearer_authorization_ignored():
    request = build_request({"Authorization": "Basic abc"})

    assert extract_api_key(request) is None


def test_hash_is_sha256_hex():
    assert hash_api_key("cbody_x") == hashlib.sha256(b"cbody_x").hexdigest()


def test_generated_key_shape():
    key = generate_api_key()

    assert key.startswith(API_KEY_PREFIX)
    assert len(key) == len(API_KEY_PREFIX) + 32
    assert key[len(API_KEY_PREFIX):].isalnum()
    assert generate_api_key() != key


def test_validate_active_key(db, make_api_key):
    raw_key, key_id = make_api_key(per_minute=7, per_hour=70)

    validation = validate_api_key(db, raw_key)

    assert validation.valid is True
    assert validation.api_key_id == key_id
    assert validation.partner_name == "Partner ABC"
    assert validation.rate_limit_per_minute == 7
    assert validation.rate_limit_per_hour == 70
    assert db.get(ApiKey, key_id).last_used_at is not None


def test_validate_unknown_key(db):
    validation = validate_api_key(db, "cbody_doesnotexist")

    assert validation.valid is False
    assert validation.error == "Invalid API key"


def test_validate_inactive_key(db, make_api_key):
    raw_key, _ = make_api_key(is_active=False)

    validation = validate_api_key(db, raw_key)

    assert validation.valid is False
    assert validation.error == "API key is inactive"


def test_database_failure_is_reported_not_raised():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("down"))

    validation = validate_api_key(db, "cbody_any")

    assert validation.valid is False
    assert validation.error == "Authentication failed"
    db.rollback.assert_called_once()
