#!/usr/bin/env python3
"""
Partner API key generator.

Prints a new API key exactly once together with the SHA-256 hash that is
stored server side, and the SQL needed to register it. With --insert the
row is written directly through the application's database session.

Usage:
    python3 scripts/generate_api_key.py "Partner ABC"
    python3 scripts/generate_api_key.py "Partner ABC" --per-minute 60 --per-hour 500 --insert
"""

import argparse
import sys
import uuid
from datetime import datetime, timezone

from app.core.config import settings
from app.services.api_key_auth import generate_api_key, hash_api_key


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def build_insert_sql(
    api_key_id: str,
    partner_name: str,
    api_key_hash: str,
    per_minute: int,
    per_hour: int,
    notes: str,
) -> str:
    return (
        "INSERT INTO api_keys (id, partner_name, api_key_hash, is_active, "
        "rate_limit_per_minute, rate_limit_per_hour, notes)\n"
        "VALUES (\n"
        f"  {_sql_literal(api_key_id)},\n"
        f"  {_sql_literal(partner_name)},\n"
        f"  {_sql_literal(api_key_hash)},\n"
        "  true,\n"
        f"  {per_minute},\n"
        f"  {per_hour},\n"
        f"  {_sql_literal(notes)}\n"
        ");"
    )


def insert_api_key(
    partner_name: str,
    api_key_hash: str,
    per_minute: int,
    per_hour: int,
    notes: str,
) -> str:
    from app.db.session import SessionLocal
    from app.models.api_key import ApiKey

    db = SessionLocal()
    try:
        record = ApiKey(
            partner_name=partner_name,
            api_key_hash=api_key_hash,
            is_active=True,
            rate_limit_per_minute=per_minute,
            rate_limit_per_hour=per_hour,
            notes=notes,
        )
        db.add(record)
        db.commit()
        return record.id
    finally:
        db.close()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate a partner API key")
    parser.add_argument("partner_name", help="Display name of the partner")
    parser.add_argument(
        "--per-minute",
        type=int,
        default=settings.DEFAULT_RATE_LIMIT_PER_MINUTE,
    )
    parser.add_argument(
        "--per-hour",
        type=int,
        default=settings.DEFAULT_RATE_LIMIT_PER_HOUR,
    )
    parser.add_argument(
        "--insert",
        action="store_true",
        help="Write the key to DATABASE_URL instead of only printing SQL",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    if args.per_minute <= 0 or args.per_hour <= 0:
        print("[KEY] ERROR: rate limits must be positive", file=sys.stderr)
        return 1

    api_key = generate_api_key()
    api_key_hash = hash_api_key(api_key)
    notes = f"Generated on {datetime.now(timezone.utc).isoformat()}"

    print(f"[KEY] Partner: {args.partner_name}")
    print()
    print("[KEY] API key (shown once, send over a secure channel):")
    print(api_key)
    print()
    print(f"[KEY] Stored hash: {api_key_hash}")
    print()

    if args.insert:
        api_key_id = insert_api_key(
            args.partner_name, api_key_hash, args.per_minute, args.per_hour, notes
        )
        print(f"[KEY] Inserted api_keys row id={api_key_id}")
    else:
        print("[KEY] Register it with:")
        print(
            build_insert_sql(
                str(uuid.uuid4()),
                args.partner_name, api_key_hash, args.per_minute, args.per_hour, notes
            )
        )

    print()
    print("[KEY] Partner usage:")
    print(f'curl -H "Authorization: Bearer {api_key}" <host>{settings.API_V1_PREFIX}/girls')
    return 0


if __name__ == "__main__":
    sys.exit(main())
