#!/usr/bin/env python3
"""
Partner API Simulation: Rate Limit Burst

Fires a burst of requests at /api/v1/girls with one API key and reports how
many were admitted before the per-minute gate returned 429.

SAFE: Read-only GET requests against a local backend.

Usage:
    python3 simulations/sim_partner_burst.py <api_key> [count] [base_url]
"""

import json
import sys
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

DEFAULT_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_COUNT = 120  # above the default 100/minute quota


def send(url: str, api_key: str) -> tuple[int, dict]:
    request = Request(url, headers={"Authorization": f"Bearer {api_key}"})
    try:
        with urlopen(request, timeout=5) as response:
            return response.status, dict(response.headers)
    except HTTPError as exc:
        return exc.code, dict(exc.headers)


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    api_key = sys.argv[1]
    count = int(sys.argv[2]) if len(sys.argv) > 2 else DEFAULT_COUNT
    base_url = sys.argv[3] if len(sys.argv) > 3 else DEFAULT_BASE_URL
    url = f"{base_url}/api/v1/girls"

    print(f"[SIM] Partner burst simulation")
    print(f"[SIM] Target: {url}")
    print(f"[SIM] Requests: {count}")
    print()

    admitted = 0
    first_denial = None

    for i in range(count):
        try:
            status, headers = send(url, api_key)
        except URLError as exc:
            print(f"[SIM] Backend unreachable: {exc.reason}")
            sys.exit(1)

        if status == 200:
            admitted += 1
        elif status == 429 and first_denial is None:
            first_denial = (i + 1, headers.get("Retry-After"))

    print(f"[SIM] Admitted: {admitted}/{count}")
    if first_denial:
        print(f"[SIM] First 429 at request #{first_denial[0]}, Retry-After={first_denial[1]}s")
    else:
        print("[SIM] No request was rate limited")

    print(json.dumps({"admitted": admitted, "sent": count}))


if __name__ == "__main__":
    main()
