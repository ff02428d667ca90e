from fastapi import Request

from app.services.rate_limiter import RateLimiter
from app.services.request_log import RequestLogRecorder


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_request_log_recorder(request: Request) -> RequestLogRecorder:
    return request.app.state.request_log_recorder


def get_client_ip(request: Request) -> str:
    """
    First hop of X-Forwarded-For, then X-Real-IP, then the socket peer.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"
