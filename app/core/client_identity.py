from __future__ import annotations

from typing import Optional

from fastapi import Request

from app.core.config import settings

UNKNOWN_CLIENT = "unknown"
FORWARDED_FOR_HEADER = "x-forwarded-for"


def resolve_client_key(
    forwarded_for: Optional[str],
    peer_host: Optional[str],
    trust_forwarded: bool = True,
) -> str:
    """
    Derive the rate-limit key for a caller.
    The leftmost X-Forwarded-For entry is the originating client; proxies append to the right.
    """
    if trust_forwarded and forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if peer_host and peer_host.strip():
        return peer_host.strip()
    return UNKNOWN_CLIENT


def client_key_from_request(request: Request) -> str:
    peer = request.client.host if request.client else None
    return resolve_client_key(
        request.headers.get(FORWARDED_FOR_HEADER),
        peer,
        trust_forwarded=settings.trust_forwarded_for,
    )
