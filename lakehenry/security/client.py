"""Client identification helpers shared by the limiter and the login counter."""

from __future__ import annotations

from flask import request
from flask_limiter.util import get_remote_address


def client_ip() -> str:
    """Best guess at the caller's IP.

    Order: ``CF-Connecting-IP``, the first ``X-Forwarded-For`` hop, then the
    socket address.
    """
    header_ip = (request.headers.get('CF-Connecting-IP') or '').strip()
    if header_ip:
        return header_ip
    forwarded = request.headers.get('X-Forwarded-For') or ''
    first_hop = forwarded.split(',')[0].strip()
    if first_hop:
        return first_hop
    return get_remote_address() or 'unknown'
