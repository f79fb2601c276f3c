from __future__ import annotations

from typing import AbstractSet, Optional

from werkzeug.http import parse_list_header


def client_ip(forwarded_for: Optional[str], remote_addr: Optional[str] = None) -> str:
    """Caller address: first hop of an X-Forwarded-For chain, else the socket peer."""

    if forwarded_for:
        hops = [hop.strip() for hop in parse_list_header(forwarded_for) if hop.strip()]
        if hops:
            return hops[0]
    return (remote_addr or "").strip()


def is_authorized(caller_ip: str, allowed_ips: AbstractSet[str]) -> bool:
    """Exact match of the caller's first forwarded address against the allow-list.

    ``caller_ip`` may be a raw X-Forwarded-For chain. An empty allow-list
    authorizes everyone (fail-open); AttendanceService logs that gap.
    """

    if not allowed_ips:
        return True
    return client_ip(caller_ip) in allowed_ips
