"""Request identities and the loopback exemption policy."""

from __future__ import annotations

import ipaddress
import secrets
import time
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Opaque ``(session_id, ip)`` pair that owns cells and consumes quota."""

    session_id: str
    ip: str


def new_session_id() -> str:
    """Issue a fresh opaque session identifier."""
    return f"sess_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


def is_loopback(ip: str | None) -> bool:
    """Return True for loopback addresses, including IPv4-mapped IPv6 ones."""
    if not ip:
        return False
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False
    mapped = getattr(address, "ipv4_mapped", None)
    if mapped is not None:
        address = mapped
    return address.is_loopback


def is_exempt(ip: str | None, *, exempt_loopback: bool = True) -> bool:
    """Return True when the identity's daily limit is unbounded."""
    return exempt_loopback and is_loopback(ip)
