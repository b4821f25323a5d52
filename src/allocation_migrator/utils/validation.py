"""Validation helpers for addresses and keys."""

from __future__ import annotations

from typing import Any


def _is_hex(s: str) -> bool:
    try:
        int(s, 16)
        return True
    except ValueError:
        return False


def is_hex_address(addr: Any) -> bool:
    """Return True if addr is a 0x-prefixed 20-byte hex address (42 chars). Checksum is not verified."""
    if not isinstance(addr, str):
        return False
    s = addr.strip()
    if len(s) != 42:
        return False
    if not s.startswith("0x"):
        return False
    return _is_hex(s[2:])


def is_private_key(key: Any) -> bool:
    """Return True if key is a 32-byte hex string, with or without 0x prefix."""
    if not isinstance(key, str):
        return False
    s = key.strip()
    if s.startswith("0x"):
        s = s[2:]
    return len(s) == 64 and _is_hex(s)


def mask_address(addr: str | None) -> str:
    """Return a masked wallet address for logging (e.g. 0x1234...abcd)."""
    if not addr or len(addr) < 10:
        return "***"
    return f"{addr[:6]}...{addr[-4:]}"
