"""Shared-token verification for the API and the log stream."""

from __future__ import annotations

import secrets
from typing import Mapping


def extract_token(headers: Mapping[str, str]) -> str | None:
    """
    Pull the presented credential out of request headers.

    Supported methods:
        - Header: Authorization: Bearer <token>
        - Header: X-API-Key: <token>

    Returns None when no usable credential is present, including a
    malformed Authorization header.
    """
    auth_header = headers.get("authorization")
    if auth_header:
        parts = auth_header.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1]:
            return parts[1]
        return None

    api_key = headers.get("x-api-key")
    return api_key or None


def verify_token(presented: str | None, secret: str | None) -> bool:
    """
    Compare a presented credential with the configured secret.

    Returns False when either side is missing. Lengths are compared first,
    which reveals whether the length matches; past that the comparison runs
    in time independent of where the values differ.
    """
    if not presented or not secret:
        return False

    presented_bytes = presented.encode("utf-8")
    secret_bytes = secret.encode("utf-8")
    if len(presented_bytes) != len(secret_bytes):
        return False

    return secrets.compare_digest(presented_bytes, secret_bytes)
