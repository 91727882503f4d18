"""Parsing and bounds checks for client-supplied query parameters."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from pdadirectory.address import decode_address
from pdadirectory.config import Limits
from pdadirectory.errors import ValidationError

_INT_RE = re.compile(r"[+-]?[0-9]+")

# SQLite binds integers as signed 64-bit.
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class PdaRequest:
    pda: bytes | None
    program_id: bytes | None
    cursor: bytes | None
    limit: int
    offset: int


def _parse_int(raw: Any, field: str) -> int:
    # bool is an int subclass; JSON true/false is not a count.
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if _INT_RE.fullmatch(text):
            try:
                return int(text)
            except ValueError as e:
                # More digits than int() will convert.
                raise ValidationError(f"{field} is too large") from e
    raise ValidationError(f"{field} must be an integer")


def resolve_limit(raw: Any, limits: Limits = Limits()) -> int:
    if raw is None:
        return limits.default_limit
    limit = _parse_int(raw, "limit")
    if limit < 1:
        raise ValidationError("limit must be a positive integer")
    return min(limit, limits.max_limit)


def resolve_offset(raw: Any) -> int:
    if raw is None:
        return 0
    offset = _parse_int(raw, "offset")
    if offset < 0:
        raise ValidationError("offset must be a non-negative integer")
    if offset > MAX_OFFSET:
        raise ValidationError(f"offset must be at most {MAX_OFFSET}")
    return offset


def resolve_address(raw: Any, field: str) -> bytes | None:
    if raw is None or raw == "":
        return None
    return decode_address(raw, field)


def validate_request(body: Any, limits: Limits = Limits()) -> PdaRequest:
    """Validate a decoded JSON request body."""
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise ValidationError("request body must be a JSON object")

    return PdaRequest(
        pda=resolve_address(body.get("pda"), "pda"),
        program_id=resolve_address(body.get("program_id"), "program_id"),
        cursor=resolve_address(body.get("cursor"), "cursor"),
        limit=resolve_limit(body.get("limit"), limits),
        offset=resolve_offset(body.get("offset")),
    )
