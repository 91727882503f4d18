"""Conversions between base58 address text and canonical 32-byte keys."""

import base58  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from pdadirectory.errors import FormatError, ValidationError

ADDRESS_SIZE = 32
HEX_PREFIX = "0x"


def decode_address(text: str, field: str = "address") -> bytes:
    """Decode a base58 address into its 32 raw bytes."""
    if not isinstance(text, str):
        raise ValidationError(f"{field} must be a base58 string")
    try:
        raw = base58.b58decode(text)
    except ValueError as e:
        raise ValidationError(f"{field} is not valid base58") from e
    if len(raw) != ADDRESS_SIZE:
        raise ValidationError(
            f"{field} must decode to {ADDRESS_SIZE} bytes, got {len(raw)}"
        )
    return raw


def encode_address(raw: bytes) -> str:
    # Addresses only come back from storage, so a bad width is a data defect.
    if len(raw) != ADDRESS_SIZE:
        raise FormatError(f"stored address is {len(raw)} bytes, want {ADDRESS_SIZE}")
    return str(Pubkey.from_bytes(bytes(raw)))


def to_hex(raw: bytes) -> str:
    return HEX_PREFIX + bytes(raw).hex()
