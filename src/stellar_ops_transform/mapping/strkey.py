"""Stellar strkey encoding for account ids, muxed accounts and signer keys.

A strkey is the base32 (RFC 4648, no padding) rendering of
``version_byte || payload || crc16``, where the checksum is CRC16-XModem of
``version_byte || payload`` stored little endian. The version byte selects the
leading character of the rendered string.

Version bytes:
    ACCOUNT_ID (G), MUXED_ACCOUNT (M), PRE_AUTH_TX (T), HASH_X (X),
    SIGNED_PAYLOAD (P)

Public Functions:
    encode: Render a payload under a version byte
    decode: Parse and verify a strkey, returning its payload
    encode_account_id / decode_account_id: ed25519 public key helpers
    encode_muxed_account / decode_muxed_account: M-address helpers
    encode_signed_payload: ed25519 signed payload signer helper

All failures raise `AddressDecodeError`.
"""
from __future__ import annotations

import base64
import binascii
import struct
from typing import Optional, Tuple

from ..errors import AddressDecodeError

__all__ = [
    "VERSION_ACCOUNT_ID",
    "VERSION_MUXED_ACCOUNT",
    "VERSION_PRE_AUTH_TX",
    "VERSION_HASH_X",
    "VERSION_SIGNED_PAYLOAD",
    "crc16_xmodem",
    "encode",
    "decode",
    "encode_account_id",
    "decode_account_id",
    "encode_muxed_account",
    "decode_muxed_account",
    "encode_signed_payload",
]

VERSION_ACCOUNT_ID = 6 << 3
VERSION_MUXED_ACCOUNT = 12 << 3
VERSION_SIGNED_PAYLOAD = 15 << 3
VERSION_PRE_AUTH_TX = 19 << 3
VERSION_HASH_X = 23 << 3

_KEY_LEN = 32
_MAX_SIGNED_PAYLOAD_LEN = 64


def crc16_xmodem(data: bytes) -> int:
    """CRC16-XModem (poly 0x1021, init 0) as used by strkey checksums."""
    return binascii.crc_hqx(data, 0)


def encode(version: int, payload: bytes) -> str:
    body = bytes([version]) + bytes(payload)
    checksum = struct.pack("<H", crc16_xmodem(body))
    return base64.b32encode(body + checksum).decode("ascii").rstrip("=")


def decode(expected_version: int, value: str) -> bytes:
    """Decode ``value`` and return its payload after version/checksum checks."""
    if not isinstance(value, str) or not value:
        raise AddressDecodeError(f"strkey must be a non-empty string, got {value!r}")
    padded = value + "=" * (-len(value) % 8)
    try:
        raw = base64.b32decode(padded, casefold=False)
    except (binascii.Error, ValueError) as exc:
        raise AddressDecodeError(f"invalid base32 in strkey {value!r}") from exc
    if len(raw) < 3:
        raise AddressDecodeError(f"strkey {value!r} is too short")
    body, checksum = raw[:-2], raw[-2:]
    if body[0] != expected_version:
        raise AddressDecodeError(
            f"strkey {value!r} has version byte {body[0]}, expected {expected_version}"
        )
    if struct.unpack("<H", checksum)[0] != crc16_xmodem(body):
        raise AddressDecodeError(f"strkey {value!r} has an invalid checksum")
    return body[1:]


def encode_account_id(key: bytes) -> str:
    if key is None or len(key) != _KEY_LEN:
        size = None if key is None else len(key)
        raise AddressDecodeError(f"ed25519 public key must be {_KEY_LEN} bytes, got {size}")
    return encode(VERSION_ACCOUNT_ID, key)


def decode_account_id(value: str) -> bytes:
    key = decode(VERSION_ACCOUNT_ID, value)
    if len(key) != _KEY_LEN:
        raise AddressDecodeError(f"account id {value!r} does not hold a {_KEY_LEN}-byte key")
    return key


def encode_muxed_account(key: bytes, mux_id: int) -> str:
    if key is None or len(key) != _KEY_LEN:
        raise AddressDecodeError(f"ed25519 public key must be {_KEY_LEN} bytes")
    return encode(VERSION_MUXED_ACCOUNT, bytes(key) + struct.pack(">Q", mux_id))


def decode_muxed_account(value: str) -> Tuple[bytes, Optional[int]]:
    """Decode a G or M address into ``(ed25519_key, mux_id)``."""
    if value.startswith("M"):
        payload = decode(VERSION_MUXED_ACCOUNT, value)
        if len(payload) != _KEY_LEN + 8:
            raise AddressDecodeError(f"muxed account {value!r} has a malformed payload")
        return payload[:_KEY_LEN], struct.unpack(">Q", payload[_KEY_LEN:])[0]
    return decode_account_id(value), None


def encode_signed_payload(key: bytes, payload: bytes) -> str:
    if key is None or len(key) != _KEY_LEN:
        raise AddressDecodeError(f"signed payload signer key must be {_KEY_LEN} bytes")
    if len(payload) > _MAX_SIGNED_PAYLOAD_LEN:
        raise AddressDecodeError(
            f"signed payload must be at most {_MAX_SIGNED_PAYLOAD_LEN} bytes, got {len(payload)}"
        )
    padding = b"\x00" * (-len(payload) % 4)
    return encode(
        VERSION_SIGNED_PAYLOAD,
        bytes(key) + struct.pack(">I", len(payload)) + bytes(payload) + padding,
    )
