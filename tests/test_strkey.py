from __future__ import annotations

import pytest

from stellar_ops_transform.errors import AddressDecodeError
from stellar_ops_transform.mapping import strkey

KEY = bytes(range(32))


def test_crc16_xmodem_check_value():
    # Standard CRC-16/XMODEM check value for the ASCII digits 1..9.
    assert strkey.crc16_xmodem(b"123456789") == 0x31C3


def test_account_id_rendering():
    address = strkey.encode_account_id(KEY)
    assert address.startswith("G")
    assert len(address) == 56
    assert strkey.decode_account_id(address) == KEY


def test_account_id_rejects_wrong_key_length():
    with pytest.raises(AddressDecodeError):
        strkey.encode_account_id(KEY[:31])


def test_checksum_mismatch_detected():
    address = strkey.encode_account_id(KEY)
    pos = 20
    replacement = "B" if address[pos] != "B" else "C"
    tampered = address[:pos] + replacement + address[pos + 1:]
    with pytest.raises(AddressDecodeError):
        strkey.decode_account_id(tampered)


def test_version_byte_enforced():
    muxed = strkey.encode_muxed_account(KEY, 7)
    assert muxed.startswith("M")
    with pytest.raises(AddressDecodeError):
        strkey.decode_account_id(muxed)
    assert strkey.decode_muxed_account(muxed) == (KEY, 7)
    assert strkey.decode_muxed_account(strkey.encode_account_id(KEY)) == (KEY, None)


def test_other_key_kinds_have_their_prefixes():
    assert strkey.encode(strkey.VERSION_PRE_AUTH_TX, KEY).startswith("T")
    assert strkey.encode(strkey.VERSION_HASH_X, KEY).startswith("X")
    assert strkey.encode_signed_payload(KEY, b"\x01\x02\x03").startswith("P")


def test_garbage_is_rejected():
    for value in ("", "not-base32!", "GA"):
        with pytest.raises(AddressDecodeError):
            strkey.decode_account_id(value)
