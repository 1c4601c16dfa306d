"""LE legacy pairing security functions: e, ah, s1 and c1.

The plain functions take their arguments in the byte order used by the
specification (most significant byte first).  The ``*_rev`` variants take
and return values in the little-endian order they have on the air.
"""

from __future__ import annotations

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

__all__ = ["e", "ah", "s1", "s1_rev", "c1", "c1_rev"]


def _require(name: str, value: bytes, size: int) -> bytes:
    data = bytes(value)
    if len(data) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(data)}")
    return data


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


def e(key: bytes, plaintext: bytes) -> bytes:
    """Security function e: AES-128 encryption of a single block."""
    key = _require("key", key, 16)
    plaintext = _require("plaintext", plaintext, 16)
    encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
    return encryptor.update(plaintext) + encryptor.finalize()


def ah(k: bytes, r: bytes) -> bytes:
    """Random address hash function ah over a 24-bit value."""
    r = _require("r", r, 3)
    return e(k, r + bytes(13))


def s1(k: bytes, r1: bytes, r2: bytes) -> bytes:
    """Key generation function s1 for LE legacy pairing."""
    r1 = _require("r1", r1, 16)
    r2 = _require("r2", r2, 16)
    return e(k, r1[8:] + r2[8:])


def s1_rev(k: bytes, r1: bytes, r2: bytes) -> bytes:
    """s1 with arguments and result in little-endian (on-air) order."""
    return s1(bytes(k)[::-1], bytes(r1)[::-1], bytes(r2)[::-1])[::-1]


def c1(
    k: bytes,
    r: bytes,
    pres: bytes,
    preq: bytes,
    iat: int,
    ia: bytes,
    rat: int,
    ra: bytes,
) -> bytes:
    """Confirm value generation function c1 for LE legacy pairing."""
    r = _require("r", r, 16)
    pres = _require("pres", pres, 7)
    preq = _require("preq", preq, 7)
    ia = _require("ia", ia, 6)
    ra = _require("ra", ra, 6)
    p1 = pres + preq + bytes([rat & 0x01, iat & 0x01])
    p2 = bytes(4) + ia + ra
    return e(k, _xor(e(k, _xor(r, p1)), p2))


def c1_rev(
    k: bytes,
    r: bytes,
    pres: bytes,
    preq: bytes,
    iat: int,
    ia: bytes,
    rat: int,
    ra: bytes,
) -> bytes:
    """c1 with byte-string arguments and result in little-endian order."""
    result = c1(
        bytes(k)[::-1],
        bytes(r)[::-1],
        bytes(pres)[::-1],
        bytes(preq)[::-1],
        iat,
        bytes(ia)[::-1],
        rat,
        bytes(ra)[::-1],
    )
    return result[::-1]