"""
Deterministic encoding helpers for pool identifiers and snapshots.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


CANONICAL_ENCODING_VERSION = 1


def _check_encodable(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, str):
        if any(0xD800 <= ord(ch) <= 0xDFFF for ch in value):
            raise TypeError("surrogate code points are not allowed in canonical encoding")
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
            _check_encodable(k)
            _check_encodable(v)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _check_encodable(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    UTF-8 JSON with sorted keys, no whitespace and no floats.
    """
    _check_encodable(value)
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = CANONICAL_ENCODING_VERSION) -> bytes:
    """
    ASCII, NUL-terminated prefix so hashed payloads of different kinds never collide.
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label:
        raise ValueError("label must not contain NUL")
    try:
        label_bytes = label.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError("label must be ASCII") from exc
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return b"pairswap:" + label_bytes + b":v" + str(version).encode("ascii") + b"\x00"
