"""Stable cache keys for placeholder requests.

Two requests that would render the same image must map to the same key, in
this process and in every later one, and two requests that differ in which
options were supplied must not collide.  Python's built-in ``hash()`` is
salted per process and ``None`` carries no structure, so the key is computed
from an explicit byte serialization instead:

    version | len(raw) | raw | tag bg [r g b a] | tag br [r g b a] | tag br_s [n]

where each ``tag`` is ``0x00`` when the option is absent and ``0x01`` when it
is present.  The bytes are hashed with BLAKE2b truncated to 8 bytes and read as
an unsigned big-endian 64-bit integer.
"""

from __future__ import annotations

import hashlib
import struct

from platzhalter.core.color import Color
from platzhalter.core.request_spec import RequestSpec

FORMAT_VERSION = 1

_ABSENT = b"\x00"
_PRESENT = b"\x01"


def _encode_color(color: Color | None) -> bytes:
    if color is None:
        return _ABSENT
    return _PRESENT + bytes((color.r, color.g, color.b, color.a))


def _encode_border_size(size: int | None) -> bytes:
    if size is None:
        return _ABSENT
    return _PRESENT + struct.pack(">B", size)


def canonical_bytes(spec: RequestSpec) -> bytes:
    """Serialize the fields of ``spec`` that affect the rendered image."""
    raw = spec.raw_dimensions.encode("utf-8")
    return b"".join(
        (
            struct.pack(">BI", FORMAT_VERSION, len(raw)),
            raw,
            _encode_color(spec.config.bg),
            _encode_color(spec.config.br),
            _encode_border_size(spec.config.br_s),
        )
    )


def fingerprint(spec: RequestSpec) -> int:
    """Return the 64-bit fingerprint of ``spec``."""
    digest = hashlib.blake2b(canonical_bytes(spec), digest_size=8).digest()
    return int.from_bytes(digest, "big")


def cache_key(value: int) -> str:
    """Render a fingerprint as the decimal string used by the store."""
    return str(value)
