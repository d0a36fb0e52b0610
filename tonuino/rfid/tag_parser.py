"""
High-level tag parsing: converts raw block dumps to TagData.

Supports multiple input formats:
- Raw binary block
- Hex string (spaces, colons and line breaks are ignored)
- Base64 string
"""

import base64
import binascii

from .tag_data import TagData, decode


def parse_from_binary(data: bytes) -> TagData:
    """Parse from raw block bytes."""
    return decode(data)


def parse_from_hex(hex_string: str) -> TagData:
    """Parse from a hex-encoded string, e.g. "13 37 B3 47 01 01 01"."""
    clean = "".join(hex_string.split()).replace(":", "")
    return decode(bytes.fromhex(clean))


def parse_from_base64(b64_string: str) -> TagData:
    """Parse from a base64-encoded string."""
    try:
        data = base64.b64decode(b64_string, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 data: {e}") from e
    return decode(data)
