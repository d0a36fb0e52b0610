"""
High-level tag building: converts TagData to block payloads.

Supports multiple output formats:
- Raw block bytes (16 bytes by default)
- Hex string
- Base64 string
"""

import base64

from .mifare import BLOCK_SIZE
from .tag_data import TagData, to_fixed_length_buffer


def build_block(tag_data: TagData, size: int = BLOCK_SIZE) -> bytes:
    """Build a zero-padded block, truncating records that do not fit."""
    return to_fixed_length_buffer(tag_data, size)


def build_hex(tag_data: TagData, size: int = BLOCK_SIZE) -> str:
    """Build an upper-case hex string of one block."""
    return build_block(tag_data, size).hex().upper()


def build_base64(tag_data: TagData, size: int = BLOCK_SIZE) -> str:
    """Build a base64-encoded block (for JSON transport)."""
    return base64.b64encode(build_block(tag_data, size)).decode("ascii")
