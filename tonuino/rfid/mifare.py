"""
MIFARE Classic constants and structure definitions.

MIFARE Classic comes in four densities:
- Mini: 320 bytes, 5 sectors of 4 blocks
- 1K: 1024 bytes, 16 sectors of 4 blocks
- 2K: 2048 bytes, 32 sectors of 4 blocks
- 4K: 4096 bytes, 32 sectors of 4 blocks followed by 8 sectors of 16 blocks

Every block is 16 bytes. The last block of each sector is the sector trailer
(Key A + access bits + Key B).
"""

from enum import Enum

# Card sizes in bytes
SIZE_MINI = 320
SIZE_1K = 1024
SIZE_2K = 2048
SIZE_4K = 4096

BYTES_PER_BLOCK = 16
BLOCK_SIZE = BYTES_PER_BLOCK

# 4K cards switch to 16-block sectors after the first 32 sectors
SMALL_SECTOR_BLOCKS = 4
LARGE_SECTOR_BLOCKS = 16
SMALL_SECTOR_COUNT = 32

# Sector trailer layout within a 16-byte block
KEY_A_OFFSET = 0
KEY_A_LENGTH = 6
ACCESS_BITS_OFFSET = 6
ACCESS_BITS_LENGTH = 4
KEY_B_OFFSET = 10
KEY_B_LENGTH = 6
KEY_LENGTH = 6

# Factory default keys
DEFAULT_KEY = bytes([0xFF] * 6)
DEFAULT_KEY_A = DEFAULT_KEY
DEFAULT_KEY_B = DEFAULT_KEY

# Transport configuration access bits (FF 07 80) plus the unused GPB byte
DEFAULT_ACCESS_BITS = bytes([0xFF, 0x07, 0x80, 0x69])

_SECTOR_COUNTS = {
    SIZE_MINI: 5,
    SIZE_1K: 16,
    SIZE_2K: 32,
    SIZE_4K: 40,
}


class KeySlot(str, Enum):
    """The two authentication keys stored in every sector trailer."""
    A = "A"
    B = "B"


def sector_count(size: int) -> int:
    """Return the number of sectors on a card of the given size."""
    try:
        return _SECTOR_COUNTS[size]
    except KeyError:
        raise ValueError(f"Unknown MIFARE Classic size: {size}") from None


def block_count(size: int) -> int:
    """Return the total number of blocks on a card of the given size."""
    return size // BYTES_PER_BLOCK


def block_count_in_sector(sector: int) -> int:
    """Return how many blocks a sector holds (4, or 16 for 4K sectors >= 32)."""
    if sector < SMALL_SECTOR_COUNT:
        return SMALL_SECTOR_BLOCKS
    return LARGE_SECTOR_BLOCKS


def sector_to_block(sector: int, size: int = SIZE_1K) -> int:
    """Return the first block number for a given sector."""
    if not 0 <= sector < sector_count(size):
        raise ValueError(f"Sector {sector} out of range for a {size}-byte card")
    if sector < SMALL_SECTOR_COUNT:
        return sector * SMALL_SECTOR_BLOCKS
    return (SMALL_SECTOR_COUNT * SMALL_SECTOR_BLOCKS
            + (sector - SMALL_SECTOR_COUNT) * LARGE_SECTOR_BLOCKS)


def block_to_sector(block: int) -> int:
    """Return the sector number for a given block."""
    small_blocks = SMALL_SECTOR_COUNT * SMALL_SECTOR_BLOCKS
    if block < small_blocks:
        return block // SMALL_SECTOR_BLOCKS
    return SMALL_SECTOR_COUNT + (block - small_blocks) // LARGE_SECTOR_BLOCKS


def sector_trailer_block(sector: int, size: int = SIZE_1K) -> int:
    """Return the sector trailer block number for a given sector."""
    return sector_to_block(sector, size) + block_count_in_sector(sector) - 1


def is_sector_trailer(block: int) -> bool:
    """Check if a block number is a sector trailer."""
    sector = block_to_sector(block)
    first = sector_to_block(sector, SIZE_4K)
    return block == first + block_count_in_sector(sector) - 1


def build_sector_trailer(key_a: bytes = DEFAULT_KEY_A,
                         key_b: bytes = DEFAULT_KEY_B,
                         access_bits: bytes = DEFAULT_ACCESS_BITS) -> bytes:
    """Build a 16-byte sector trailer block."""
    if len(key_a) != KEY_LENGTH or len(key_b) != KEY_LENGTH:
        raise ValueError(f"Keys must be {KEY_LENGTH} bytes")
    if len(access_bits) != ACCESS_BITS_LENGTH:
        raise ValueError(f"Access bits must be {ACCESS_BITS_LENGTH} bytes")
    return bytes(key_a) + bytes(access_bits) + bytes(key_b)


def parse_sector_trailer(data: bytes) -> dict:
    """
    Parse a 16-byte sector trailer block.

    Returns dict with key_a, access_bits, and key_b as bytes.
    """
    if len(data) != BYTES_PER_BLOCK:
        raise ValueError(f"Sector trailer must be {BYTES_PER_BLOCK} bytes, got {len(data)}")
    return {
        "key_a": data[KEY_A_OFFSET:KEY_A_OFFSET + KEY_A_LENGTH],
        "access_bits": data[ACCESS_BITS_OFFSET:ACCESS_BITS_OFFSET + ACCESS_BITS_LENGTH],
        "key_b": data[KEY_B_OFFSET:KEY_B_OFFSET + KEY_B_LENGTH],
    }
