"""
In-memory MIFARE Classic card.

Behaves like a freshly formatted card: all data blocks zero, every sector
trailer carrying the configured keys. Authentication state is per sector
and is dropped on close, like on a real card.
"""

import logging
from typing import Optional

from .card import MIFARE_CLASSIC, MifareClassicCard, Tag
from .errors import TagLostError
from .mifare import (
    BYTES_PER_BLOCK, DEFAULT_KEY_A, DEFAULT_KEY_B, KeySlot, SIZE_1K,
    block_count, block_to_sector, build_sector_trailer, is_sector_trailer,
    parse_sector_trailer, sector_count, sector_trailer_block,
)

logger = logging.getLogger(__name__)


class SimulatedMifareClassic(MifareClassicCard):
    """MIFARE Classic card backed by a bytearray."""

    def __init__(self, size: int = SIZE_1K, key_a: bytes = DEFAULT_KEY_A,
                 key_b: bytes = DEFAULT_KEY_B):
        super().__init__(size)
        self.memory = bytearray(size)
        trailer = build_sector_trailer(key_a, key_b)
        for sector in range(sector_count(size)):
            self._store(sector_trailer_block(sector, size), trailer)

        self._connected = False
        self._authenticated: Optional[int] = None
        self._present = True
        self.connect_calls = 0
        self.close_calls = 0
        self.auth_attempts = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    def remove(self) -> None:
        """Take the card out of the field. Every later call raises TagLostError."""
        self._present = False

    def connect(self) -> None:
        self.connect_calls += 1
        self._check_present()
        self._connected = True

    def close(self) -> None:
        self.close_calls += 1
        self._connected = False
        self._authenticated = None

    def authenticate_sector(self, sector: int, key: bytes, slot: KeySlot) -> bool:
        self._check_session()
        self.auth_attempts.append((sector, bytes(key), slot))
        trailer = parse_sector_trailer(self.block(sector_trailer_block(sector, self.size)))
        expected = trailer["key_a"] if slot is KeySlot.A else trailer["key_b"]
        if bytes(key) != expected:
            self._authenticated = None
            return False
        self._authenticated = sector
        return True

    def read_block(self, block: int) -> bytes:
        self._check_access(block)
        return self.block(block)

    def write_block(self, block: int, data: bytes) -> None:
        self._check_access(block)
        if len(data) != BYTES_PER_BLOCK:
            raise ValueError(f"Block data must be {BYTES_PER_BLOCK} bytes, got {len(data)}")
        self._store(block, data)
        logger.debug(f"Simulated card block {block} <- {bytes(data).hex().upper()}")

    def block(self, block: int) -> bytes:
        """Return a block directly, bypassing authentication."""
        offset = block * BYTES_PER_BLOCK
        return bytes(self.memory[offset:offset + BYTES_PER_BLOCK])

    def _store(self, block: int, data: bytes) -> None:
        offset = block * BYTES_PER_BLOCK
        self.memory[offset:offset + BYTES_PER_BLOCK] = data

    def _check_present(self) -> None:
        if not self._present:
            raise TagLostError("Tag was lost")

    def _check_session(self) -> None:
        self._check_present()
        if not self._connected:
            raise TagLostError("Not connected to tag")

    def _check_access(self, block: int) -> None:
        self._check_session()
        if not 0 <= block < block_count(self.size):
            raise IndexError(f"Block {block} out of range")
        if self._authenticated != block_to_sector(block):
            raise PermissionError(f"Sector of block {block} is not authenticated")
        if is_sector_trailer(block):
            raise PermissionError(f"Block {block} is a sector trailer")


def simulated_tag(card: SimulatedMifareClassic, uid: bytes = bytes.fromhex("04A21B7F")) -> Tag:
    """Wrap a simulated card into a detected Tag."""
    return Tag(uid=uid, tech_list=frozenset({MIFARE_CLASSIC, "NfcA"}), card=card)


class SimulatedReader:
    """Reader stand-in that always reports the same simulated card."""

    def __init__(self, card: Optional[SimulatedMifareClassic] = None,
                 uid: bytes = bytes.fromhex("04A21B7F")):
        self.card = card if card is not None else SimulatedMifareClassic()
        self.uid = uid

    def detect_tag(self) -> Tag:
        return simulated_tag(self.card, self.uid)
