"""
Card access contract used by the tag protocol.

A backend (PC/SC reader, simulated card, ...) exposes a detected card as a
``Tag``: its UID, the technologies it reports, and a ``MifareClassicCard``
handle when MIFARE Classic is among them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from .mifare import KeySlot, SIZE_1K, sector_to_block, sector_count

MIFARE_CLASSIC = "MifareClassic"


class MifareClassicCard(ABC):
    """Blocking access to one MIFARE Classic card."""

    def __init__(self, size: int = SIZE_1K):
        sector_count(size)  # validates the size
        self.size = size

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @abstractmethod
    def connect(self) -> None:
        """Open a session with the card."""

    @abstractmethod
    def close(self) -> None:
        """Release the session. Safe to call when not connected."""

    @abstractmethod
    def authenticate_sector(self, sector: int, key: bytes, slot: KeySlot) -> bool:
        """Authenticate a sector with the given key slot. Returns False if rejected."""

    @abstractmethod
    def read_block(self, block: int) -> bytes:
        ...

    @abstractmethod
    def write_block(self, block: int, data: bytes) -> None:
        ...

    def sector_to_block(self, sector: int) -> int:
        return sector_to_block(sector, self.size)


@dataclass
class Tag:
    """A detected card."""

    uid: bytes = b""
    tech_list: frozenset = field(default_factory=frozenset)
    card: Optional[MifareClassicCard] = None

    @property
    def id_string(self) -> str:
        return tag_id_as_string(self.uid)

    @property
    def supports_mifare_classic(self) -> bool:
        return MIFARE_CLASSIC in self.tech_list and self.card is not None


def tag_id_as_string(uid: bytes) -> str:
    """Format a UID as colon separated hex, e.g. "04:A2:1B:7F"."""
    return ":".join(f"{b:02X}" for b in uid)
