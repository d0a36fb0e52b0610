"""
Tonuino tag record format: field layout, defaults and fixed-block packing.

The record lives in the first block of sector 1 of a MIFARE Classic card:

    offset  length  field
    0       4       cookie (13 37 B3 47)
    4       1       version
    5       1       folder
    6       1       mode
    7       1       special
    8       1       special2

Short records are valid. Every field accessor falls back to 0 when the
underlying byte is missing.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Union

logger = logging.getLogger(__name__)

TONUINO_COOKIE = bytes.fromhex("1337B347")

VERSION_INDEX = len(TONUINO_COOKIE)
FOLDER_INDEX = VERSION_INDEX + 1
MODE_INDEX = VERSION_INDEX + 2
SPECIAL_INDEX = VERSION_INDEX + 3
SPECIAL2_INDEX = VERSION_INDEX + 4

CURRENT_VERSION = 1


class PlaybackMode(IntEnum):
    """
    Playback modes understood by the Tonuino player.

    The FROM_TO modes use special/special2 as first and last track.
    """
    AUDIO_DRAMA = 1
    ALBUM = 2
    PARTY = 3
    SINGLE = 4
    AUDIO_BOOK = 5
    ADMIN = 6
    AUDIO_DRAMA_FROM_TO = 7
    ALBUM_FROM_TO = 8
    PARTY_FROM_TO = 9


@dataclass
class TagData:
    """Raw bytes of a Tonuino record with defaulting field accessors."""

    raw: bytes = b""

    def __setattr__(self, name, value):
        if name == "raw":
            value = bytes(value)
        super().__setattr__(name, value)

    def get_at_with_default(self, index: int, default: int = 0) -> int:
        """Return the byte at ``index`` or ``default`` when the record is too short."""
        if 0 <= index < len(self.raw):
            return self.raw[index]
        return default

    @property
    def cookie(self) -> bytes:
        return self.raw[:VERSION_INDEX]

    @property
    def version(self) -> int:
        return self.get_at_with_default(VERSION_INDEX)

    @property
    def folder(self) -> int:
        return self.get_at_with_default(FOLDER_INDEX)

    @property
    def mode(self) -> int:
        return self.get_at_with_default(MODE_INDEX)

    @property
    def special(self) -> int:
        return self.get_at_with_default(SPECIAL_INDEX)

    @property
    def special2(self) -> int:
        return self.get_at_with_default(SPECIAL2_INDEX)

    @property
    def is_recognized(self) -> bool:
        return is_recognized_cookie(self)

    @property
    def mode_name(self) -> str:
        try:
            return PlaybackMode(self.mode).name
        except ValueError:
            return "UNKNOWN"

    @classmethod
    def build(cls, folder: int, mode: int, special: int = 0, special2: int = 0,
              version: int = CURRENT_VERSION) -> "TagData":
        """Build a full record (cookie plus all five fields)."""
        fields = [version, folder, mode, special, special2]
        for value in fields:
            if not 0 <= value <= 0xFF:
                raise ValueError(f"Field value {value} does not fit in one byte")
        return cls(TONUINO_COOKIE + bytes(fields))

    def to_fixed_length_buffer(self, size: int) -> bytes:
        return to_fixed_length_buffer(self, size)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "cookie": self.cookie.hex().upper(),
            "recognized": self.is_recognized,
            "version": self.version,
            "folder": self.folder,
            "mode": self.mode,
            "mode_name": self.mode_name,
            "special": self.special,
            "special2": self.special2,
            "raw": self.raw.hex().upper(),
        }

    def __str__(self) -> str:
        return "TagData<{}>".format(" ".join(f"{b:02X}" for b in self.raw))


def decode(raw: Union[bytes, Iterable[int]]) -> TagData:
    """Wrap raw block bytes into a TagData. Never validates, never fails."""
    return TagData(bytes(raw))


def create_default() -> TagData:
    """Return the default record: cookie, version 1, folder 1, mode 1."""
    buffer = bytearray(len(TONUINO_COOKIE) + 3)
    buffer[:VERSION_INDEX] = TONUINO_COOKIE
    buffer[VERSION_INDEX] = CURRENT_VERSION
    buffer[FOLDER_INDEX] = 1
    buffer[MODE_INDEX] = PlaybackMode.AUDIO_DRAMA
    return TagData(buffer)


def is_recognized_cookie(tag_data: TagData) -> bool:
    """Check whether the first four bytes carry the Tonuino cookie."""
    return tag_data.raw[:len(TONUINO_COOKIE)] == TONUINO_COOKIE


def to_fixed_length_buffer(tag_data: TagData, size: int) -> bytes:
    """
    Pack the record into a zero-filled buffer of exactly ``size`` bytes.

    Be aware that this truncates records longer than ``size``. The dropped
    bytes are only reported in the log.
    """
    if size < 0:
        raise ValueError(f"Buffer size must not be negative, got {size}")
    if len(tag_data.raw) > size:
        logger.warning(
            f"Truncating {tag_data} to {size} bytes, "
            f"{len(tag_data.raw) - size} bytes dropped"
        )
    return tag_data.raw[:size].ljust(size, b"\x00")
