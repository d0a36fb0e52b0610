"""
Authenticated read/write of the Tonuino block on a MIFARE Classic card.

Both operations run the same sequence against sector 1:

    connect -> authenticate -> read/write first block of sector -> close

Reads authenticate with Key A and writes with Key B, matching the access
conditions Tonuino cards are provisioned with. Every fault is mapped onto
``TagResult``; nothing is retried and no exception escapes.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from tonuino import config
from .card import MifareClassicCard, Tag
from .errors import ReaderError, TagFormatError, TagLostError
from .mifare import BLOCK_SIZE, KEY_LENGTH, KeySlot
from .tag_data import TagData, decode, is_recognized_cookie, to_fixed_length_buffer

logger = logging.getLogger(__name__)


class TagResult(str, Enum):
    SUCCESS = "success"
    UNSUPPORTED_FORMAT = "unsupported_format"
    AUTHENTICATION_FAILURE = "authentication_failure"
    TAG_UNAVAILABLE = "tag_unavailable"
    UNKNOWN_ERROR = "unknown_error"


@dataclass
class ReadOutcome:
    """Result of a read. ``raw`` is empty unless the read succeeded."""

    result: TagResult
    raw: bytes = b""

    @property
    def ok(self) -> bool:
        return self.result is TagResult.SUCCESS

    @property
    def tag_data(self) -> TagData:
        return decode(self.raw)


def result_for_exception(exc: BaseException) -> TagResult:
    """Map a backend fault onto the closed result set."""
    if isinstance(exc, (TagLostError, ReaderError, ConnectionError)):
        return TagResult.TAG_UNAVAILABLE
    if isinstance(exc, TagFormatError):
        return TagResult.UNSUPPORTED_FORMAT
    return TagResult.UNKNOWN_ERROR


@contextmanager
def card_session(card: MifareClassicCard) -> Iterator[MifareClassicCard]:
    """Connect to the card and close it on every exit path."""
    try:
        card.connect()
        yield card
    finally:
        card.close()


class TagProtocol:
    """
    Reads and writes the Tonuino record of one card sector.

    Args:
        key: 6-byte sector key, used for both slots. Defaults to
            ``config.AUTH_KEY``.
        sector: Sector holding the record. Defaults to ``config.TONUINO_SECTOR``.
        block_size: Size of the block the record is packed into on write.
    """

    def __init__(self, key: Optional[bytes] = None, sector: Optional[int] = None,
                 block_size: int = BLOCK_SIZE):
        key = config.AUTH_KEY if key is None else bytes(key)
        if len(key) != KEY_LENGTH:
            raise ValueError(f"Key must be {KEY_LENGTH} bytes, got {len(key)}")
        self.key = key
        self.sector = config.TONUINO_SECTOR if sector is None else sector
        self.block_size = block_size

    def read(self, tag: Tag) -> ReadOutcome:
        """Read the raw record block from the tag."""
        logger.info(f"Tag {tag.id_string} techList: {', '.join(sorted(tag.tech_list))}")
        if not tag.supports_mifare_classic:
            logger.error(f"Tag {tag.id_string} is not a MifareClassic tag and not supported")
            return ReadOutcome(TagResult.UNSUPPORTED_FORMAT)

        try:
            with card_session(tag.card) as card:
                return self._read_block(card)
        except Exception as e:
            result = result_for_exception(e)
            logger.error(f"Reading tag {tag.id_string} failed ({result.value}): {e!r}")
            return ReadOutcome(result)

    def write(self, tag: Tag, tag_data: TagData) -> TagResult:
        """Write the record to the tag, padded or truncated to one block."""
        logger.info(
            f"Supported technologies on tag {tag.id_string}: "
            f"{', '.join(sorted(tag.tech_list))}"
        )
        if not tag.supports_mifare_classic:
            return TagResult.UNSUPPORTED_FORMAT

        try:
            with card_session(tag.card) as card:
                return self._write_block(card, tag, tag_data)
        except Exception as e:
            result = result_for_exception(e)
            logger.error(f"Writing tag {tag.id_string} failed ({result.value}): {e!r}")
            return result

    def _read_block(self, card: MifareClassicCard) -> ReadOutcome:
        if not card.authenticate_sector(self.sector, self.key, KeySlot.A):
            logger.error(f"Authentication of sector {self.sector} failed!")
            return ReadOutcome(TagResult.AUTHENTICATION_FAILURE)

        block_index = card.sector_to_block(self.sector)
        block = bytes(card.read_block(block_index))
        logger.debug(f"Bytes in sector: {block.hex(' ').upper()}")

        if is_recognized_cookie(decode(block)):
            logger.info("This is a Tonuino MifareClassic tag")
        return ReadOutcome(TagResult.SUCCESS, block)

    def _write_block(self, card: MifareClassicCard, tag: Tag, tag_data: TagData) -> TagResult:
        if not card.authenticate_sector(self.sector, self.key, KeySlot.B):
            logger.error(f"Authentication of sector {self.sector} failed!")
            return TagResult.AUTHENTICATION_FAILURE

        block_index = card.sector_to_block(self.sector)
        card.write_block(block_index, to_fixed_length_buffer(tag_data, self.block_size))
        logger.info(f"Wrote {tag_data} to tag {tag.id_string}")
        return TagResult.SUCCESS


def read_from_tag(tag: Tag) -> ReadOutcome:
    """Read the Tonuino block using the configured key and sector."""
    return TagProtocol().read(tag)


def write_tonuino(tag: Tag, tag_data: TagData) -> TagResult:
    """Write a Tonuino record using the configured key and sector."""
    return TagProtocol().write(tag, tag_data)
