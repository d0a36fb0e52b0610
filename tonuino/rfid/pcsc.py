"""
PC/SC backend (pyscard) for ACR122U-style contactless readers.

Uses the PC/SC pseudo-APDUs the reader firmware understands:

    FF 82 00 <slot> 06 <key>                 load key into reader slot
    FF 86 00 00 05 01 00 <blk> <type> <slot> general authenticate
    FF B0 00 <blk> 10                        read binary (16 bytes)
    FF D6 00 <blk> 10 <data>                 update binary (16 bytes)
    FF CA 00 00 00                           get UID
"""

import logging
from typing import List, Optional

from smartcard.Exceptions import CardConnectionException, NoCardException
from smartcard.System import readers

from tonuino import config
from .card import MIFARE_CLASSIC, MifareClassicCard, Tag
from .errors import CardError, ReaderError, TagLostError
from .mifare import BYTES_PER_BLOCK, KEY_LENGTH, KeySlot, SIZE_1K, SIZE_4K, SIZE_MINI

logger = logging.getLogger(__name__)

KEY_TYPE_A = 0x60
KEY_TYPE_B = 0x61
KEY_SLOT = 0

SW_OK = (0x90, 0x00)

# PC/SC part 3 ATR: 3B 8F 80 01 80 4F 0C <RID A0 00 00 03 06> <SS> <C0 C1> ...
PCSC_RID = bytes.fromhex("A000000306")
ATR_RID_OFFSET = 7
ATR_CARD_NAME_OFFSET = 13

CARD_NAMES = {
    0x0001: SIZE_1K,
    0x0002: SIZE_4K,
    0x0026: SIZE_MINI,
}


# ---------- APDUs ----------

def apdu_load_key(key: bytes, slot: int = KEY_SLOT) -> List[int]:
    if len(key) != KEY_LENGTH:
        raise ValueError(f"Key must be {KEY_LENGTH} bytes")
    return [0xFF, 0x82, 0x00, slot & 0xFF, KEY_LENGTH] + list(key)


def apdu_authenticate(block: int, key_type: int, slot: int = KEY_SLOT) -> List[int]:
    return [0xFF, 0x86, 0x00, 0x00, 0x05, 0x01, 0x00, block & 0xFF, key_type, slot & 0xFF]


def apdu_read_block(block: int) -> List[int]:
    return [0xFF, 0xB0, 0x00, block & 0xFF, BYTES_PER_BLOCK]


def apdu_update_block(block: int, data: bytes) -> List[int]:
    if len(data) != BYTES_PER_BLOCK:
        raise ValueError(f"Data must be exactly {BYTES_PER_BLOCK} bytes")
    return [0xFF, 0xD6, 0x00, block & 0xFF, BYTES_PER_BLOCK] + list(data)


def apdu_get_uid() -> List[int]:
    return [0xFF, 0xCA, 0x00, 0x00, 0x00]


def card_size_from_atr(atr: bytes) -> Optional[int]:
    """Return the MIFARE Classic size announced in a PC/SC ATR, or None."""
    rid = atr[ATR_RID_OFFSET:ATR_RID_OFFSET + len(PCSC_RID)]
    name = atr[ATR_CARD_NAME_OFFSET:ATR_CARD_NAME_OFFSET + 2]
    if rid != PCSC_RID or len(name) != 2:
        return None
    return CARD_NAMES.get(int.from_bytes(name, "big"))


def _transmit(connection, apdu: List[int]):
    try:
        data, sw1, sw2 = connection.transmit(apdu)
    except (NoCardException, CardConnectionException) as e:
        raise TagLostError(str(e)) from e
    return bytes(data), sw1, sw2


class PcscMifareClassic(MifareClassicCard):
    """MIFARE Classic card reached through a pyscard connection."""

    def __init__(self, connection, size: int = SIZE_1K):
        super().__init__(size)
        self._connection = connection
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        try:
            self._connection.connect()
        except (NoCardException, CardConnectionException) as e:
            raise TagLostError(str(e)) from e
        self._connected = True

    def close(self) -> None:
        if not self._connected:
            return
        self._connected = False
        try:
            self._connection.disconnect()
        except CardConnectionException as e:
            logger.warning(f"Disconnect failed: {e}")

    def authenticate_sector(self, sector: int, key: bytes, slot: KeySlot) -> bool:
        _, sw1, sw2 = _transmit(self._connection, apdu_load_key(key))
        if (sw1, sw2) != SW_OK:
            raise CardError(f"Loading key failed, SW={sw1:02X}{sw2:02X}")
        key_type = KEY_TYPE_A if slot is KeySlot.A else KEY_TYPE_B
        block = self.sector_to_block(sector)
        _, sw1, sw2 = _transmit(self._connection, apdu_authenticate(block, key_type))
        return (sw1, sw2) == SW_OK

    def read_block(self, block: int) -> bytes:
        data, sw1, sw2 = _transmit(self._connection, apdu_read_block(block))
        if (sw1, sw2) != SW_OK or len(data) != BYTES_PER_BLOCK:
            raise CardError(f"Read of block {block} failed, SW={sw1:02X}{sw2:02X}")
        return data

    def write_block(self, block: int, data: bytes) -> None:
        _, sw1, sw2 = _transmit(self._connection, apdu_update_block(block, data))
        if (sw1, sw2) != SW_OK:
            raise CardError(f"Write of block {block} failed, SW={sw1:02X}{sw2:02X}")


class PcscReader:
    """Finds a PC/SC reader and reports the card currently on it."""

    def __init__(self, reader_name: Optional[str] = None):
        self.reader_name = config.READER_NAME if reader_name is None else reader_name

    def pick_reader(self):
        available = readers()
        if not available:
            raise ReaderError("No PC/SC readers found")
        for reader in available:
            if self.reader_name and self.reader_name in str(reader):
                return reader
        return available[0]

    def detect_tag(self) -> Tag:
        """Probe the card on the reader. Raises TagLostError when no card is present."""
        reader = self.pick_reader()
        connection = reader.createConnection()
        try:
            connection.connect()
        except (NoCardException, CardConnectionException) as e:
            raise TagLostError(f"No card on {reader}: {e}") from e
        try:
            atr = bytes(connection.getATR())
            uid, sw1, sw2 = _transmit(connection, apdu_get_uid())
            if (sw1, sw2) != SW_OK:
                uid = b""
        finally:
            connection.disconnect()

        size = card_size_from_atr(atr)
        logger.info(f"Card on {reader}: ATR={atr.hex().upper()} size={size}")
        if size is None:
            return Tag(uid=uid, tech_list=frozenset())
        return Tag(
            uid=uid,
            tech_list=frozenset({MIFARE_CLASSIC}),
            card=PcscMifareClassic(connection, size),
        )
