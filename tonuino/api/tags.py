"""API routes for Tonuino tag operations: decode, encode, read, write."""

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from tonuino import config
from tonuino.rfid.errors import ReaderError
from tonuino.rfid.protocol import TagProtocol, TagResult, result_for_exception
from tonuino.rfid.tag_builder import build_base64, build_hex
from tonuino.rfid.tag_data import TagData, create_default
from tonuino.rfid.tag_parser import parse_from_hex

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tags", tags=["tags"])


# ──────────────────────────────────────────────
# Request/Response models
# ──────────────────────────────────────────────

class DecodeHexRequest(BaseModel):
    hex_data: str


class EncodeRequest(BaseModel):
    folder: int = Field(1, ge=0, le=255)
    mode: int = Field(1, ge=0, le=255)
    special: int = Field(0, ge=0, le=255)
    special2: int = Field(0, ge=0, le=255)
    version: int = Field(1, ge=0, le=255)

    def to_tag_data(self) -> TagData:
        return TagData.build(
            folder=self.folder,
            mode=self.mode,
            special=self.special,
            special2=self.special2,
            version=self.version,
        )


# ──────────────────────────────────────────────
# Reader dependency
# ──────────────────────────────────────────────

@lru_cache(maxsize=None)
def get_card_reader():
    """Return the reader configured by TONUINO_READER."""
    if config.READER_NAME == config.SIMULATED_READER:
        from tonuino.rfid.simulated import SimulatedReader
        return SimulatedReader()
    from tonuino.rfid.pcsc import PcscReader
    return PcscReader()


def _detect(reader):
    try:
        return reader.detect_tag(), None
    except ReaderError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Card detection failed: {e!r}")
        return None, result_for_exception(e)


def _encoded(tag_data: TagData) -> dict:
    return {
        "block_hex": build_hex(tag_data),
        "block_base64": build_base64(tag_data),
        "tag": tag_data.to_dict(),
    }


# ──────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────

@router.post("/decode")
async def decode_hex(req: DecodeHexRequest):
    """Decode a hex-encoded block into Tonuino fields."""
    try:
        return parse_from_hex(req.hex_data).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/encode")
async def encode_tag(req: EncodeRequest):
    """Encode Tonuino fields into a 16-byte block."""
    try:
        return _encoded(req.to_tag_data())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/default")
async def default_tag():
    """Return the default record a new card is written with."""
    return _encoded(create_default())


@router.post("/read")
def read_tag(reader=Depends(get_card_reader)):
    """Read the Tonuino block from the card on the reader."""
    tag, failure = _detect(reader)
    if failure is not None:
        return {"result": failure.value, "tag": None}

    outcome = TagProtocol().read(tag)
    return {
        "result": outcome.result.value,
        "uid": tag.id_string,
        "tag": outcome.tag_data.to_dict() if outcome.ok else None,
    }


@router.post("/write")
def write_tag(req: EncodeRequest, reader=Depends(get_card_reader)):
    """Write a Tonuino record to the card on the reader."""
    tag, failure = _detect(reader)
    if failure is not None:
        return {"result": failure.value}

    result = TagProtocol().write(tag, req.to_tag_data())
    if result is not TagResult.SUCCESS:
        logger.warning(f"Write to {tag.id_string} returned {result.value}")
    return {"result": result.value, "uid": tag.id_string}
