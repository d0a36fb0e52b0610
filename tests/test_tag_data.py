"""Tests for the Tonuino record format."""

import logging
import pytest
from tonuino.rfid.tag_data import (
    TagData, PlaybackMode, TONUINO_COOKIE, decode, create_default,
    is_recognized_cookie, to_fixed_length_buffer,
)

FIELDS = ["version", "folder", "mode", "special", "special2"]


def make_full_record() -> bytes:
    """Cookie plus version 1, folder 42, mode 7, special 3, special2 9."""
    return TONUINO_COOKIE + bytes([1, 42, 7, 3, 9])


class TestFieldAccess:
    def test_fields_from_full_record(self):
        td = decode(make_full_record())
        assert td.cookie == TONUINO_COOKIE
        assert td.version == 1
        assert td.folder == 42
        assert td.mode == 7
        assert td.special == 3
        assert td.special2 == 9

    def test_empty_record_reads_zero(self):
        td = decode(b"")
        assert td.cookie == b""
        for name in FIELDS:
            assert getattr(td, name) == 0

    def test_default_constructed_is_empty(self):
        td = TagData()
        assert td.raw == b""
        assert td.folder == 0

    def test_every_prefix_length_defaults_missing_fields(self):
        raw = make_full_record()
        for length in range(len(raw) + 1):
            td = decode(raw[:length])
            for offset, name in enumerate(FIELDS, start=4):
                expected = raw[offset] if length > offset else 0
                assert getattr(td, name) == expected, f"{name} at length {length}"

    def test_get_at_with_default(self):
        td = decode(b"\x01\x02")
        assert td.get_at_with_default(1) == 2
        assert td.get_at_with_default(5) == 0
        assert td.get_at_with_default(5, default=0xAA) == 0xAA
        assert td.get_at_with_default(-1) == 0

    def test_decode_accepts_int_lists(self):
        td = decode([0x13, 0x37, 0xB3, 0x47, 2])
        assert isinstance(td.raw, bytes)
        assert td.version == 2

    def test_replacing_raw_normalizes_to_bytes(self):
        td = TagData()
        td.raw = bytearray(make_full_record())
        assert isinstance(td.raw, bytes)
        assert td.folder == 42


class TestCookie:
    def test_recognized(self):
        assert is_recognized_cookie(decode(make_full_record()))
        assert decode(make_full_record()).is_recognized

    def test_wrong_cookie_is_flagged_not_rejected(self):
        td = decode(bytes.fromhex("DEADBEEF010203"))
        assert not is_recognized_cookie(td)
        assert td.folder == 2

    def test_short_cookie_not_recognized(self):
        assert not is_recognized_cookie(decode(TONUINO_COOKIE[:3]))
        assert not is_recognized_cookie(decode(b""))


class TestCreateDefault:
    def test_default_layout(self):
        td = create_default()
        assert td.raw == bytes.fromhex("1337B347010101")
        assert len(td.raw) == 7
        assert td.version == 1
        assert td.folder == 1
        assert td.mode == PlaybackMode.AUDIO_DRAMA
        assert td.special == 0
        assert td.special2 == 0

    def test_default_fixed_buffer(self):
        block = to_fixed_length_buffer(create_default(), 16)
        assert len(block) == 16
        assert block[:7] == bytes.fromhex("1337B347010101")
        assert block[7:] == bytes(9)


class TestFixedLengthBuffer:
    def test_pads_with_zeros(self):
        assert to_fixed_length_buffer(decode(b"\x01\x02"), 4) == b"\x01\x02\x00\x00"

    def test_truncates_longer_records(self):
        raw = bytes(range(1, 21))
        td = decode(raw)
        assert to_fixed_length_buffer(td, 16) == raw[:16]
        assert td.to_fixed_length_buffer(3) == raw[:3]

    def test_truncation_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tonuino.rfid.tag_data"):
            to_fixed_length_buffer(decode(bytes(20)), 16)
        assert "4 bytes dropped" in caplog.text

    def test_exact_size_not_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tonuino.rfid.tag_data"):
            to_fixed_length_buffer(decode(bytes(16)), 16)
        assert caplog.text == ""

    def test_zero_size(self):
        assert to_fixed_length_buffer(create_default(), 0) == b""

    def test_negative_size_raises(self):
        with pytest.raises(ValueError):
            to_fixed_length_buffer(create_default(), -1)


class TestBuild:
    def test_build_full_record(self):
        td = TagData.build(folder=42, mode=7, special=3, special2=9)
        assert td.raw == make_full_record()

    def test_build_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            TagData.build(folder=256, mode=1)
        with pytest.raises(ValueError):
            TagData.build(folder=1, mode=-1)


class TestPresentation:
    def test_str(self):
        assert str(create_default()) == "TagData<13 37 B3 47 01 01 01>"

    def test_mode_name(self):
        assert TagData.build(folder=1, mode=5).mode_name == "AUDIO_BOOK"
        assert TagData.build(folder=1, mode=42).mode_name == "UNKNOWN"
        assert decode(b"").mode_name == "UNKNOWN"

    def test_to_dict(self):
        d = decode(make_full_record()).to_dict()
        assert d["cookie"] == "1337B347"
        assert d["recognized"] is True
        assert d["folder"] == 42
        assert d["mode"] == 7
        assert d["mode_name"] == "AUDIO_DRAMA_FROM_TO"
        assert d["special"] == 3
        assert d["special2"] == 9
        assert d["raw"] == "1337B347012A070309"
