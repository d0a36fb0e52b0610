"""Tests for the tag API routes."""

import pytest
from fastapi.testclient import TestClient

from tonuino.api.tags import get_card_reader
from tonuino.main import app
from tonuino.rfid.errors import ReaderError, TagLostError
from tonuino.rfid.simulated import SimulatedMifareClassic, SimulatedReader


class MissingReader:
    def detect_tag(self):
        raise ReaderError("No PC/SC readers found")


class EmptyReader:
    def detect_tag(self):
        raise TagLostError("No card on reader")


@pytest.fixture
def reader():
    return SimulatedReader(SimulatedMifareClassic())


@pytest.fixture
def client(reader):
    app.dependency_overrides[get_card_reader] = lambda: reader
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestCodecRoutes:
    def test_decode(self, client):
        resp = client.post("/api/tags/decode", json={"hex_data": "13 37 B3 47 01 05 02"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["recognized"] is True
        assert data["folder"] == 5
        assert data["mode_name"] == "ALBUM"
        assert data["special"] == 0

    def test_decode_bad_hex(self, client):
        resp = client.post("/api/tags/decode", json={"hex_data": "XYZ"})
        assert resp.status_code == 400

    def test_default(self, client):
        resp = client.get("/api/tags/default")
        assert resp.status_code == 200
        assert resp.json()["block_hex"] == "1337B347010101000000000000000000"

    def test_encode(self, client):
        resp = client.post("/api/tags/encode", json={"folder": 3, "mode": 7, "special": 2, "special2": 8})
        assert resp.status_code == 200
        assert resp.json()["block_hex"] == "1337B347010307020800000000000000"

    def test_encode_out_of_range(self, client):
        resp = client.post("/api/tags/encode", json={"folder": 300})
        assert resp.status_code == 422


class TestCardRoutes:
    def test_write_then_read(self, client, reader):
        resp = client.post("/api/tags/write", json={"folder": 12, "mode": 2})
        assert resp.json() == {"result": "success", "uid": "04:A2:1B:7F"}
        assert reader.card.block(4)[:7] == bytes.fromhex("1337B347010C02")

        resp = client.post("/api/tags/read")
        data = resp.json()
        assert data["result"] == "success"
        assert data["tag"]["folder"] == 12
        assert data["tag"]["recognized"] is True

    def test_read_authentication_failure(self, client):
        card = SimulatedMifareClassic(key_a=bytes(6), key_b=bytes(6))
        app.dependency_overrides[get_card_reader] = lambda: SimulatedReader(card)
        resp = client.post("/api/tags/read")
        assert resp.json()["result"] == "authentication_failure"
        assert resp.json()["tag"] is None

    def test_no_card(self, client):
        app.dependency_overrides[get_card_reader] = lambda: EmptyReader()
        assert client.post("/api/tags/read").json()["result"] == "tag_unavailable"
        assert client.post("/api/tags/write", json={}).json()["result"] == "tag_unavailable"

    def test_no_reader(self, client):
        app.dependency_overrides[get_card_reader] = lambda: MissingReader()
        assert client.post("/api/tags/read").status_code == 503


class TestHealth:
    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}
