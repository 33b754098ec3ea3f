"""Tests for the FastAPI signal channel and HTTP API."""

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from whalecopy.channel.server import create_app
from whalecopy.config.schema import EngineConfig
from whalecopy.pipeline.copy_engine import CopyTradeEngine

SELL_SIGNAL = {
    "type": "copy_trade",
    "trade": {
        "conditionId": "0xcond",
        "title": "Will it rain?",
        "outcome": "Yes",
        "side": "SELL",
        "size": 10,
        "price": 0.4,
        "timestamp": 1_760_000_000,
        "transactionHash": "0xtx",
        "walletLabel": "whale-1",
    },
    "config": {"multiplier": 0.5, "maxSingleTrade": 1.0, "priceImprovementPct": 0.02},
}


@pytest.fixture
def engine() -> CopyTradeEngine:
    return CopyTradeEngine(EngineConfig())


class TestWebSocket:
    def test_snapshot_on_connect(self, engine):
        with TestClient(create_app(engine)) as client:
            with client.websocket_connect("/ws") as ws:
                assert ws.receive_json() == {
                    "type": "engine",
                    "status": "ACTIVE",
                    "message": "Copy-trade engine running",
                }

    def test_snapshot_includes_known_balance(self, engine):
        engine.breaker.observe_balance(12.5)
        with TestClient(create_app(engine)) as client:
            with client.websocket_connect("/ws") as ws:
                assert ws.receive_json()["type"] == "engine"
                balance = ws.receive_json()
                assert balance["type"] == "balance"
                assert balance["usdce"] == 12.5

    def test_event_during_snapshot_reaches_new_observer(self, engine, monkeypatch):
        original = engine.snapshot_messages

        def snapshot_then_publish():
            messages = original()
            engine.broadcaster.publish({"type": "balance", "usdce": 7.0, "timestamp": 1})
            return messages

        monkeypatch.setattr(engine, "snapshot_messages", snapshot_then_publish)
        with TestClient(create_app(engine)) as client:
            with client.websocket_connect("/ws") as ws:
                assert ws.receive_json()["type"] == "engine"
                assert ws.receive_json() == {"type": "balance", "usdce": 7.0, "timestamp": 1}

    def test_signal_lifecycle_broadcast(self, engine):
        with TestClient(create_app(engine)) as client:
            with client.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_json(SELL_SIGNAL)
                events = [ws.receive_json() for _ in range(3)]
        assert [e["status"] for e in events] == ["DETECTED", "VALIDATING", "SKIPPED"]
        assert events[2]["reason"] == "sell_trade"
        assert events[2]["trade"]["side"] == "SELL"

    def test_noise_is_ignored(self, engine):
        with TestClient(create_app(engine)) as client:
            with client.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_text("garbage")
                ws.send_json({"type": "ping"})
                ws.send_json(SELL_SIGNAL)
                assert ws.receive_json()["status"] == "DETECTED"

    def test_bad_token_closed_4001(self, engine):
        with TestClient(create_app(engine, auth_token="s3cret")) as client:
            with client.websocket_connect("/ws?token=wrong") as ws:
                with pytest.raises(WebSocketDisconnect) as exc:
                    ws.receive_json()
        assert exc.value.code == 4001

    def test_missing_token_closed_4001(self, engine):
        with TestClient(create_app(engine, auth_token="s3cret")) as client:
            with client.websocket_connect("/ws") as ws:
                with pytest.raises(WebSocketDisconnect) as exc:
                    ws.receive_json()
        assert exc.value.code == 4001

    def test_good_token_accepted(self, engine):
        with TestClient(create_app(engine, auth_token="s3cret")) as client:
            with client.websocket_connect("/ws?token=s3cret") as ws:
                assert ws.receive_json()["type"] == "engine"


class TestHttpApi:
    def test_status_open_without_token(self, engine):
        with TestClient(create_app(engine)) as client:
            resp = client.get("/api/status")
        assert resp.status_code == 200
        data = resp.json()
        assert data["engine"] == "ACTIVE"
        assert data["execution_enabled"] is False

    def test_missing_header_401(self, engine):
        with TestClient(create_app(engine, auth_token="s3cret")) as client:
            resp = client.get("/api/status")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Missing Authorization header"

    def test_wrong_token_403(self, engine):
        with TestClient(create_app(engine, auth_token="s3cret")) as client:
            resp = client.get("/api/status", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Invalid token"

    def test_activity(self, engine):
        app = create_app(engine, auth_token="s3cret")
        headers = {"Authorization": "Bearer s3cret"}
        with TestClient(app) as client:
            with client.websocket_connect("/ws?token=s3cret") as ws:
                ws.receive_json()
                ws.send_json(SELL_SIGNAL)
                for _ in range(3):
                    ws.receive_json()
            resp = client.get("/api/activity", params={"limit": 2}, headers=headers)
        assert resp.status_code == 200
        assert [e["status"] for e in resp.json()] == ["SKIPPED", "VALIDATING"]
