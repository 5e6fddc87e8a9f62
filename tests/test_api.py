"""Tests for the command and status HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from api.commands import get_store
from app import app
from tcp_server.gps_tcp_server import GPSClientProtocol, GPSTrackerTCPServer
from tcp_server.message_service import MessageService

from conftest import FakeTransport


@pytest.fixture
def tcp_server(fake_store):
    server = GPSTrackerTCPServer(store=fake_store, connection_timeout=0)
    app.state.tcp_server = server
    yield server
    app.state.tcp_server = None


@pytest.fixture
def client():
    # No context manager: the lifespan (database check, real TCP listener) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()


def connect_device(server, device_id="8800000015") -> FakeTransport:
    # TestClient runs the app on its own loop, so register the connection directly
    transport = FakeTransport()
    protocol = GPSClientProtocol(server)
    protocol.transport = transport
    protocol.connected = True
    protocol.device_id = device_id
    server.register_device(device_id, protocol)
    return transport


def test_send_command_with_content(client, tcp_server):
    transport = connect_device(tcp_server)

    response = client.post("/gps/command/8800000015/UPLOAD/,600")

    assert response.status_code == 200
    assert response.json() == {
        "device_id": "8800000015",
        "command": "UPLOAD",
        "frame": "[3G*8800000015*0010*UPLOAD,600]",
        "delivered": True,
    }
    assert transport.written == [b"[3G*8800000015*0010*UPLOAD,600]\r\n"]


def test_send_preset_command(client, tcp_server):
    connect_device(tcp_server)

    response = client.post("/gps/command/8800000015/APN")

    assert response.status_code == 200
    assert response.json()["frame"] == "[3G*8800000015*0017*APN,cmnet,,,20634]"


def test_send_preset_command_to_offline_device(client, tcp_server):
    response = client.post("/gps/command/8800000015/CR")

    assert response.status_code == 200
    body = response.json()
    assert body["frame"] == "[3G*8800000015*0002*CR]"
    assert body["delivered"] is False


def test_delivered_reflects_the_actual_send(client, tcp_server, monkeypatch):
    connect_device(tcp_server)
    monkeypatch.setattr(tcp_server, "send", lambda device_id, frame: False)

    response = client.post("/gps/command/8800000015/UPLOAD/,600")

    assert response.status_code == 200
    assert response.json()["delivered"] is False


def test_unsupported_preset_command(client, tcp_server):
    response = client.post("/gps/command/8800000015/FACTORY")

    assert response.status_code == 400


def test_commands_need_running_tcp_server(client):
    app.state.tcp_server = None

    response = client.post("/gps/command/8800000015/CR")

    assert response.status_code == 503


def test_get_device_data(client, sql_store):
    content = "UD,50,100,1.0,X,2.0,Y,Z,A,B,C,7,80"
    MessageService(sql_store).handle_frame(f"[3G*8800000015*{len(content):04d}*{content}]")
    MessageService(sql_store).handle_frame("[3G*8800000015*0002*LK]")
    app.dependency_overrides[get_store] = lambda: sql_store

    response = client.get("/gps/data/8800000015")
    assert response.status_code == 200
    assert sorted(r["type"] for r in response.json()) == ["LK", "UD", "UD"]

    response = client.get("/gps/data/8800000015", params={"type": "LK"})
    assert [r["type"] for r in response.json()] == ["LK"]

    positions = [r for r in client.get("/gps/data/8800000015").json() if r["latitude"] is not None]
    assert positions[0]["battery_level"] == 80


def test_status_endpoints_without_server(client):
    app.state.tcp_server = None

    assert client.get("/api/gps-tcp/status").status_code == 503
    assert client.get("/api/gps-tcp/health").status_code == 503


def test_status_reports_connections(client, tcp_server):
    connect_device(tcp_server)

    response = client.get("/api/gps-tcp/status")

    # Not listening in tests, so reported as not running
    assert response.status_code == 503
    assert response.json()["connected_devices"] == ["8800000015"]
