"""Shared fixtures: a scripted in-memory miIO device and a real UDP one."""

from __future__ import annotations

import json
import socket
import struct
import threading
from typing import Callable, List, Optional, Tuple

import pytest

from miio_switch import MiioConfig, build_packet, decrypt, encrypt, parse_token
from miio_switch.constants import HEADER_LENGTH, PACKET_MAGIC

TOKEN = "a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4"
DEVICE_ID = b"\x00\x00\x00\x01"
STAMP = b"\x00\x00\x00\x02"


def hello_reply(device_id: bytes = DEVICE_ID, stamp: bytes = STAMP) -> bytes:
    """A 32-byte hello reply as sent by a real device."""
    return PACKET_MAGIC + struct.pack(">HI", HEADER_LENGTH, 0) + device_id + stamp + b"\xff" * 16


def encrypted_reply(token: bytes, body: dict, device_id: bytes = DEVICE_ID, stamp: bytes = STAMP) -> bytes:
    payload = encrypt(json.dumps(body).encode("utf-8"), token)
    return build_packet(token, device_id, stamp, payload)


class PlugModel:
    """Behaviour of a smart plug: answers hello, set_power and get_prop."""

    def __init__(self, token: str = TOKEN, power: str = "off"):
        self.token = parse_token(token)
        self.power = power
        self.requests: List[dict] = []
        self.answer_commands = True
        self.hello_reply: bytes = hello_reply()
        self.command_reply: Optional[bytes] = None
        """If set, sent verbatim in reply to every command."""

    def handle(self, data: bytes) -> Optional[bytes]:
        if data[4:] == b"\xff" * 28:
            return self.hello_reply
        request = json.loads(decrypt(data[HEADER_LENGTH:], self.token))
        self.requests.append(request)
        if request["method"] == "set_power":
            self.power = request["params"][0]
            result = ["ok"]
        else:
            result = [self.power]
        if not self.answer_commands:
            return None
        if self.command_reply is not None:
            return self.command_reply
        return encrypted_reply(self.token, {"id": request["id"], "result": result})


class FakeTransport:
    """In-memory stand-in for UdpTransport."""

    def __init__(self, device: FakeDevice, host: str, port: int, connect_timeout: float):
        self.device = device
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.timeouts: List[float] = []
        self.sent: List[bytes] = []
        self.pending: Optional[bytes] = None
        self.closed = False

    def set_timeout(self, timeout: float) -> None:
        self.timeouts.append(timeout)

    def send(self, data: bytes) -> None:
        if self.device.fail_send:
            raise OSError("Network is unreachable")
        self.sent.append(data)
        self.pending = self.device.model.handle(data)

    def receive(self, max_size: int) -> bytes:
        if self.pending is None:
            raise socket.timeout("timed out")
        data, self.pending = self.pending, None
        return data[:max_size]

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeTransport:
        return self

    def __exit__(self, *exc_info) -> bool:
        self.close()
        return False


class FakeDevice:
    """Transport factory that records every transport it opens."""

    def __init__(self, model: Optional[PlugModel] = None):
        self.model = PlugModel() if model is None else model
        self.transports: List[FakeTransport] = []
        self.fail_open = False
        self.fail_send = False

    def __call__(self, host: str, port: int, connect_timeout: float) -> FakeTransport:
        if self.fail_open:
            raise OSError("Connection refused")
        transport = FakeTransport(self, host, port, connect_timeout)
        self.transports.append(transport)
        return transport

    def config(self, **kwargs) -> MiioConfig:
        return MiioConfig(transport_factory=self, **kwargs)


class UdpMockDevice:
    """A PlugModel served on a real UDP socket bound to 127.0.0.1."""

    def __init__(self, model: PlugModel):
        self.model = model
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(0.05)
        self.port: int = self.sock.getsockname()[1]
        self.received: List[Tuple[bytes, Tuple[str, int]]] = []
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                data, addr = self.sock.recvfrom(2048)
            except socket.timeout:
                continue
            self.received.append((data, addr))
            reply = self.model.handle(data)
            if reply is not None:
                self.sock.sendto(reply, addr)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2.0)
        self.sock.close()

    def config(self, **kwargs) -> MiioConfig:
        kwargs.setdefault("connect_timeout", 1.0)
        kwargs.setdefault("discovery_timeout", 1.0)
        kwargs.setdefault("command_timeout", 0.5)
        return MiioConfig(port=self.port, **kwargs)


@pytest.fixture
def token() -> str:
    return TOKEN


@pytest.fixture
def token_bytes() -> bytes:
    return bytes.fromhex(TOKEN)


@pytest.fixture
def plug() -> PlugModel:
    return PlugModel()


@pytest.fixture
def fake_device(plug: PlugModel) -> FakeDevice:
    return FakeDevice(plug)


@pytest.fixture
def udp_device(plug: PlugModel):
    device = UdpMockDevice(plug)
    device.start()
    yield device
    device.stop()


@pytest.fixture
def reply_builder() -> Callable[..., bytes]:
    return encrypted_reply
