import socket
import struct
import threading

import pytest


def svr_resp(text: str, encoding: str = "cp1252") -> bytes:
    """Wrap RESP_DATA text in an SVR_RESP header."""
    payload = text.encode(encoding)
    return struct.pack("<BH", 0x05, len(payload)) + payload


class FakeSocket:
    """Stands in for a UDP socket; replies are queued up front."""

    def __init__(self, family, type_, replies=None, send_error=None):
        self.family = family
        self.type = type_
        self.replies = list(replies or [])
        self.send_error = send_error
        self.bound = None
        self.sent = []
        self.options = []
        self.timeouts = []
        self.recv_calls = 0
        self.close_calls = 0

    def bind(self, address):
        self.bound = address

    def setsockopt(self, level, option, value):
        self.options.append((level, option, value))

    def settimeout(self, value):
        self.timeouts.append(value)

    def sendto(self, data, address):
        if self.send_error:
            raise self.send_error
        self.sent.append((data, address))

    def recvfrom(self, bufsize):
        self.recv_calls += 1
        if not self.replies:
            raise socket.timeout("timed out")
        return self.replies.pop(0)

    def close(self):
        self.close_calls += 1


class FakeSocketFactory:
    def __init__(self, replies=None, send_error=None):
        self.replies = replies
        self.send_error = send_error
        self.sockets = []

    def __call__(self, family, type_):
        sock = FakeSocket(family, type_, self.replies, self.send_error)
        self.sockets.append(sock)
        return sock

    @property
    def sock(self) -> FakeSocket:
        assert len(self.sockets) == 1
        return self.sockets[0]


@pytest.fixture
def fake_sockets():
    def make(replies=None, send_error=None):
        return FakeSocketFactory(replies, send_error)
    return make


class Responder:
    """Loopback SSRP server answering one request with canned datagrams."""

    def __init__(self, replies):
        self.replies = replies
        self.requests = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(5.0)
        self.port = self.sock.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self):
        try:
            data, addr = self.sock.recvfrom(4096)
        except socket.timeout:
            return
        self.requests.append(data)
        for reply in self.replies:
            self.sock.sendto(reply, addr)

    def start(self):
        self._thread.start()
        return self

    def close(self):
        self._thread.join(timeout=6.0)
        self.sock.close()


@pytest.fixture
def responder():
    started = []

    def make(replies):
        r = Responder(replies).start()
        started.append(r)
        return r

    yield make

    for r in started:
        r.close()
