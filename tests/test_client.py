import ipaddress
import time

import pytest

from conftest import svr_resp
from ssrp import ArgumentError, ClientConfig, EncodingError, SSRPClient
from ssrp.messages import build_port_response

RECORD = "ServerName;{server};InstanceName;{name};IsClustered;No;Version;15.0.2000.5;tcp;{port};;"


def listing(server, name="SQLEXPRESS", port=1433):
    return svr_resp(RECORD.format(server=server, name=name, port=port))


class TestClientArguments:

    def test_defaults(self):
        client = SSRPClient()
        assert client.timeout == 1
        assert client.multicast_hops == 1

    def test_settings(self):
        client = SSRPClient()
        client.timeout = 5
        client.multicast_hops = 4
        assert client.config.timeout == 5
        assert client.config.multicast_hops == 4

    def test_instance_name_too_long_before_socket(self, fake_sockets):
        factory = fake_sockets([])
        client = SSRPClient(socket_factory=factory)
        with pytest.raises(ArgumentError):
            client.list_instances("127.0.0.1", "A" * 33)
        assert factory.sockets == []

    def test_dac_instance_name_too_long(self, fake_sockets):
        factory = fake_sockets([])
        with pytest.raises(ArgumentError):
            SSRPClient(socket_factory=factory).get_dac_port("127.0.0.1", "A" * 33)
        assert factory.sockets == []

    def test_unencodable_instance_name(self, fake_sockets):
        factory = fake_sockets([])
        with pytest.raises(EncodingError):
            SSRPClient(socket_factory=factory).list_instances("127.0.0.1", "名前")
        assert factory.sockets == []

    @pytest.mark.parametrize("address", [None, "", "not-an-ip", "300.1.1.1"])
    def test_invalid_address(self, fake_sockets, address):
        factory = fake_sockets([])
        with pytest.raises(ArgumentError):
            SSRPClient(socket_factory=factory).list_all_instances(address)
        assert factory.sockets == []

    def test_dac_requires_instance(self, fake_sockets):
        with pytest.raises(ArgumentError):
            SSRPClient(socket_factory=fake_sockets([])).get_dac_port("127.0.0.1", None)

    def test_accepts_ipaddress_objects(self, fake_sockets):
        factory = fake_sockets([])
        SSRPClient(socket_factory=factory).list_instances(ipaddress.ip_address("::1"))
        assert factory.sock.sent[0][1] == ("::1", 1434)


class TestClientRequests:

    def test_list_all_collects_every_sender(self, fake_sockets):
        factory = fake_sockets([
            (listing("ALPHA"), ("10.0.0.1", 1434)),
            (b"\x05\x01\x00;", ("10.0.0.9", 1434)),
            (listing("BRAVO"), ("10.0.0.2", 1434)),
            (listing("CHARLIE"), ("10.0.0.3", 1434)),
        ])
        result = SSRPClient(socket_factory=factory).list_all_instances("255.255.255.255")
        assert [i.server for i in result] == ["ALPHA", "BRAVO", "CHARLIE"]
        assert factory.sock.sent[0][0] == b"\x02"

    def test_list_instances_without_name(self, fake_sockets):
        factory = fake_sockets([(listing("HOST"), ("10.0.0.1", 1434))])
        result = SSRPClient(socket_factory=factory).list_instances("10.0.0.1")
        assert [i.name for i in result] == ["SQLEXPRESS"]
        assert factory.sock.sent[0][0] == b"\x03"

    def test_list_instance_with_name_stops_early(self, fake_sockets):
        factory = fake_sockets([
            (listing("HOST"), ("10.0.0.1", 1434)),
            (listing("HOST", port=1500), ("10.0.0.1", 1434)),
        ])
        client = SSRPClient(ClientConfig(timeout=30.0), socket_factory=factory)
        result = client.list_instances("10.0.0.1", "SQLEXPRESS")
        assert [i.tcp_port for i in result] == [1433]
        assert factory.sock.sent[0][0] == b"\x04SQLEXPRESS\x00"

    def test_dac_port(self, fake_sockets):
        factory = fake_sockets([(build_port_response(50975), ("10.0.0.1", 1434))])
        assert SSRPClient(socket_factory=factory).get_dac_port("10.0.0.1", "SQLEXPRESS") == 50975
        assert factory.sock.sent[0][0] == b"\x0f\x01SQLEXPRESS\x00"


class TestLoopback:

    def test_list_instance_returns_before_timeout(self, responder):
        server = responder([listing("LOCAL")])
        client = SSRPClient(ClientConfig(timeout=3.0, port=server.port))

        start = time.monotonic()
        result = client.list_instances("127.0.0.1", "SQLEXPRESS")

        assert [i.server for i in result] == ["LOCAL"]
        assert time.monotonic() - start < 2.5
        assert server.requests == [b"\x04SQLEXPRESS\x00"]

    def test_dac_port(self, responder):
        server = responder([bytes([0x05, 0x06, 0x00, 0x01, 0x1F, 0xC7])])
        client = SSRPClient(ClientConfig(timeout=3.0, port=server.port))
        assert client.get_dac_port("127.0.0.1", "SQLEXPRESS") == 50975

    def test_unicast_all_waits_out_timeout(self, responder):
        server = responder([listing("ONE"), listing("TWO")])
        client = SSRPClient(ClientConfig(timeout=0.5, port=server.port))

        start = time.monotonic()
        result = client.list_instances("127.0.0.1")

        assert [i.server for i in result] == ["ONE", "TWO"]
        assert time.monotonic() - start >= 0.45
