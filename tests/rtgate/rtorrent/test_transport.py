import xmlrpc.client
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.rtgate.rtorrent.models import (
    NotConnectedError,
    RpcFault,
    TransportError,
)
from src.rtgate.rtorrent.transport import XmlRpcTransport


def xml_response(value):
    response = MagicMock()
    response.content = xmlrpc.client.dumps(
        (value,), methodresponse=True
    ).encode("utf-8")
    return response


def fault_response(code, message):
    response = MagicMock()
    response.content = xmlrpc.client.dumps(
        xmlrpc.client.Fault(code, message)
    ).encode("utf-8")
    return response


@pytest.fixture
def session():
    with patch("src.rtgate.rtorrent.transport.requests.Session") as cls:
        instance = MagicMock()
        instance.headers = {}
        instance.auth = None
        cls.return_value = instance
        yield instance


class TestXmlRpcTransport:
    """Test cases for XmlRpcTransport."""

    def test_url(self):
        transport = XmlRpcTransport("seedbox", 8080, "RPC2")
        assert transport.url == "http://seedbox:8080/RPC2"

    def test_not_connected(self):
        transport = XmlRpcTransport("localhost", 8000)

        assert transport.connected is False
        with pytest.raises(NotConnectedError):
            transport.call("system.client_version")

    def test_connect_without_auth(self, session):
        transport = XmlRpcTransport("localhost", 8000)
        transport.connect()

        assert transport.connected is True
        assert session.auth is None
        assert session.headers["Content-Type"] == "text/xml"

    def test_connect_with_auth(self, session):
        transport = XmlRpcTransport(
            "localhost", 8000, username="user", password="secret"
        )
        transport.connect()

        assert session.auth == ("user", "secret")

    def test_call_encodes_request(self, session):
        """Test that the body is a standard XML-RPC method call."""
        session.post.return_value = xml_response("0.9.8")
        transport = XmlRpcTransport("localhost", 8000, timeout=5)
        transport.connect()

        result = transport.call("d.name", ["ABCDEF"])

        assert result == "0.9.8"
        url = session.post.call_args[0][0]
        kwargs = session.post.call_args[1]
        assert url == "http://localhost:8000/RPC2"
        assert kwargs["timeout"] == 5
        params, method = xmlrpc.client.loads(kwargs["data"])
        assert method == "d.name"
        assert params == ("ABCDEF",)

    def test_call_returns_nested_values(self, session):
        session.post.return_value = xml_response([["a", 1], ["b", 2]])
        transport = XmlRpcTransport("localhost", 8000)
        transport.connect()

        assert transport.call("d.multicall2") == [["a", 1], ["b", 2]]

    def test_binary_params(self, session):
        session.post.return_value = xml_response(0)
        transport = XmlRpcTransport("localhost", 8000)
        transport.connect()

        transport.call("load.raw", ["", b"d8:announce"])

        params, _ = xmlrpc.client.loads(
            session.post.call_args[1]["data"], use_builtin_types=True
        )
        assert params == ("", b"d8:announce")

    def test_fault(self, session):
        session.post.return_value = fault_response(-501, "Unknown hash")
        transport = XmlRpcTransport("localhost", 8000)
        transport.connect()

        with pytest.raises(RpcFault) as exc_info:
            transport.call("d.start", ["BAD"])

        assert exc_info.value.fault_code == -501
        assert exc_info.value.fault_string == "Unknown hash"

    def test_http_error(self, session):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("401")
        session.post.return_value = response
        transport = XmlRpcTransport("localhost", 8000)
        transport.connect()

        with pytest.raises(TransportError):
            transport.call("system.client_version")

    def test_connection_error(self, session):
        session.post.side_effect = requests.ConnectionError("refused")
        transport = XmlRpcTransport("localhost", 8000)
        transport.connect()

        with pytest.raises(TransportError):
            transport.call("system.client_version")

    def test_malformed_response(self, session):
        response = MagicMock()
        response.content = b"<html>not xml-rpc"
        session.post.return_value = response
        transport = XmlRpcTransport("localhost", 8000)
        transport.connect()

        with pytest.raises(TransportError):
            transport.call("system.client_version")

    def test_disconnect(self, session):
        transport = XmlRpcTransport("localhost", 8000)
        transport.connect()
        transport.disconnect()

        session.close.assert_called_once()
        assert transport.connected is False
