"""XML-RPC transport to the rTorrent daemon."""

import xmlrpc.client
from abc import ABC, abstractmethod
from typing import Any
from xml.parsers.expat import ExpatError

import requests

from ..util.log import get_logger
from .models import NotConnectedError, RpcFault, TransportError

logger = get_logger()


class Transport(ABC):
    """Performs one named remote call at a time."""

    @abstractmethod
    def connect(self) -> None:
        pass

    @abstractmethod
    def disconnect(self) -> None:
        pass

    @property
    @abstractmethod
    def connected(self) -> bool:
        pass

    @abstractmethod
    def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Call a remote method with positional arguments.

        Args:
            method: RPC method name, e.g. ``d.start``
            params: Positional parameters

        Returns:
            Decoded result value

        Raises:
            NotConnectedError: If connect() was not called
            TransportError: If the daemon can't be reached
            RpcFault: If the daemon returned a fault
        """
        pass


class XmlRpcTransport(Transport):
    """XML-RPC over HTTP with optional basic authentication.

    The request body is encoded with xmlrpc.client and posted through a
    requests session, one round trip per call.
    """

    def __init__(
        self,
        host: str,
        port: str | int,
        path: str = "/RPC2",
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
    ) -> None:
        if not path.startswith("/"):
            path = "/" + path

        self.url = f"http://{host}:{port}{path}"
        self.username = username
        self.password = password
        self.timeout = timeout
        self._session: requests.Session | None = None

    def connect(self) -> None:
        if self._session is not None:
            return

        session = requests.Session()
        if self.username and self.password:
            session.auth = (self.username, self.password)
        session.headers.update({"Content-Type": "text/xml"})

        self._session = session
        logger.debug(f"XML-RPC session created for {self.url}")

    def disconnect(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    @property
    def connected(self) -> bool:
        return self._session is not None

    def call(self, method: str, params: list[Any] | None = None) -> Any:
        if self._session is None:
            raise NotConnectedError()

        body = xmlrpc.client.dumps(
            tuple(params or []), method, encoding="utf-8"
        )

        try:
            response = self._session.post(
                self.url, data=body.encode("utf-8"), timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {self.url} failed: {e}") from e

        return self._parse_response(response.content)

    @staticmethod
    def _parse_response(content: bytes) -> Any:
        try:
            result, _ = xmlrpc.client.loads(content, use_builtin_types=True)
        except xmlrpc.client.Fault as e:
            raise RpcFault(e.faultCode, e.faultString) from e
        except (xmlrpc.client.ResponseError, ExpatError) as e:
            raise TransportError(f"Invalid XML-RPC response: {e}") from e

        return result[0] if result else None
