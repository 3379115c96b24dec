"""Secure WebSocket connections that hand every received message to a handler."""

from __future__ import annotations

import logging
from collections.abc import Callable

import websocket

logger = logging.getLogger(__name__)

_SOCKET_ERRORS = (websocket.WebSocketException, OSError)


def _log_error(stage: str, exc: BaseException) -> None:
    logger.error("socket error in stage %s, %s", stage, exc)


class WebSocketClient:
    """A TLS WebSocket connection to ``wss://host:port/target``.

    ``connect`` opens the connection, ``run`` reads messages until the
    connection ends and passes each one to ``handle_response``.
    """

    def __init__(self, host: str, port: str | int, target: str) -> None:
        self.host = host
        self.port = str(port)
        self.target = target
        self._connection = None
        self._closing = False

    def url(self) -> str:
        """The address this client connects to."""
        return f"wss://{self.host}:{self.port}{self.target}"

    @property
    def connected(self) -> bool:
        """True while a connection is open."""
        return self._connection is not None

    def connect(self) -> None:
        """Open the connection; raises ConnectionError on failure."""
        try:
            connection = websocket.create_connection(self.url())
        except _SOCKET_ERRORS as exc:
            _log_error("connect", exc)
            raise ConnectionError(f"cannot connect to {self.url()}: {exc}") from exc
        self._connection = connection
        self._closing = False
        logger.info("socket [%s] connected", self)

    def send(self, message: str) -> None:
        """Send one text message; raises ConnectionError on failure."""
        connection = self._connection
        if connection is None:
            raise ConnectionError(f"socket [{self}] is not connected")
        try:
            connection.send(message)
        except _SOCKET_ERRORS as exc:
            _log_error("write", exc)
            raise ConnectionError(f"cannot write to {self.url()}: {exc}") from exc

    def run(self) -> None:
        """Read messages until the connection ends or is closed."""
        connection = self._connection
        if connection is None:
            raise ConnectionError(f"socket [{self}] is not connected")
        while True:
            try:
                message = connection.recv()
            except _SOCKET_ERRORS as exc:
                if not self._closing:
                    _log_error("read", exc)
                return
            if isinstance(message, bytes):
                message = message.decode("utf-8", errors="replace")
            if not message and not getattr(connection, "connected", True):
                return
            self.handle_response(message)

    def close(self) -> None:
        """Close the connection; a running ``run`` returns quietly."""
        self._closing = True
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            connection.close()
        except _SOCKET_ERRORS as exc:
            logger.debug("error while closing %s: %s", self.url(), exc)

    def handle_response(self, message: str) -> None:
        """Handle one received message; the default logs it."""
        logger.info("%s", message)

    def __str__(self) -> str:
        return f"host = {self.host} port = {self.port} target = {self.target}"


class MarketDataFeed(WebSocketClient):
    """A named WebSocket feed that passes every message to a callback."""

    def __init__(
        self,
        name: str,
        host: str,
        port: str | int,
        target: str,
        callback: Callable[[str], None],
    ) -> None:
        super().__init__(host, port, target)
        self.name = name
        self.callback = callback

    def handle_response(self, message: str) -> None:
        """Pass the message to the feed's callback."""
        self.callback(message)