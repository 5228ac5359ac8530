from __future__ import annotations

import logging
import socket
from typing import Optional, Tuple


class TransportError(Exception):
    """Any I/O failure on the connection to the remote."""

    def __init__(self, message: str, error: Optional[BaseException] = None):
        super().__init__(message)
        self.error = error


class TcpEndpoint:
    def __init__(self, sock: socket.socket, peer: Tuple[str, int] | None = None):
        self.sock = sock
        self.peer = peer
        self._closed = False

    @property
    def where(self) -> str:
        if self.peer is None:
            return "peer"
        return "%s:%d" % self.peer

    @classmethod
    def connect(cls, host: str, port: int, timeout_ms: int = 0) -> "TcpEndpoint":
        # timeout_ms == 0 keeps the socket blocking with no deadline
        try:
            sock = socket.create_connection((host, port))
        except OSError as e:
            raise TransportError(f"cannot connect to {host}:{port}: {e}", e) from e
        if timeout_ms > 0:
            sock.settimeout(timeout_ms / 1000.0)
        logging.debug("opened connection to %s:%d", host, port)
        return cls(sock, (host, port))

    def send(self, data: bytes) -> None:
        try:
            self.sock.sendall(data)
        except OSError as e:
            raise TransportError(f"send to {self.where} failed: {e}", e) from e

    def recv_exact(self, n: int) -> bytes:
        buf = bytearray()
        while len(buf) < n:
            try:
                chunk = self.sock.recv(n - len(buf))
            except OSError as e:
                raise TransportError(f"receive from {self.where} failed: {e}", e) from e
            if not chunk:
                # peer closed or crashed mid-response
                err = EOFError(f"connection closed after {len(buf)} of {n} bytes")
                raise TransportError(f"short read from {self.where}: {err}", err)
            buf.extend(chunk)
        return bytes(buf)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.sock.close()
        logging.debug("closed connection to %s", self.where)

    def __enter__(self) -> "TcpEndpoint":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
