from __future__ import annotations

import socket
import threading
from typing import Callable, Iterator, Tuple

import pytest

from memdiff.constants import COMMAND_FRAME_LEN
from memdiff.model import ReferenceModel
from memdiff.packet import decode_command
from peers import Responder, faithful


def _recv_frame(conn: socket.socket) -> bytes:
    buf = b""
    while len(buf) < COMMAND_FRAME_LEN:
        chunk = conn.recv(COMMAND_FRAME_LEN - len(buf))
        if not chunk:
            return b""
        buf += chunk
    return buf


def _serve_one(listener: socket.socket, respond: Responder) -> None:
    try:
        conn, _ = listener.accept()
    except OSError:
        return
    conn.settimeout(5.0)
    model = ReferenceModel()
    with conn:
        while True:
            try:
                raw = _recv_frame(conn)
            except OSError:
                return
            if not raw:
                return
            reply = respond(model.execute(decode_command(raw)))
            if reply is None:
                return
            conn.sendall(reply)


@pytest.fixture
def loopback_peer() -> Iterator[Callable[[Responder], Tuple[str, int]]]:
    """Start a single-connection memory server on a thread.

    The peer runs its own reference model and answers through `respond`.
    """
    listeners: list[socket.socket] = []
    threads: list[threading.Thread] = []

    def start(respond: Responder = faithful) -> Tuple[str, int]:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        listener.settimeout(5.0)
        listeners.append(listener)
        t = threading.Thread(target=_serve_one, args=(listener, respond), daemon=True)
        t.start()
        threads.append(t)
        return listener.getsockname()

    yield start

    for listener in listeners:
        listener.close()
    for t in threads:
        t.join(timeout=5.0)


@pytest.fixture
def silent_peer() -> Iterator[Tuple[str, int]]:
    """A listener that completes the handshake and never answers."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    yield listener.getsockname()
    listener.close()
