from __future__ import annotations

from dataclasses import dataclass

from .command import Command
from .constants import RESPONSE_FRAME_LEN
from .net import TcpEndpoint
from .packet import Response, decode_response, encode_command


@dataclass(slots=True)
class RemoteExecutor:
    """One synchronous round trip per command; no pipelining.

    TransportError from the endpoint is never turned into a Failure.
    """

    endpoint: TcpEndpoint
    round_trips: int = 0

    def execute(self, command: Command) -> Response:
        self.endpoint.send(encode_command(command))
        raw = self.endpoint.recv_exact(RESPONSE_FRAME_LEN)
        self.round_trips += 1
        return decode_response(raw)
