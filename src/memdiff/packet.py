from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Union

from .command import Command, Product, Read, Sum, Write
from .constants import (
    COMMAND_FRAME_LEN,
    OP_PRODUCT,
    OP_READ,
    OP_SUM,
    OP_WRITE,
    RESPONSE_FRAME_LEN,
    STATUS_ERROR,
    STATUS_SUCCESS,
)

COMMAND_FORMAT = "!BBB"  # opcode, operand1, operand2
RESPONSE_FORMAT = "!BB"  # status, payload


class Opcode(enum.IntEnum):
    READ = OP_READ
    WRITE = OP_WRITE
    SUM = OP_SUM
    PRODUCT = OP_PRODUCT


class ResponseError(enum.Enum):
    PROTOCOL = "ProtocolError"
    DECODE = "DecodeError"


@dataclass(frozen=True, slots=True)
class Success:
    value: int


@dataclass(frozen=True, slots=True)
class Failure:
    error: ResponseError
    raw: bytes = b""


Response = Union[Success, Failure]


def encode_command(command: Command) -> bytes:
    if isinstance(command, Read):
        fields = (Opcode.READ, command.index, 0)
    elif isinstance(command, Write):
        fields = (Opcode.WRITE, command.index, command.value)
    elif isinstance(command, Sum):
        fields = (Opcode.SUM, 0, 0)
    elif isinstance(command, Product):
        fields = (Opcode.PRODUCT, 0, 0)
    else:
        raise TypeError(f"not a command: {command!r}")
    return struct.pack(COMMAND_FORMAT, *fields)


def decode_command(raw: bytes) -> Command:
    if len(raw) != COMMAND_FRAME_LEN:
        raise ValueError(f"command frame must be {COMMAND_FRAME_LEN} bytes, got {len(raw)}")

    opcode, op1, op2 = struct.unpack(COMMAND_FORMAT, raw)
    if opcode == Opcode.READ:
        return Read(op1)
    if opcode == Opcode.WRITE:
        return Write(op1, op2)
    if opcode == Opcode.SUM:
        return Sum()
    if opcode == Opcode.PRODUCT:
        return Product()
    raise ValueError(f"unknown opcode: {opcode}")


def decode_response(raw: bytes) -> Response:
    if len(raw) != RESPONSE_FRAME_LEN:
        raise ValueError(f"response frame must be {RESPONSE_FRAME_LEN} bytes, got {len(raw)}")

    status, payload = struct.unpack(RESPONSE_FORMAT, raw)
    if status == STATUS_SUCCESS:
        return Success(payload)
    if status == STATUS_ERROR:
        return Failure(ResponseError.PROTOCOL, bytes(raw))
    return Failure(ResponseError.DECODE, bytes(raw))


def encode_response(response: Response) -> bytes:
    if isinstance(response, Success):
        return struct.pack(RESPONSE_FORMAT, STATUS_SUCCESS, response.value)
    if response.raw:
        return response.raw
    if response.error is ResponseError.PROTOCOL:
        return struct.pack(RESPONSE_FORMAT, STATUS_ERROR, 0)
    raise ValueError("a decode failure can only be re-encoded from its raw frame")
