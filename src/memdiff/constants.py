from __future__ import annotations

NUM_CELLS = 4
BYTE_MAX = 0xFF

COMMAND_FRAME_LEN = 3  # opcode, operand1, operand2
RESPONSE_FRAME_LEN = 2  # status, payload

OP_READ = 1
OP_WRITE = 2
OP_SUM = 3
OP_PRODUCT = 4

STATUS_SUCCESS = 0
STATUS_ERROR = 1

# first index outside the memory, used to exercise the error path
PROBE_INDEX = NUM_CELLS

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 10203
DEFAULT_TIMEOUT_MS = 0
