from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union

from .command import Command, Product, Read, Sum, Write
from .constants import BYTE_MAX, NUM_CELLS


class ModelError(enum.Enum):
    INVALID_READ = "InvalidRead"
    INVALID_WRITE = "InvalidWrite"
    OVERFLOW = "Overflow"


@dataclass(frozen=True, slots=True)
class Ok:
    value: int


@dataclass(frozen=True, slots=True)
class Err:
    error: ModelError


Outcome = Union[Ok, Err]


def checked_add(a: int, b: int) -> Optional[int]:
    total = a + b
    return total if total <= BYTE_MAX else None


def checked_mul(a: int, b: int) -> Optional[int]:
    total = a * b
    return total if total <= BYTE_MAX else None


@dataclass(slots=True)
class ReferenceModel:
    """Trusted in-process semantics of the memory protocol.

    Holds exactly NUM_CELLS byte cells, all zero at construction. Errors are
    returned as Err values; nothing here raises for a bad command.
    """

    _cells: List[int] = field(default_factory=lambda: [0] * NUM_CELLS)

    @property
    def cells(self) -> Tuple[int, ...]:
        return tuple(self._cells)

    def _get(self, index: int) -> Optional[int]:
        if 0 <= index < NUM_CELLS:
            return self._cells[index]
        return None

    def _set(self, index: int, value: int) -> bool:
        if 0 <= index < NUM_CELLS:
            self._cells[index] = value
            return True
        return False

    def execute(self, command: Command) -> Outcome:
        if isinstance(command, Read):
            value = self._get(command.index)
            return Err(ModelError.INVALID_READ) if value is None else Ok(value)

        if isinstance(command, Write):
            if not self._set(command.index, command.value):
                return Err(ModelError.INVALID_WRITE)
            return Ok(command.value)

        if isinstance(command, Sum):
            return self._fold(0, checked_add)

        if isinstance(command, Product):
            return self._fold(1, checked_mul)

        raise TypeError(f"not a command: {command!r}")

    def _fold(self, start: int, op: Callable[[int, int], Optional[int]]) -> Outcome:
        # stop at the first step that leaves the byte range
        acc = start
        for v in self._cells:
            step = op(acc, v)
            if step is None:
                return Err(ModelError.OVERFLOW)
            acc = step
        return Ok(acc)
