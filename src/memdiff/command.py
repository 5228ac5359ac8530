from __future__ import annotations

import enum
import random
from dataclasses import dataclass, field
from typing import Callable, Iterator, Tuple, Union

from .constants import BYTE_MAX, NUM_CELLS, PROBE_INDEX


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= BYTE_MAX:
        raise ValueError(f"{name} must fit in a byte, got {value}")


@dataclass(frozen=True, slots=True)
class Read:
    index: int

    def __post_init__(self) -> None:
        _check_byte("index", self.index)


@dataclass(frozen=True, slots=True)
class Write:
    index: int
    value: int

    def __post_init__(self) -> None:
        _check_byte("index", self.index)
        _check_byte("value", self.value)


@dataclass(frozen=True, slots=True)
class Sum:
    pass


@dataclass(frozen=True, slots=True)
class Product:
    pass


Command = Union[Read, Write, Sum, Product]


class IndexPolicy(enum.Enum):
    """Which indices Read/Write commands are drawn from."""

    VALID_ONLY = "valid-only"
    WITH_PROBE = "with-probe"

    @property
    def indices(self) -> Tuple[int, ...]:
        valid = tuple(range(NUM_CELLS))
        if self is IndexPolicy.WITH_PROBE:
            return valid + (PROBE_INDEX,)
        return valid


DEFAULT_INDEX_POLICY = IndexPolicy.WITH_PROBE


@dataclass(slots=True)
class CommandGenerator:
    """Draws commands from an owned random source.

    Each call picks a kind uniformly, then an index from the policy's set for
    Read/Write, then a value in 0..255 for Write. Two generators built from
    the same seed and policy yield the same sequence.
    """

    rng: random.Random
    policy: IndexPolicy = DEFAULT_INDEX_POLICY
    _kinds: Tuple[Callable[[], Command], ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._kinds = (self._read, self._write, self._product, self._sum)

    @classmethod
    def seeded(cls, seed: int, policy: IndexPolicy = DEFAULT_INDEX_POLICY) -> "CommandGenerator":
        return cls(random.Random(seed), policy)

    def _index(self) -> int:
        return self.rng.choice(self.policy.indices)

    def _read(self) -> Command:
        return Read(self._index())

    def _write(self) -> Command:
        index = self._index()
        return Write(index, self.rng.randint(0, BYTE_MAX))

    def _product(self) -> Command:
        return Product()

    def _sum(self) -> Command:
        return Sum()

    def generate(self) -> Command:
        return self.rng.choice(self._kinds)()

    def __iter__(self) -> Iterator[Command]:
        while True:
            yield self.generate()
