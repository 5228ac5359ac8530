from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from .command import DEFAULT_INDEX_POLICY, Command, CommandGenerator, IndexPolicy
from .constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT_MS
from .model import Err, Ok, Outcome, ReferenceModel
from .net import TcpEndpoint, TransportError
from .packet import Failure, Response, ResponseError, Success
from .remote import RemoteExecutor


class RunStatus(enum.Enum):
    COMPLETED = "completed"
    DIVERGED = "diverged"
    COMMUNICATION_FAILURE = "communication-failure"


@dataclass(frozen=True, slots=True)
class Divergence:
    command: Command
    local: Outcome
    remote: Response

    def describe(self) -> str:
        if isinstance(self.local, Ok) and isinstance(self.remote, Success):
            return f"expected {self.local.value}, received {self.remote.value}"
        return f"expected {self.local!r}, received {self.remote!r}"


@dataclass(frozen=True, slots=True)
class CommunicationFailure:
    command: Command
    local: Outcome
    error: TransportError

    def describe(self) -> str:
        return f"{self.error} (local result: {self.local!r})"


Verdict = Union[Divergence, CommunicationFailure]


def compare(
    command: Command,
    local: Outcome,
    remote: Response,
    *,
    accept_remote_errors: bool = False,
) -> Optional[Divergence]:
    """Return None when both sides agree, otherwise the divergence.

    Only Ok(v) against Success(v) agrees. With accept_remote_errors, a local
    Err also agrees with a remote ProtocolError; the wire carries no error
    identity, so the kinds are not compared.
    """
    if isinstance(local, Ok) and isinstance(remote, Success):
        if local.value == remote.value:
            return None
    elif (
        accept_remote_errors
        and isinstance(local, Err)
        and isinstance(remote, Failure)
        and remote.error is ResponseError.PROTOCOL
    ):
        return None
    return Divergence(command, local, remote)


@dataclass(frozen=True, slots=True)
class RunConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    seed: Optional[int] = None
    index_policy: IndexPolicy = DEFAULT_INDEX_POLICY
    accept_remote_errors: bool = False
    max_commands: int = 0  # 0 runs until the first halt
    timeout_ms: int = DEFAULT_TIMEOUT_MS


@dataclass(frozen=True, slots=True)
class RunReport:
    status: RunStatus
    processed: int
    seed: Optional[int]
    trace: Tuple[Command, ...]
    verdict: Optional[Verdict] = None

    def summary(self, include_trace: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status.value,
            "processed": self.processed,
            "seed": self.seed,
            "generated": len(self.trace),
        }
        if self.verdict is not None:
            payload["command"] = repr(self.verdict.command)
            payload["detail"] = self.verdict.describe()
        if include_trace:
            payload["trace"] = [repr(c) for c in self.trace]
        return payload


@dataclass(slots=True)
class DifferentialRunner:
    model: ReferenceModel
    generator: CommandGenerator
    executor: RemoteExecutor
    accept_remote_errors: bool = False
    max_commands: int = 0
    seed: Optional[int] = None
    trace: List[Command] = field(default_factory=list)

    def step(self) -> Optional[Verdict]:
        command = self.generator.generate()
        logging.debug("generated command: %r", command)
        self.trace.append(command)

        local = self.model.execute(command)
        try:
            remote = self.executor.execute(command)
        except TransportError as e:
            return CommunicationFailure(command, local, e)
        return compare(command, local, remote, accept_remote_errors=self.accept_remote_errors)

    def run(self) -> RunReport:
        processed = 0
        verdict: Optional[Verdict] = None

        while self.max_commands <= 0 or processed < self.max_commands:
            verdict = self.step()
            if verdict is not None:
                break
            processed += 1

        if isinstance(verdict, CommunicationFailure):
            status = RunStatus.COMMUNICATION_FAILURE
            logging.error("communication error: %s", verdict.describe())
        elif isinstance(verdict, Divergence):
            status = RunStatus.DIVERGED
            logging.error("results diverged on %r! %s", verdict.command, verdict.describe())
        else:
            status = RunStatus.COMPLETED

        logging.info("number of commands processed: %d", processed)
        logging.debug("command trace: %r", self.trace)
        return RunReport(
            status=status,
            processed=processed,
            seed=self.seed,
            trace=tuple(self.trace),
            verdict=verdict,
        )


def resolve_seed(seed: Optional[int]) -> int:
    if seed is not None:
        return seed
    return random.SystemRandom().randrange(2**32)


def run_session(config: RunConfig) -> RunReport:
    """Connect once, run until halted, always release the connection."""
    seed = resolve_seed(config.seed)
    logging.info(
        "starting run; remote=%s:%d seed=%d index_policy=%s",
        config.host,
        config.port,
        seed,
        config.index_policy.value,
    )

    with TcpEndpoint.connect(config.host, config.port, timeout_ms=config.timeout_ms) as endpoint:
        runner = DifferentialRunner(
            model=ReferenceModel(),
            generator=CommandGenerator.seeded(seed, config.index_policy),
            executor=RemoteExecutor(endpoint),
            accept_remote_errors=config.accept_remote_errors,
            max_commands=config.max_commands,
            seed=seed,
        )
        return runner.run()
