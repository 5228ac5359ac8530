from __future__ import annotations

import argparse
import json
import logging

from .command import DEFAULT_INDEX_POLICY, IndexPolicy
from .constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT_MS
from .net import TransportError
from .runner import RunConfig, RunStatus, resolve_seed, run_session

EXIT_CODES = {
    RunStatus.COMPLETED: 0,
    RunStatus.DIVERGED: 1,
    RunStatus.COMMUNICATION_FAILURE: 2,
}


def cmd_run(args: argparse.Namespace) -> int:
    seed = resolve_seed(args.seed)
    config = RunConfig(
        host=args.host,
        port=args.port,
        seed=seed,
        index_policy=IndexPolicy(args.index_policy),
        accept_remote_errors=args.accept_remote_errors,
        max_commands=args.max_commands,
        timeout_ms=args.timeout_ms,
    )
    try:
        report = run_session(config)
    except TransportError as e:
        logging.error("%s", e)
        payload = {
            "status": RunStatus.COMMUNICATION_FAILURE.value,
            "processed": 0,
            "seed": seed,
            "detail": str(e),
        }
        print(json.dumps(payload, indent=2) if args.json else payload)
        return EXIT_CODES[RunStatus.COMMUNICATION_FAILURE]

    payload = report.summary(include_trace=args.show_trace)
    print(json.dumps(payload, indent=2) if args.json else payload)
    return EXIT_CODES[report.status]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="memdiff",
        description="Differential testing of a remote 4-cell memory server against a local reference model.",
    )
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    p.add_argument("--host", default=DEFAULT_HOST)
    p.add_argument("--port", type=int, default=DEFAULT_PORT)
    p.add_argument("--seed", type=int, default=None, help="generator seed (random and logged if omitted)")
    p.add_argument(
        "--index-policy",
        choices=[policy.value for policy in IndexPolicy],
        default=DEFAULT_INDEX_POLICY.value,
        help="with-probe also draws the out-of-range index 4",
    )
    p.add_argument(
        "--accept-remote-errors",
        action="store_true",
        help="treat a remote error response as agreeing with any local error",
    )
    p.add_argument("--max-commands", type=int, default=0, help="stop after N matched commands (0 = no limit)")
    p.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS, help="socket timeout (0 = block forever)")
    p.add_argument("--show-trace", action="store_true")
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_run)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
