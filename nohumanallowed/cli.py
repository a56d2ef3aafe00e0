"""
Command-line interface.

Usage:
    nohumanallowed challenge --difficulty 4
    nohumanallowed solve --prefix <prefix> --target 0000
    nohumanallowed verify --prefix <prefix> --nonce <nonce> --target 0000 --expires <expiresAt>
    nohumanallowed serve --port 8000

The signing secret comes from NHA_CHALLENGE_SECRET, never from a flag.
"""

import argparse
import json
import sys
import time
from dataclasses import asdict

from nohumanallowed.config import settings
from nohumanallowed.logging_config import get_logger, setup_logging
from nohumanallowed.services.pow_service import create_challenge, verify_challenge
from nohumanallowed.services.solver_service import estimate_solve_time, solve_challenge

DEFAULT_VERIFY_WINDOW_SECONDS = 60


def _print_json(data: dict) -> None:
    print(json.dumps(data, indent=2))


def cmd_challenge(args: argparse.Namespace) -> int:
    challenge = create_challenge(
        difficulty=args.difficulty,
        expires_in=args.expires,
        secret=settings.challenge_secret,
    )

    if args.json:
        _print_json(challenge.to_wire())
        return 0

    estimate = estimate_solve_time(len(challenge.target))
    print("Challenge created:")
    print(f"  id:        {challenge.id}")
    print(f"  prefix:    {challenge.prefix}")
    print(f"  target:    {challenge.target}")
    print(f"  expiresAt: {challenge.expires_at}")
    if challenge.signature:
        print(f"  signature: {challenge.signature}")
    print(f"  estimate:  {estimate.description} (~{estimate.average_ms:.0f}ms)")
    print("\nSolve with:")
    print(f"  nohumanallowed solve --prefix {challenge.prefix} --target {challenge.target}")
    print("\nVerify with:")
    print(
        f"  nohumanallowed verify --prefix {challenge.prefix} --nonce <nonce>"
        f" --target {challenge.target} --expires {challenge.expires_at}"
    )
    return 0


def cmd_solve(args: argparse.Namespace) -> int:
    logger = get_logger("solver")

    def report(iterations: int, hash_rate: int) -> None:
        logger.debug("solve_progress", iterations=iterations, hash_rate=hash_rate)

    solution = solve_challenge(
        args.prefix,
        args.target,
        max_iterations=args.max_iterations,
        progress_interval=settings.solver_progress_interval,
        on_progress=report,
    )

    if args.json:
        _print_json(asdict(solution))
        return 0 if solution.found else 1

    if not solution.found:
        print("Failed to solve challenge", file=sys.stderr)
        return 1

    # Just the nonce on stdout, for piping
    print(solution.nonce)
    print(
        f"Solved in {solution.time_ms}ms ({solution.iterations} iterations)",
        file=sys.stderr,
    )
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    expires_at = args.expires
    if expires_at is None:
        expires_at = int(time.time()) + DEFAULT_VERIFY_WINDOW_SECONDS
        print(
            "Warning: --expires not provided, using now+60s. "
            "For accurate verification, pass the original expiresAt.",
            file=sys.stderr,
        )

    result = verify_challenge(
        prefix=args.prefix,
        nonce=args.nonce,
        target=args.target,
        expires_at=expires_at,
        signature=args.signature,
        secret=settings.challenge_secret,
        require_signature=settings.require_signature,
    )

    if args.json:
        _print_json(result.model_dump(exclude_none=True))
    elif result.valid:
        print("Valid solution")
        print(f"   Hash: {result.hash}")
    else:
        print("Invalid solution")
        print(f"   Reason: {result.reason}")
        if result.hash:
            print(f"   Hash: {result.hash}")

    return 0 if result.valid else 1


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("nohumanallowed.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nohumanallowed",
        description="Anti-human verification for the agentic web",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    challenge = subparsers.add_parser("challenge", help="Create a new challenge")
    challenge.add_argument(
        "--difficulty",
        "-d",
        type=int,
        default=settings.default_difficulty,
        help="Leading zeros required (1-6)",
    )
    challenge.add_argument(
        "--expires",
        "-e",
        type=int,
        default=settings.default_expires_in,
        help="Seconds until the challenge expires",
    )
    challenge.add_argument("--json", action="store_true", help="Output as JSON")
    challenge.set_defaults(func=cmd_challenge)

    solve = subparsers.add_parser("solve", help="Solve a challenge (for agents)")
    solve.add_argument("--prefix", "-p", required=True)
    solve.add_argument("--target", "-t", required=True)
    solve.add_argument("--max-iterations", type=int, default=settings.solver_max_iterations)
    solve.add_argument("--json", action="store_true", help="Output as JSON")
    solve.set_defaults(func=cmd_solve)

    verify = subparsers.add_parser("verify", help="Verify a solution")
    verify.add_argument("--prefix", "-p", required=True)
    verify.add_argument("--nonce", "-n", required=True)
    verify.add_argument("--target", "-t", required=True)
    verify.add_argument(
        "--expires",
        "-e",
        type=int,
        default=None,
        help="expiresAt timestamp from the original challenge",
    )
    verify.add_argument("--signature", default=None)
    verify.add_argument("--json", action="store_true", help="Output as JSON")
    verify.set_defaults(func=cmd_verify)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    setup_logging(stream=sys.stderr)
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
