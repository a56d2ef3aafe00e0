"""
Brute-force proof-of-work solver.

The search walks nonces 0, 1, 2, ... as decimal strings and stops at the first
one whose SHA256(prefix + nonce) starts with the target. The starting point is
never randomized, so the nonce found is fully determined by the prefix.
Expected work is 16**difficulty / 2 hashes.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass

from nohumanallowed.services.crypto_utils import DigestProvider, default_digest

DEFAULT_MAX_ITERATIONS = 10_000_000
DEFAULT_PROGRESS_INTERVAL = 100_000
DEFAULT_YIELD_INTERVAL = 1_000

# Advisory hash rates (hashes/second) for estimates only.
NATIVE_HASH_RATE = 800_000
BROWSER_HASH_RATE = 300_000

ProgressCallback = Callable[[int, int], None | Awaitable[None]]


@dataclass(frozen=True)
class SolveResult:
    found: bool
    iterations: int
    time_ms: int
    hash_rate: int
    nonce: str | None = None
    hash: str | None = None


@dataclass(frozen=True)
class SolveEstimate:
    average_ms: float
    description: str


def calculate_hash_rate(iterations: int, elapsed_seconds: float) -> int:
    """Hashes per second, 0 when no time has elapsed."""
    if elapsed_seconds <= 0:
        return 0
    return round(iterations / elapsed_seconds)


def _checkpoints(max_iterations: int, *intervals: int) -> Iterator[int]:
    """Iteration counts where the search pauses: multiples of each interval, then the end."""
    position = 0
    while position < max_iterations:
        marks = [(position // interval + 1) * interval for interval in intervals if interval > 0]
        position = min([max_iterations, *marks])
        yield position


def _scan(
    prefix: str, target: str, start: int, stop: int, digest: DigestProvider
) -> tuple[str, str] | None:
    for nonce in range(start, stop):
        nonce_str = str(nonce)
        hash_hex = digest.sha256_hex(prefix + nonce_str)
        if hash_hex.startswith(target):
            return nonce_str, hash_hex
    return None


class _Search:
    """Bookkeeping shared by the sync and async solvers."""

    def __init__(self, prefix: str, target: str, progress_interval: int, digest: DigestProvider):
        self.prefix = prefix
        self.target = target
        self.progress_interval = progress_interval
        self.digest = digest
        self.start_time = time.perf_counter()
        self.iterations = 0

    def elapsed(self) -> float:
        return time.perf_counter() - self.start_time

    def advance(self, stop: int) -> tuple[str, str] | None:
        found = _scan(self.prefix, self.target, self.iterations, stop, self.digest)
        if found is not None:
            self.iterations = int(found[0]) + 1
        else:
            self.iterations = stop
        return found

    def at_progress_point(self) -> bool:
        return self.progress_interval > 0 and self.iterations % self.progress_interval == 0

    def hash_rate(self) -> int:
        return calculate_hash_rate(self.iterations, self.elapsed())

    def result(self, found: tuple[str, str] | None) -> SolveResult:
        elapsed = self.elapsed()
        nonce, hash_hex = found if found is not None else (None, None)
        return SolveResult(
            found=found is not None,
            iterations=self.iterations,
            time_ms=int(elapsed * 1000),
            hash_rate=calculate_hash_rate(self.iterations, elapsed),
            nonce=nonce,
            hash=hash_hex,
        )


def solve_challenge(
    prefix: str,
    target: str,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    on_progress: Callable[[int, int], None] | None = None,
    digest: DigestProvider | None = None,
) -> SolveResult:
    """
    Find a nonce such that SHA256(prefix + nonce) starts with target.

    Calls on_progress(iterations, hash_rate) every progress_interval
    iterations. Returns found=False once max_iterations is exhausted.
    """
    search = _Search(prefix, target, progress_interval, digest or default_digest)

    for stop in _checkpoints(max_iterations, progress_interval):
        found = search.advance(stop)
        if found is not None:
            return search.result(found)
        if on_progress is not None and search.at_progress_point():
            on_progress(search.iterations, search.hash_rate())

    return search.result(None)


async def solve_challenge_async(
    prefix: str,
    target: str,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    on_progress: ProgressCallback | None = None,
    digest: DigestProvider | None = None,
    yield_interval: int = DEFAULT_YIELD_INTERVAL,
) -> SolveResult:
    """
    Cooperative variant of solve_challenge.

    Hands control back to the event loop every yield_interval iterations and
    at each progress point, so concurrent searches interleave and task
    cancellation takes effect between batches.
    """
    search = _Search(prefix, target, progress_interval, digest or default_digest)

    for stop in _checkpoints(max_iterations, progress_interval, yield_interval):
        found = search.advance(stop)
        if found is not None:
            return search.result(found)
        if on_progress is not None and search.at_progress_point():
            outcome = on_progress(search.iterations, search.hash_rate())
            if inspect.isawaitable(outcome):
                await outcome
        await asyncio.sleep(0)

    return search.result(None)


def estimate_solve_time(difficulty: int, hash_rate: int = NATIVE_HASH_RATE) -> SolveEstimate:
    """Expected solve time for a difficulty. Advisory only."""
    average_iterations = 16**difficulty / 2
    average_ms = average_iterations / hash_rate * 1000

    if average_ms < 100:
        description = "Nearly instant"
    elif average_ms < 1000:
        description = "Under a second"
    elif average_ms < 10_000:
        description = "A few seconds"
    elif average_ms < 60_000:
        description = "Under a minute"
    else:
        description = "Over a minute"

    return SolveEstimate(average_ms=average_ms, description=description)
