#!/usr/bin/env python3
"""Stand-in for a real game server, driven line-by-line over stdin.

Used to exercise ``supervisor.py`` without running the real thing:

    python -u mock_server.py

Every received line is echoed back.  ``stop`` or ``/stop`` makes the server
announce that it is stopping, wait two seconds and exit with status 0.
"""

import argparse
import logging
import math
import sys
import time
from typing import Callable, TextIO

logger = logging.getLogger("mock_server")

PREFIX = "[Server]"
STOP_TOKENS = frozenset({"stop", "/stop"})
STOP_DELAY_SECONDS = 2.0


def is_stop_token(text: str) -> bool:
    """Exact, case-sensitive full-line match against the stop tokens."""

    return text in STOP_TOKENS


def _emit(stdout: TextIO, message: str) -> None:
    print(f"{PREFIX} {message}", file=stdout, flush=True)


def _finish_delay(stop_delay: float, sleep: Callable[[float], None]) -> None:
    # The stop delay always runs to completion; interrupts only get logged.
    deadline = time.monotonic() + stop_delay
    remaining = stop_delay
    while remaining > 0:
        try:
            sleep(remaining)
            return
        except KeyboardInterrupt:
            logger.warning("interrupt during stop delay ignored")
            remaining = deadline - time.monotonic()


def serve(
    stdin: TextIO,
    stdout: TextIO,
    *,
    stop_delay: float = STOP_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Run the echo loop until a stop token or end of input.

    Returns ``True`` when a stop token ended the loop (after the stop delay has
    elapsed) and ``False`` when the input stream ran dry.
    """

    _emit(stdout, "Starting mock server...")
    _emit(stdout, "Done loading.")

    for line in stdin:
        text = line.rstrip("\n")
        _emit(stdout, f"Received: {text}")
        if is_stop_token(text):
            logger.info("stop token %r received, exiting in %.1fs", text, stop_delay)
            _emit(stdout, "Stopping...")
            _finish_delay(stop_delay, sleep)
            return True

    logger.info("input closed without a stop token")
    return False


def delay_seconds(value: str) -> float:
    """argparse type for ``--stop-delay``: a finite, non-negative number."""

    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid delay: {value!r}")
    if not math.isfinite(seconds) or seconds < 0:
        raise argparse.ArgumentTypeError(f"delay must be a finite number >= 0, got {value!r}")
    return seconds


def main() -> None:
    parser = argparse.ArgumentParser(description="Mock server that echoes stdin until told to stop")
    parser.add_argument(
        "--stop-delay",
        type=delay_seconds,
        default=STOP_DELAY_SECONDS,
        help="Seconds to wait after a stop token before exiting (test harness override)",
    )
    parser.add_argument("--log-level", default="WARNING", help="Diagnostics level (written to stderr)")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    # Undecodable bytes are echoed back unchanged instead of aborting the loop.
    sys.stdin.reconfigure(errors="surrogateescape")
    sys.stdout.reconfigure(errors="surrogateescape")

    try:
        stopped = serve(sys.stdin, sys.stdout, stop_delay=args.stop_delay)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return
    if stopped:
        raise SystemExit(0)


if __name__ == "__main__":
    main()
