"""Simple benchmarking harness for sessionlog.

Measures write throughput (lines/sec) and approximate memory growth for
root-level logging and for session logging, with the synchronous writer or
the background writer. Console output is silenced by raising the console
threshold; only file writes are timed.
"""
from __future__ import annotations

import argparse
import tempfile
import time
import tracemalloc
from typing import Iterable, List

from sessionlog import Defaults, Level, Registry


def synthetic_lines(n: int) -> Iterable[str]:
    base = [
        "user login success user=123",
        "db connection slow latency=120ms host=db-primary",
        "payment declined code=402 user=9912 amount=1999",
        "cache hit key=abcd1234",
        "cache miss key=efgh5678",
    ]
    for i in range(n):
        yield base[i % len(base)] + f" seq={i}"


def run(lines: List[str], session_size: int = 0, background: bool = False) -> float:
    """Write ``lines`` and report throughput; returns lines/sec.

    With ``session_size`` > 0 the lines are grouped into root sessions of that
    many messages each.
    """
    with tempfile.TemporaryDirectory() as d:
        registry = Registry(Defaults(directory=d, log_level=Level.FATAL, write_level=Level.DEBUG, background=background))
        logger = registry.get_or_create("bench")

        tracemalloc.start()
        start = time.perf_counter()
        if session_size > 0:
            for offset in range(0, len(lines), session_size):
                with logger.session(f"batch-{offset}") as s:
                    for line in lines[offset : offset + session_size]:
                        s.info(line)
        else:
            for line in lines:
                logger.info(line)
        registry.close()
        elapsed = time.perf_counter() - start
        current, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()

    mode = "background" if background else "sync"
    shape = f"sessions of {session_size}" if session_size > 0 else "root"
    lps = len(lines) / elapsed if elapsed else float("inf")
    print(f"Processed {len(lines)} lines in {elapsed:.3f}s -> {lps:,.0f} lines/sec ({mode}, {shape})")
    print(f"Current mem ~{current/1024/1024:.2f} MB; Peak mem ~{peak/1024/1024:.2f} MB")
    return lps


def main() -> int:
    ap = argparse.ArgumentParser(description="Benchmark sessionlog write throughput")
    ap.add_argument("--lines", type=int, default=20000, help="Synthetic lines to write")
    ap.add_argument("--session-size", type=int, default=0, help="Group lines into sessions of this size (0: root logging)")
    ap.add_argument("--background", action="store_true", help="Use the background writer")
    args = ap.parse_args()
    run(list(synthetic_lines(args.lines)), args.session_size, args.background)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual use
    raise SystemExit(main())
