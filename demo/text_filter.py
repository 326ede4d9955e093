#!/usr/bin/env python3
"""Log file text filtering demo.

Writes a small application log into a temporary directory, then filters,
rewrites and counts it with shell streams.

Usage:
    python text_filter.py
"""

import os
import random
import sys

# Add parent directory to path for local development
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shellstream import (
    decimal,
    digit,
    grep,
    input,
    limit,
    mktempdir,
    output,
    plus,
    sed,
    select,
    stdout,
    stream,
    text,
    time,
)

LEVELS = ["INFO"] * 14 + ["WARN"] * 4 + ["ERROR"] * 2
COMPONENTS = ["auth", "cart", "checkout", "search"]


def generate_log(n):
    for i in range(n):
        level = random.choice(LEVELS)
        component = random.choice(COMPONENTS)
        millis = random.randint(1, 2000)
        yield f"{i:05d} {level} [{component}] request took {millis}ms"


with mktempdir(prefix="shellstream-demo-") as scratch:
    log = os.path.join(scratch, "app.log")
    output(log, select(list(generate_log(500))))

    print("=== Text Filtering Demo ===")
    print()
    print("Source data (first 5 lines):")
    print("-" * 70)
    stdout(limit(5, input(log)))
    print()

    print("=== ERROR entries ===")
    errors, elapsed = time(lambda: grep(text("ERROR"), input(log)).run())
    for row in errors[:10]:
        print(row)
    print(f"\nFound {len(errors)} ERROR entries in {elapsed:.3f}s")

    print()
    print("=== All issues (ERROR|WARN), durations masked ===")
    issues = grep(text("ERROR") | "WARN", input(log))
    masked = sed(plus(digit).then("ms", lambda _, unit: "?" + unit), issues)
    stdout(limit(5, masked))

    print()
    print("=== Slow requests (>= 1500ms) ===")
    duration = decimal.then("ms", lambda millis, _: millis)
    slow = input(log).filter(lambda line: max(duration.inside(line)) >= 1500)
    print(f"{len(slow.run())} slow requests")

    print()
    print("=== Entries per component (via sort | uniq -c) ===")
    components = input(log).map(lambda line: line.split()[2])
    stdout(stream("sort | uniq -c", components))
