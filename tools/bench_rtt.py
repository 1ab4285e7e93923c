#!/usr/bin/env python3
"""
Round-trip time (RTT) benchmark tool.

Measures latency of the "state" command on one device.
"""

import argparse
import statistics
import sys
import time

from ftd_host.cli_protocol import CliError
from ftd_host.commands import Session


def main() -> int:
    """Main entry point for ftd-bench tool."""
    parser = argparse.ArgumentParser(description="Benchmark CLI round-trip time")
    parser.add_argument("--node-id", type=int, default=1, help="Simulation node ID")
    parser.add_argument("--binary", default="ot-cli-ftd", help="ot-cli-ftd executable")
    parser.add_argument("--port", help="Serial port (use a board instead of the simulation)")
    parser.add_argument("--baud", type=int, default=115200, help="Baud rate")
    parser.add_argument("--count", type=int, default=100, help="Number of state queries")

    args = parser.parse_args()

    try:
        if args.port:
            session = Session.open_serial(args.port, args.baud)
        else:
            session = Session.open_simulation(args.node_id, binary=args.binary)

        with session:
            print(f"Benchmarking {args.count} state queries...")

            rtts = []
            for i in range(args.count):
                start = time.perf_counter()
                session.get_state()
                rtts.append((time.perf_counter() - start) * 1000)  # ms

                if (i + 1) % 10 == 0:
                    print(f"  {i + 1}/{args.count} completed...")

            print()
            print("Results:")
            print(f"  Mean RTT: {statistics.mean(rtts):.3f} ms")
            print(f"  Median RTT: {statistics.median(rtts):.3f} ms")
            print(f"  Min RTT: {min(rtts):.3f} ms")
            print(f"  Max RTT: {max(rtts):.3f} ms")
            if len(rtts) > 1:
                print(f"  Std Dev: {statistics.stdev(rtts):.3f} ms")

            sorted_rtts = sorted(rtts)
            print(f"  P95: {sorted_rtts[int(len(sorted_rtts) * 0.95)]:.3f} ms")
            print(f"  Stats: {session.stats}")

    except (CliError, AssertionError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
