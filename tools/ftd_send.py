#!/usr/bin/env python3
"""
Raw CLI command sender tool.

Sends one OpenThread CLI command and prints the response lines.
"""

import argparse
import sys

from ftd_host.cli_protocol import CliError, CliProtocolError
from ftd_host.commands import Session


def main() -> int:
    """Main entry point for ftd-send tool."""
    parser = argparse.ArgumentParser(description="Send a raw OpenThread CLI command")
    parser.add_argument("--node-id", type=int, default=1, help="Simulation node ID")
    parser.add_argument("--binary", default="ot-cli-ftd", help="ot-cli-ftd executable")
    parser.add_argument("--port", help="Serial port (use a board instead of the simulation)")
    parser.add_argument("--baud", type=int, default=115200, help="Baud rate")
    parser.add_argument("command", nargs="+", help="CLI command, e.g. 'ipaddr'")

    args = parser.parse_args()
    command = " ".join(args.command)

    try:
        if args.port:
            session = Session.open_serial(args.port, args.baud)
        else:
            session = Session.open_simulation(args.node_id, binary=args.binary)

        with session:
            for line in session.execute_command(command):
                print(line)

    except CliProtocolError as e:
        print(f"Device error: {e.detail or e}", file=sys.stderr)
        return 2
    except (CliError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
