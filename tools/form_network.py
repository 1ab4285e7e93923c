#!/usr/bin/env python3
"""
Network scenario runner.

Forms the configured Thread network on one device and prints the reports.
"""

import argparse
import logging
import sys
from pathlib import Path

from ftd_host.cli_protocol import CliError
from ftd_host.commands import Session
from ftd_host.config import load_config
from ftd_host.scenarios.network import ScenarioResult, print_report, print_summary, run_all_scenarios


def main() -> int:
    """Main entry point for ftd-form tool."""
    parser = argparse.ArgumentParser(description="Run network scenarios against one FTD")
    parser.add_argument("--config", type=Path, help="Configuration file (TOML)")
    parser.add_argument("--verbose", action="store_true", help="Log CLI traffic")

    args = parser.parse_args()
    config = load_config(args.config)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.logging.level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)-8s] %(name)s | %(message)s",
    )

    try:
        with Session.from_config(config) as session:
            reports = run_all_scenarios(
                session, config.network.to_dataset(), config.session.wait_timeout_s
            )
    except (CliError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for report in reports:
        print_report(report)
    print_summary(reports)

    ok = all(r.result in (ScenarioResult.PASSED, ScenarioResult.SKIPPED) for r in reports)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
