"""
Network scenarios for FTD Host.
"""

from ftd_host.scenarios.network import (
    ALL_SCENARIOS,
    ScenarioReport,
    ScenarioResult,
    list_scenarios,
    run_all_scenarios,
)

__all__ = [
    "ALL_SCENARIOS",
    "ScenarioReport",
    "ScenarioResult",
    "list_scenarios",
    "run_all_scenarios",
]
