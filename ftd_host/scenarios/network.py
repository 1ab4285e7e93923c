"""
Thread network scenarios for a single FTD.

Each scenario drives the device through a short integration sequence
(form a network, look up the OMR address, stop the radio) and records every
step in a report.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ftd_host.commands import Session

from ftd_host.cli_protocol import CliError, CliProtocolError
from ftd_host.dataset import ActiveOperationalDataset
from ftd_host.waiting import WaitTimeoutError

logger = logging.getLogger(__name__)

ATTACHED_STATES = ("leader", "router", "child")


class ScenarioResult(Enum):
    """Scenario result."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class StepResult:
    """Result of a single scenario step."""

    name: str
    passed: bool
    message: str = ""
    details: dict = field(default_factory=dict)


@dataclass
class ScenarioReport:
    """Scenario execution report."""

    name: str
    description: str
    result: ScenarioResult
    steps: list[StepResult] = field(default_factory=list)
    duration_s: float = 0.0

    def add_step(self, name: str, passed: bool, message: str = "", **details) -> None:
        """Add step result to report."""
        self.steps.append(StepResult(name, passed, message, details))

    @property
    def passed_count(self) -> int:
        """Count of passed steps."""
        return sum(1 for s in self.steps if s.passed)

    @property
    def failed_count(self) -> int:
        """Count of failed steps."""
        return sum(1 for s in self.steps if not s.passed)


class NetworkScenario(ABC):
    """Base class for network scenarios."""

    name: str = "Unnamed Scenario"
    description: str = ""

    def __init__(
        self,
        session: "Session",
        dataset: ActiveOperationalDataset,
        timeout_s: float = 30.0,
    ):
        """Initialize scenario with session and the network to use."""
        self.session = session
        self.dataset = dataset
        self.timeout_s = timeout_s
        self.report = ScenarioReport(
            name=self.name,
            description=self.description,
            result=ScenarioResult.PASSED,
        )

    def run(self) -> ScenarioReport:
        """Execute the scenario and return report."""
        start_time = time.time()
        logger.info(f"Running scenario: {self.name}")

        try:
            self.execute()
        except WaitTimeoutError as e:
            self._log_step("Wait for state", False, str(e))
        except CliProtocolError as e:
            self._log_step("Device command", False, f"Protocol error: {e}")
            self.report.result = ScenarioResult.ERROR
        except CliError as e:
            self._log_step("Device link", False, f"Link error: {e}")
            self.report.result = ScenarioResult.ERROR

        self.report.duration_s = time.time() - start_time
        return self.report

    @abstractmethod
    def execute(self) -> None:
        """Scenario body. Record steps with _log_step()."""
        pass

    def _log_step(self, name: str, passed: bool, message: str = "", **details) -> None:
        """Log and record a scenario step."""
        status = "PASS" if passed else "FAIL"
        logger.info(f"  [{status}] {name}: {message}")
        self.report.add_step(name, passed, message, **details)
        if not passed and self.report.result == ScenarioResult.PASSED:
            self.report.result = ScenarioResult.FAILED


class Scenario1_FormNetwork(NetworkScenario):
    """
    Scenario 1: Form Network

    Tests:
    1. Factory reset and wait for "disabled"
    2. Join the configured network
    3. Wait until the device is attached (leader, router or child)
    """

    name = "Form Network"
    description = "Factory reset, join the network and wait until attached"

    def execute(self) -> None:
        self.session.factory_reset()
        self.session.wait_for_state_any_of(["disabled"], self.timeout_s)
        self._log_step("Factory reset", True, "Device back in disabled state")

        self.session.join_network(self.dataset)
        self._log_step(
            "Join network",
            True,
            f"Dataset applied for {self.dataset.network_name!r}",
            channel=self.dataset.channel,
        )

        self.session.wait_for_state_any_of(ATTACHED_STATES, self.timeout_s)
        state = self.session.get_state()
        self._log_step("Attach", True, f"Device attached as {state}", state=state)


class Scenario2_OmrAddress(NetworkScenario):
    """
    Scenario 2: OMR Address

    Tests:
    1. Device is attached
    2. Report the first off-mesh-routable address (skipped if none)
    """

    name = "OMR Address"
    description = "Look up an off-mesh-routable address"

    def execute(self) -> None:
        state = self.session.get_state()
        attached = state in ATTACHED_STATES
        self._log_step("Attached", attached, f"state={state}")
        if not attached:
            return

        address = self.session.get_omr_address(self.dataset)
        if address is None:
            self._log_step("OMR address", True, "No OMR prefix on this network")
            self.report.result = ScenarioResult.SKIPPED
            return

        self._log_step("OMR address", True, f"Found {address}", address=str(address))


class Scenario3_StopRadio(NetworkScenario):
    """
    Scenario 3: Stop Radio

    Tests:
    1. Stop the Thread radio and bring the interface down
    2. Wait for "disabled"
    """

    name = "Stop Radio"
    description = "Stop the Thread radio and wait for disabled"

    def execute(self) -> None:
        self.session.stop_thread_radio()
        self._log_step("Stop radio", True, "thread stop / ifconfig down accepted")

        self.session.wait_for_state_any_of(["disabled"], self.timeout_s)
        self._log_step("Disabled", True, "Device in disabled state")


ALL_SCENARIOS = [
    Scenario1_FormNetwork,
    Scenario2_OmrAddress,
    Scenario3_StopRadio,
]


def run_all_scenarios(
    session: "Session", dataset: ActiveOperationalDataset, timeout_s: float = 30.0
) -> list[ScenarioReport]:
    """
    Run all network scenarios in order.

    Args:
        session: Active FTD Host session.
        dataset: Network to form.
        timeout_s: Timeout for each state wait.

    Returns:
        List of scenario reports.
    """
    reports = []

    for scenario_class in ALL_SCENARIOS:
        scenario = scenario_class(session, dataset, timeout_s)
        report = scenario.run()
        reports.append(report)

        logger.info(
            f"Scenario '{report.name}': {report.result.value.upper()} "
            f"({report.passed_count}/{len(report.steps)} steps passed, "
            f"{report.duration_s:.2f}s)"
        )

    return reports


def list_scenarios() -> list[dict]:
    """
    List available scenarios.

    Returns:
        List of scenario info dictionaries.
    """
    return [{"name": s.name, "description": s.description} for s in ALL_SCENARIOS]


def print_report(report: ScenarioReport) -> None:
    """Print formatted scenario report."""
    print(f"\n{'=' * 60}")
    print(f"Scenario: {report.name}")
    print(f"Description: {report.description}")
    print(f"Result: {report.result.value.upper()}")
    print(f"Duration: {report.duration_s:.2f}s")
    print(f"Steps: {report.passed_count}/{len(report.steps)} passed")
    print("-" * 60)

    for step in report.steps:
        status = "PASS" if step.passed else "FAIL"
        print(f"  [{status}] {step.name}")
        if step.message:
            print(f"         {step.message}")

    print("=" * 60)


def print_summary(reports: list[ScenarioReport]) -> None:
    """Print summary of all scenario results."""
    print(f"\n{'=' * 60}")
    print("NETWORK SCENARIO SUMMARY")
    print("=" * 60)

    failed = sum(1 for r in reports if r.result == ScenarioResult.FAILED)
    errors = sum(1 for r in reports if r.result == ScenarioResult.ERROR)
    passed = len(reports) - failed - errors

    for report in reports:
        status = report.result.value.upper()
        steps = f"{report.passed_count}/{len(report.steps)}"
        print(f"  [{status:7}] {report.name}: {steps} steps")

    print("-" * 60)
    print(f"Total: {passed} passed/skipped, {failed} failed, {errors} errors")
    print(f"Overall: {'PASSED' if failed == 0 and errors == 0 else 'FAILED'}")
    print("=" * 60)
