"""
Test orchestrator: the ``test`` and ``scenario`` commands.

``test`` picks its mode from the number of arguments:

    hcdev test                   every stand-alone test file
    hcdev test <prefix>          the stand-alone test file <prefix>.json
    hcdev test <scenario> <role> one role of a scenario

and always runs on a freshly staged chain. Every selected test runs; the
failures are reported together as one TestFailures error.

``scenario`` runs all roles of a scenario, each in its own process.
"""

from __future__ import annotations

from typing import Callable, List, Sequence

from . import holo, scripts
from .config import DevConfig
from .errors import ScenarioError, ScriptError, TestFailures, UsageError
from .staging import stage

TEST_USAGE = (
    "test: expected 0 args (run all stand-alone tests), "
    "1 arg (a single stand-alone test) or 2 args (scenario and role)"
)


def check_test_args(args: Sequence[str]) -> None:
    """Reject argument counts no test mode accepts."""
    if len(args) > 2:
        raise UsageError(TEST_USAGE)


def run_tests(chain: holo.Holochain, args: Sequence[str]) -> List[Exception]:
    """
    Run the tests selected by args on a staged chain.

    Returns:
        The failures, in the order the tests ran (empty on success)

    Raises:
        ScenarioError: the scenario could not be run at all
        UsageError: more than two arguments
    """
    if len(args) == 2:
        scenario, role = args
        err, failures = chain.test_scenario(chain.test_path() / scenario, role)
        if err is not None:
            raise ScenarioError(str(err)) from err
        return failures
    if len(args) == 1:
        return chain.test_one(args[0])
    if len(args) == 0:
        return chain.test()
    raise UsageError(TEST_USAGE)


def run_test_command(
    config: DevConfig,
    service: holo.Service,
    args: Sequence[str],
    output_sink: Callable[[str], None] = print,
) -> None:
    """
    Stage the app and run the selected tests.

    Raises:
        UsageError: bad argument count (nothing is staged)
        StagingError: staging failed
        ScenarioError: the scenario could not be run
        TestFailures: one or more tests failed
    """
    check_test_args(args)
    chain = stage(config, service, output_sink)
    try:
        failures = run_tests(chain, args)
    finally:
        chain.close()
    if failures:
        raise TestFailures(failures)


def run_scenario_command(
    config: DevConfig,
    args: Sequence[str],
    run_script: Callable[..., int] = scripts.run_script,
) -> None:
    """
    Run every role of a scenario, one process per role.

    Raises:
        UsageError: app not initialized, or not exactly one scenario name
        ScriptError: the scenario runner reported a failure
    """
    if not config.app_initialized:
        raise UsageError("please initialize this app with 'hcdev init'")
    if len(args) != 1:
        raise UsageError("missing scenario name argument")

    status = run_script(scripts.TEST_SCENARIO, str(config.dev_path), str(config.root_path), args[0])
    if status != 0:
        raise ScriptError(scripts.TEST_SCENARIO, status)
