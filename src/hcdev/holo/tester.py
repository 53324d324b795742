"""
Tester: runs JSON test files against a chain.

A test file is a list of zome calls with their expected result::

    {"tests": [
        {"convey": "add a post", "zome": "posts", "fn_name": "addPost",
         "input": {"text": "hi"}, "output": "Qm..."},
        {"convey": "bad post", "zome": "posts", "fn_name": "addPost",
         "input": {}, "err": "text required"}
    ]}

``output`` is compared for equality, ``regexp`` is searched in the JSON text
of the result, ``err`` must be a substring of the raised error. Strings in
``input`` may use %dna%, %agent% and %key% placeholders.

Stand-alone files run against a freshly generated chain each. A scenario is a
directory with one file per role and an optional ``_config.json``; cases with
a ``time`` (milliseconds) wait until that offset from the start of the run.
"""
from __future__ import annotations

import json
import re
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from ..telemetry import get_logger
from .errors import HoloError

if TYPE_CHECKING:
    from .chain import Holochain

logger = get_logger(__name__)

SCENARIO_CONFIG_FILE = "_config.json"


class CaseFailure(HoloError):
    """One test case that did not produce what it expected."""

    def __init__(self, label: str, expected: str, got: str):
        super().__init__(f"Test: {label}\n  Expected: {expected}\n  Got: {got}")
        self.label = label


class CallCase(BaseModel):
    convey: str = ""
    zome: str
    fn_name: str
    input: Any = None
    output: Any = None
    err: Optional[str] = None
    regexp: Optional[str] = None
    time: int = 0


class CaseFile(BaseModel):
    tests: List[CallCase] = Field(default_factory=list)


class ScenarioConfig(BaseModel):
    duration: float = 0.0


def load_case_file(path: Path) -> CaseFile:
    """Parse a test file. A bare list of cases is accepted too."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise HoloError(f"unable to read test file {path.name}: {e}") from e
    if isinstance(data, list):
        data = {"tests": data}
    try:
        return CaseFile.model_validate(data)
    except ValidationError as e:
        raise HoloError(f"invalid test file {path.name}: {e}") from e


def _substitute(value: Any, chain: "Holochain") -> Any:
    if isinstance(value, str):
        return (
            value.replace("%dna%", chain.dna_hash())
            .replace("%agent%", chain.agent.identity)
            .replace("%key%", chain.agent.public_key)
        )
    if isinstance(value, list):
        return [_substitute(v, chain) for v in value]
    if isinstance(value, dict):
        return {k: _substitute(v, chain) for k, v in value.items()}
    return value


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value, sort_keys=True)


def run_case(chain: "Holochain", case: CallCase, label: str) -> Optional[Exception]:
    """Run one case. Returns its failure, or None if it passed."""
    if case.convey:
        label = f"{label} ({case.convey})"

    try:
        result = chain.call(case.zome, case.fn_name, _substitute(case.input, chain))
    except Exception as e:
        # zome code is user code: any error it raises is a test outcome
        if case.err is not None and case.err in str(e):
            return None
        expected = f"error containing {case.err!r}" if case.err is not None else _as_text(case.output)
        return CaseFailure(label, expected, f"error: {e}")

    if case.err is not None:
        return CaseFailure(label, f"error containing {case.err!r}", _as_text(result))
    if case.regexp is not None:
        if re.search(case.regexp, _as_text(result)) is None:
            return CaseFailure(label, f"match for /{case.regexp}/", _as_text(result))
        return None
    if result != case.output:
        return CaseFailure(label, _as_text(case.output), _as_text(result))
    return None


def _fresh_chain(chain: "Holochain") -> None:
    chain.reset()
    chain.gen_chain()
    chain.activate()


def run_file(chain: "Holochain", path: Path) -> List[Exception]:
    """Run every case of one stand-alone test file on a fresh chain."""
    try:
        case_file = load_case_file(path)
        _fresh_chain(chain)
    except HoloError as e:
        return [e]

    failures: List[Exception] = []
    for i, case in enumerate(case_file.tests):
        failure = run_case(chain, case, f"{path.name}:{i}")
        if failure is not None:
            failures.append(failure)
    logger.debug("%s: %d cases, %d failed", path.name, len(case_file.tests), len(failures))
    return failures


def run_all(chain: "Holochain") -> List[Exception]:
    """Run all stand-alone test files in the chain's test directory, in name order."""
    test_dir = chain.test_path()
    if not test_dir.is_dir():
        return []
    failures: List[Exception] = []
    for path in sorted(test_dir.glob("*.json")):
        failures.extend(run_file(chain, path))
    return failures


def run_one(chain: "Holochain", name: str) -> List[Exception]:
    """Run the stand-alone test file named ``<name>.json``."""
    path = chain.test_path() / f"{name}.json"
    if not path.is_file():
        return [HoloError(f"test file not found: {path.name}")]
    return run_file(chain, path)


def load_scenario_config(scenario_dir: Path) -> ScenarioConfig:
    path = scenario_dir / SCENARIO_CONFIG_FILE
    if not path.is_file():
        return ScenarioConfig()
    try:
        return ScenarioConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        raise HoloError(f"invalid scenario config {path}: {e}") from e


def scenario_roles(scenario_dir: Path) -> List[str]:
    """Role names of a scenario: its json files other than the config."""
    return sorted(p.stem for p in scenario_dir.glob("*.json") if p.name != SCENARIO_CONFIG_FILE)


def run_scenario(
    chain: "Holochain",
    scenario_dir: Path,
    role: str,
) -> Tuple[Optional[Exception], List[Exception]]:
    """
    Run one role of a scenario.

    Returns:
        (err, failures): err is set when the scenario itself cannot run
        (missing directory, unknown role, bad config or test file), in which
        case no case runs; failures lists the cases that did not pass
    """
    if not scenario_dir.is_dir():
        return HoloError(f"scenario not found: {scenario_dir.name}"), []

    role_path = scenario_dir / f"{role}.json"
    if not role_path.is_file():
        roles = ", ".join(scenario_roles(scenario_dir)) or "none"
        return HoloError(f"unknown role {role!r} in scenario {scenario_dir.name} (roles: {roles})"), []

    try:
        config = load_scenario_config(scenario_dir)
        case_file = load_case_file(role_path)
        _fresh_chain(chain)
    except HoloError as e:
        return e, []

    start = time.monotonic()
    failures: List[Exception] = []
    for i, case in sorted(enumerate(case_file.tests), key=lambda pair: pair[1].time):
        delay = start + case.time / 1000.0 - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        failure = run_case(chain, case, f"{scenario_dir.name}/{role_path.name}:{i}")
        if failure is not None:
            failures.append(failure)

    remaining = start + config.duration - time.monotonic()
    if remaining > 0:
        time.sleep(remaining)
    return None, failures
