"""
Errors surfaced by the hcdev command layer.

Every command reports failure by raising one of these. The router in cli.py
turns them into a single ``Error: <message>`` line and exit status 1.
"""

from __future__ import annotations

from typing import Sequence


class HcdevError(Exception):
    """Base class for errors raised by hcdev commands."""

    pass


class UsageError(HcdevError):
    """Bad arguments or flags. Raised before any side effect."""

    pass


class BootstrapError(HcdevError):
    """The service root could not be created or loaded."""

    pass


class StagingError(HcdevError):
    """Copying the dev app into the runtime directory failed."""

    pass


class ScenarioError(HcdevError):
    """A scenario test could not be orchestrated (missing scenario, unknown role...)."""

    pass


class ScriptError(HcdevError):
    """An external helper script exited with a non-zero status."""

    def __init__(self, script: str, returncode: int):
        super().__init__(f"{script} exited with status {returncode}")
        self.script = script
        self.returncode = returncode


class TestFailures(HcdevError):
    """
    All failures of one test run, reported as a single error.

    The message is the individual failure messages joined by newlines.
    """

    __test__ = False  # not a pytest test class

    def __init__(self, failures: Sequence[BaseException]):
        self.failures = list(failures)
        super().__init__("\n".join(str(f) for f in self.failures))
