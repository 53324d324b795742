"""
hcdev: the holochain dev command line tool.

Turns an app source directory into a runnable chain instance and drives it
through init, test and serve.
"""
from .config import DevConfig
from .errors import (
    BootstrapError,
    HcdevError,
    ScenarioError,
    ScriptError,
    StagingError,
    TestFailures,
    UsageError,
)

__version__ = "0.1.0"

__all__ = [
    "DevConfig",
    "HcdevError",
    "UsageError",
    "BootstrapError",
    "StagingError",
    "ScenarioError",
    "TestFailures",
    "ScriptError",
    "__version__",
]
