"""
External helper scripts.

Steps that are not part of a command's own sequence (finalizing a new app,
the interactive init flow, fanning a scenario out to one process per role)
run as child processes: ``python -m hcdev.scripts.<name> ...``. The caller
gets the exit status back and decides what to do with it.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Optional

APP_INIT = "app_init"
APP_INIT_INTERACTIVE = "app_init_interactive"
TEST_SCENARIO = "test_scenario"


def script_command(script: str, *args: str) -> list[str]:
    return [sys.executable, "-m", f"hcdev.scripts.{script}", *args]


def run_script(script: str, *args: str, cwd: Optional[Path] = None) -> int:
    """
    Run a helper script to completion.

    Args:
        script: module name under hcdev.scripts
        args: command line arguments for the script
        cwd: working directory for the child (default: ours)

    Returns:
        The script's exit status
    """
    result = subprocess.run(script_command(script, *args), cwd=cwd)
    return result.returncode
