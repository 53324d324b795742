"""
App initializer: the ``init`` command.

An app is created by exactly one strategy:

    Interactive        hand the whole flow to the interactive init script
    CloneFrom(path)    copy an existing app directory
    ScaffoldFrom(path) build from a scaffold file (not implemented yet)
    DefaultTemplate    empty dna/, ui/ and test/ directories

Clone and default then finalize the app (the .hc control directory) with the
app_init script, run from inside the new app directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from . import holo, scripts
from .config import DevConfig
from .errors import ScriptError, UsageError


@dataclass(frozen=True)
class Interactive:
    pass


@dataclass(frozen=True)
class CloneFrom:
    path: Path


@dataclass(frozen=True)
class ScaffoldFrom:
    path: Path


@dataclass(frozen=True)
class DefaultTemplate:
    pass


InitStrategy = Union[Interactive, CloneFrom, ScaffoldFrom, DefaultTemplate]

ScriptRunner = Callable[..., int]


def select_strategy(interactive: bool, clone: Optional[str], scaffold: Optional[str]) -> InitStrategy:
    """
    Decide the init strategy from the command line flags.

    A flag counts as set whenever it is given, whatever its value.

    Raises:
        UsageError: if more than one strategy is requested
    """
    if sum([interactive, clone is not None, scaffold is not None]) > 1:
        raise UsageError("options are mutually exclusive, please choose just one.")
    if interactive:
        return Interactive()
    if clone is not None:
        return CloneFrom(Path(clone))
    if scaffold is not None:
        return ScaffoldFrom(Path(scaffold))
    return DefaultTemplate()


def check_init_args(config: DevConfig, names: Sequence[str]) -> None:
    """Refuse nested apps and anything but a single app name."""
    if config.app_initialized:
        raise UsageError("current directory is an initialized app, apps shouldn't be nested")
    if len(names) != 1:
        raise UsageError("init: expecting app name as single argument")


def create_template(app_path: Path) -> None:
    """Create the app directory with its dna, ui and test directories."""
    app_path.mkdir(parents=True, exist_ok=True)
    for sub in (holo.CHAIN_DNA_DIR, holo.CHAIN_UI_DIR, holo.CHAIN_TEST_DIR):
        (app_path / sub).mkdir(parents=True, exist_ok=True)


def _clone_app(config: DevConfig, service: holo.Service, source: Path, output_sink: Callable[[str], None]) -> None:
    if not source.exists():
        raise FileNotFoundError(f"no such file or directory: {source}")
    if not source.is_dir():
        raise UsageError("expecting a directory to clone from")

    # the dev agent stands in for the app's future author
    agent = holo.load_agent(config.root_path)
    service.clone(source, config.dev_path, agent, new_chain=False, save_agent=False)
    output_sink(f"cloning {config.name} from {source}")


def _scaffold_app(source: Path, output_sink: Callable[[str], None]) -> None:
    if not source.exists():
        raise FileNotFoundError(f"no such file or directory: {source}")
    if not source.is_file():
        raise UsageError("expecting a scaffold file")
    output_sink(f"initializing from scaffold:{source}")
    output_sink("WARNING: NOT IMPLEMENTED")


def init_app(
    config: DevConfig,
    service: holo.Service,
    names: Sequence[str],
    strategy: InitStrategy,
    output_sink: Callable[[str], None] = print,
    run_script: ScriptRunner = scripts.run_script,
) -> int:
    """
    Create a new app named ``names[0]`` under the dev path.

    Args:
        config: invocation settings; its dev path is the parent directory
        service: the dev service (used to clone)
        names: positional arguments of the command, exactly one expected
        strategy: how to build the app
        output_sink: where progress messages go
        run_script: runs a helper script and returns its status

    Returns:
        0 on success

    Raises:
        UsageError: nested app, wrong argument count, bad clone/scaffold source
        ScriptError: the interactive or finalize script failed
    """
    check_init_args(config, names)

    name = names[0]
    config = config.with_dev_path(config.dev_path / name)

    if isinstance(strategy, Interactive):
        status = run_script(scripts.APP_INIT_INTERACTIVE, str(config.dev_path))
        if status != 0:
            raise ScriptError(scripts.APP_INIT_INTERACTIVE, status)
        return 0

    if isinstance(strategy, ScaffoldFrom):
        _scaffold_app(strategy.path, output_sink)
        return 0

    if isinstance(strategy, CloneFrom):
        _clone_app(config, service, strategy.path, output_sink)
    else:
        create_template(config.dev_path)
        output_sink("initializing empty application template")

    os.chdir(config.dev_path)
    status = run_script(scripts.APP_INIT, name, name)
    if status != 0:
        raise ScriptError(scripts.APP_INIT, status)
    return 0
