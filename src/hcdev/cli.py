"""
hcdev: holochain dev command line.

Usage:
    hcdev init <name> [--interactive | --clone <path> | --scaffold <path>]
    hcdev test [<prefix> | <scenario> <role>]
    hcdev scenario <scenario>
    hcdev web [<port>]                  # aliases: serve, w

Global flags:
    --debug             debug logging (sets DEBUG=1, inherited by child scripts)
    --path PATH         app source directory (default: current directory)
    --execpath PATH     service root (default: $HOLOPATH, else ~/.holochaindev)
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Callable, Dict, List, Optional, Tuple

from . import __version__, holo
from .bootstrap import ServiceRoot, ensure_service
from .config import DEFAULT_AGENT_IDENTITY, DevConfig, build_config
from .errors import HcdevError
from .initializer import check_init_args, init_app, select_strategy
from .serve import serve_chain
from .telemetry import get_logger
from .testing import run_scenario_command, run_test_command

logger = get_logger(__name__)

COMMAND_ALIASES = {
    "i": "init",
    "t": "test",
    "s": "scenario",
    "serve": "web",
    "w": "web",
}


# =============================================================================
# Pre-dispatch
# =============================================================================

def prepare(args: argparse.Namespace) -> Tuple[DevConfig, ServiceRoot]:
    """
    Everything that runs before a command, in this order:

    1. apply --debug (DEBUG=1 in the environment)
    2. initialize the runtime
    3. resolve the dev path and probe it for an initialized app
    4. resolve the service root
    5. create or load the service root

    Any failure here aborts the invocation before command logic runs.
    """
    if args.debug:
        os.environ["DEBUG"] = "1"

    holo.initialize()

    config = build_config(args.path, args.execpath)
    logger.debug("dev path %s (app initialized: %s)", config.dev_path, config.app_initialized)
    logger.debug("service root %s", config.root_path)

    root = ensure_service(config.root_path, DEFAULT_AGENT_IDENTITY)
    return config, root


# =============================================================================
# Commands
# =============================================================================

def cmd_init(args: argparse.Namespace, config: DevConfig, root: ServiceRoot) -> int:
    """Create a new app under the dev path."""
    check_init_args(config, args.names)
    strategy = select_strategy(args.interactive, args.clone, args.scaffold)
    return init_app(config, root.service, args.names, strategy)


def cmd_test(args: argparse.Namespace, config: DevConfig, root: ServiceRoot) -> int:
    """Stage the app and run its tests."""
    run_test_command(config, root.service, args.args)
    return 0


def cmd_scenario(args: argparse.Namespace, config: DevConfig, root: ServiceRoot) -> int:
    """Run a scenario, one process per role."""
    run_scenario_command(config, args.args)
    return 0


def cmd_web(args: argparse.Namespace, config: DevConfig, root: ServiceRoot) -> int:
    """Stage, activate and serve the app. Blocks."""
    serve_chain(config, root.service, args.args)
    return 0


COMMANDS: Dict[str, Callable[..., int]] = {
    "init": cmd_init,
    "test": cmd_test,
    "scenario": cmd_scenario,
    "web": cmd_web,
}


# =============================================================================
# Parser
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hcdev",
        description="holochain dev command line tool",
    )
    parser.add_argument("--debug", action="store_true", help="Debugging output")
    parser.add_argument("--execpath", help="Holochain dev service root (default: $HOLOPATH or ~/.holochaindev)")
    parser.add_argument("--path", help="Path to the app source (default: current directory)")
    parser.add_argument(
        "--version", action="version",
        version=f"%(prog)s {__version__} (holochain {holo.VERSION_STR})",
    )
    subparsers = parser.add_subparsers(dest="command")

    # init command
    init_parser = subparsers.add_parser(
        "init", aliases=["i"],
        help="Initialize a new holochain app in a sub-directory of the current directory",
    )
    init_parser.add_argument(
        "--interactive", action="store_true",
        help="Ask questions and build the app from the answers",
    )
    init_parser.add_argument("--clone", metavar="PATH", help="Copy the app from an existing app directory")
    init_parser.add_argument("--scaffold", metavar="PATH", help="Build the app from a scaffold file")
    init_parser.add_argument("names", nargs="*", help="Name of the new app")

    # test command
    test_parser = subparsers.add_parser(
        "test", aliases=["t"],
        help="Run the app's tests: all, one by prefix, or a scenario role",
    )
    test_parser.add_argument("args", nargs="*", help="[<prefix>] | [<scenario> <role>]")

    # scenario command
    scenario_parser = subparsers.add_parser(
        "scenario", aliases=["s"],
        help="Run every role of a scenario, each in its own process",
    )
    scenario_parser.add_argument("args", nargs="*", help="<scenario>")

    # web command
    web_parser = subparsers.add_parser(
        "web", aliases=["serve", "w"],
        help="Serve the app over HTTP and start gossiping",
    )
    web_parser.add_argument("args", nargs="*", help="[<port>]")

    return parser


# =============================================================================
# Entry point
# =============================================================================

def main(argv: Optional[List[str]] = None, output_sink: Callable[[str], None] = print) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    command = COMMAND_ALIASES.get(args.command, args.command)
    try:
        config, root = prepare(args)
        return COMMANDS[command](args, config, root)
    except (HcdevError, holo.HoloError, OSError) as e:
        logger.debug("%s failed", command, exc_info=True)
        output_sink(f"Error: {e}")
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
