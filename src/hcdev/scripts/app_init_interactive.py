"""
Interactive app initialization.

Usage:
    python -m hcdev.scripts.app_init_interactive <app_path>

Asks for a description and a first zome name, then writes a working app:
the template directories, a DNA with one public ``hello`` function, its
zome code, a stand-alone test for it, and finally the .hc control directory.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Callable, Optional

from hcdev.holo.chain import CHAIN_DNA_DIR, CHAIN_TEST_DIR
from hcdev.holo.dna import DNA, CallingType, EntryDef, Exposure, FunctionDef, Zome, save_dna
from hcdev.initializer import create_template
from hcdev.scripts.app_init import create_control_dir

ZOME_TEMPLATE = '''"""Zome {zome}."""


def hello(ctx, payload):
    return "hello from " + ctx.app_name
'''


def ask(question: str, default: str = "", input_fn: Callable[[str], str] = input) -> str:
    suffix = f" [{default}]" if default else ""
    answer = input_fn(f"{question}{suffix}: ").strip()
    return answer or default


def write_app(app_path: Path, name: str, description: str, zome_name: str) -> None:
    """Write a minimal working app into app_path (which must not exist yet)."""
    create_template(app_path)

    dna = DNA(
        name=name,
        properties={"description": description},
        zomes=[
            Zome(
                name=zome_name,
                description=description,
                entries=[EntryDef(name="note")],
                functions=[FunctionDef(name="hello", calling_type=CallingType.STRING, exposure=Exposure.PUBLIC)],
            )
        ],
    )
    dna.new_uuid()
    save_dna(dna, app_path / CHAIN_DNA_DIR)

    zome_dir = app_path / CHAIN_DNA_DIR / zome_name
    zome_dir.mkdir()
    (zome_dir / f"{zome_name}.py").write_text(ZOME_TEMPLATE.format(zome=zome_name), encoding="utf-8")

    test = {
        "tests": [
            {
                "convey": "hello greets with the app name",
                "zome": zome_name,
                "fn_name": "hello",
                "input": "",
                "output": f"hello from {name}",
            }
        ]
    }
    (app_path / CHAIN_TEST_DIR / f"{zome_name}.json").write_text(json.dumps(test, indent=2), encoding="utf-8")


def main(argv: Optional[list[str]] = None, input_fn: Callable[[str], str] = input) -> int:
    parser = argparse.ArgumentParser(
        prog="hcdev.scripts.app_init_interactive",
        description="Interactively create a holochain app",
    )
    parser.add_argument("app_path", help="Directory to create the app in")
    args = parser.parse_args(argv)

    app_path = Path(args.app_path)
    if app_path.exists():
        print(f"Error: {app_path} already exists", file=sys.stderr)
        return 1

    name = app_path.name
    try:
        description = ask(f"Description of {name}", input_fn=input_fn)
        zome_name = ask("Name of the first zome", default="main", input_fn=input_fn)
    except EOFError:
        print("Error: no answer given", file=sys.stderr)
        return 1

    try:
        write_app(app_path, name, description, zome_name)
        create_control_dir(app_path, name, name)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"initialized {name} with zome {zome_name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
