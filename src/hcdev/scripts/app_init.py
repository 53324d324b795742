"""
Finalize a new app directory by creating its .hc control directory.

Usage:
    python -m hcdev.scripts.app_init <name> <title>

Runs in the app directory. The .hc directory is what marks a directory as an
initialized app.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from hcdev.holo.service import APP_CONTROL_DIR

CONTROL_CONFIG_FILE = "config.json"


def create_control_dir(app_path: Path, name: str, title: str) -> Path:
    """
    Create ``<app_path>/.hc`` with a config naming the app.

    Raises:
        FileExistsError: if the app is already initialized
    """
    control_dir = app_path / APP_CONTROL_DIR
    control_dir.mkdir()
    config = {
        "name": name,
        "title": title,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    (control_dir / CONTROL_CONFIG_FILE).write_text(json.dumps(config, indent=2), encoding="utf-8")
    return control_dir


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="hcdev.scripts.app_init", description="Mark a directory as a holochain app")
    parser.add_argument("name", help="App name")
    parser.add_argument("title", help="App title")
    args = parser.parse_args(argv)

    try:
        create_control_dir(Path.cwd(), args.name, args.title)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{args.name} initialized")
    return 0


if __name__ == "__main__":
    sys.exit(main())
