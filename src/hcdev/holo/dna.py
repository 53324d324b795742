"""
DNA: the portable application definition.

The DNA lives in ``<app>/dna/dna.<format>`` where format is one of json,
yaml/yml or toml. Zome code sits next to it in ``<app>/dna/<zome>/``.
"""
from __future__ import annotations

import hashlib
import json
import uuid as uuid_lib
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import DNAError

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found]

DNA_FILE_NAME = "dna"
DNA_FORMATS = ("json", "yaml", "yml", "toml")


class Exposure(str, Enum):
    PUBLIC = "public"
    ZOME = "zome"


class CallingType(str, Enum):
    JSON = "json"
    STRING = "string"


class FunctionDef(BaseModel):
    name: str
    calling_type: CallingType = CallingType.JSON
    exposure: Exposure = Exposure.ZOME


class EntryDef(BaseModel):
    name: str
    data_format: str = "json"


class Zome(BaseModel):
    name: str
    description: str = ""
    code_file: Optional[str] = None
    entries: List[EntryDef] = Field(default_factory=list)
    functions: List[FunctionDef] = Field(default_factory=list)

    def code_filename(self) -> str:
        return self.code_file or f"{self.name}.py"

    def get_function(self, fn_name: str) -> Optional[FunctionDef]:
        for fn in self.functions:
            if fn.name == fn_name:
                return fn
        return None

    def get_entry(self, entry_type: str) -> Optional[EntryDef]:
        for entry in self.entries:
            if entry.name == entry_type:
                return entry
        return None


class DNA(BaseModel):
    version: int = 1
    uuid: str = ""
    name: str
    properties: Dict[str, Any] = Field(default_factory=dict)
    zomes: List[Zome] = Field(default_factory=list)

    def new_uuid(self) -> None:
        """Give the DNA a fresh identity, making it a different chain."""
        self.uuid = str(uuid_lib.uuid4())

    def get_zome(self, name: str) -> Optional[Zome]:
        for zome in self.zomes:
            if zome.name == name:
                return zome
        return None

    def canonical_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))

    def hash(self) -> str:
        """Content address of the DNA."""
        digest = hashlib.sha256(self.canonical_json().encode("utf-8")).hexdigest()
        return f"Qm{digest}"


def find_dna_file(dna_dir: Path | str) -> Optional[Path]:
    """Return the DNA file in dna_dir, trying each supported format in turn."""
    dna_dir = Path(dna_dir)
    for fmt in DNA_FORMATS:
        candidate = dna_dir / f"{DNA_FILE_NAME}.{fmt}"
        if candidate.is_file():
            return candidate
    return None


def decode_dna(text: str, fmt: str) -> DNA:
    """Parse DNA text in the given format."""
    try:
        if fmt == "json":
            data = json.loads(text)
        elif fmt in ("yaml", "yml"):
            data = yaml.safe_load(text)
        elif fmt == "toml":
            data = tomllib.loads(text)
        else:
            raise DNAError(f"unknown DNA format: {fmt}")
    except (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise DNAError(f"unable to parse {fmt} DNA: {e}") from e

    if not isinstance(data, dict):
        raise DNAError("DNA must be a mapping")

    try:
        return DNA.model_validate(data)
    except ValidationError as e:
        raise DNAError(f"invalid DNA: {e}") from e


def load_dna(dna_dir: Path | str, default_name: Optional[str] = None) -> DNA:
    """
    Load the DNA from a dna directory.

    Args:
        dna_dir: the ``dna`` directory of an app
        default_name: if given, a missing DNA file yields an empty DNA with
            this name instead of an error (freshly initialized apps have none)

    Raises:
        DNAError: if no DNA file exists (and no default_name) or it is invalid
    """
    path = find_dna_file(dna_dir)
    if path is None:
        if default_name is not None:
            return DNA(name=default_name)
        raise DNAError(f"DNA specification file not found in {dna_dir}")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DNAError(f"unable to read {path.name}: {e}") from e
    return decode_dna(text, path.suffix.lstrip("."))


def save_dna(dna: DNA, dna_dir: Path | str) -> Path:
    """Write the DNA as dna.json into dna_dir, replacing any other format."""
    dna_dir = Path(dna_dir)
    dna_dir.mkdir(parents=True, exist_ok=True)
    for fmt in DNA_FORMATS:
        stale = dna_dir / f"{DNA_FILE_NAME}.{fmt}"
        if stale.is_file():
            stale.unlink()
    path = dna_dir / f"{DNA_FILE_NAME}.json"
    path.write_text(json.dumps(dna.model_dump(mode="json"), indent=2), encoding="utf-8")
    return path
