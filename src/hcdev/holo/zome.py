"""
Zomes: the code modules of a DNA.

A zome's code is a Python file in ``dna/<zome>/``. Every function the DNA
declares for the zome must be defined there with the signature::

    def fn_name(ctx, payload): ...

``ctx`` is a ZomeContext giving the function access to its chain.
"""
from __future__ import annotations

import importlib.util
import json
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from ..telemetry import get_logger
from .dna import CallingType, Zome
from .errors import ZomeError

if TYPE_CHECKING:
    from .chain import Holochain

logger = get_logger(__name__)


class ZomeContext:
    """What a zome function can see of the chain it runs in."""

    def __init__(self, chain: "Holochain", zome: Zome):
        self._chain = chain
        self._zome = zome

    @property
    def app_name(self) -> str:
        return self._chain.name

    @property
    def app_dna_hash(self) -> str:
        return self._chain.dna_hash()

    @property
    def app_agent_id(self) -> str:
        return self._chain.agent.identity

    @property
    def app_key_hash(self) -> str:
        return self._chain.agent.public_key

    def get_property(self, name: str) -> Any:
        return self._chain.dna.properties.get(name)

    def commit(self, entry_type: str, entry: Any) -> str:
        """Commit an entry of a type declared by this zome. Returns its hash."""
        if self._zome.get_entry(entry_type) is None:
            raise ZomeError(f"zome {self._zome.name} has no entry type {entry_type}")
        return self._chain.commit(entry_type, entry).hash

    def get(self, hash_: str) -> Optional[Any]:
        found = self._chain.get(hash_)
        return found["entry"] if found else None

    def debug(self, message: Any) -> None:
        logger.debug("[%s:%s] %s", self._chain.name, self._zome.name, message)


class ZomeModule:
    """A zome definition bound to its loaded code."""

    def __init__(self, zome: Zome, module: ModuleType):
        self.zome = zome
        self.module = module

    def function(self, fn_name: str) -> Callable[..., Any]:
        if self.zome.get_function(fn_name) is None:
            raise ZomeError(f"function {fn_name} not declared in zome {self.zome.name}")
        fn = getattr(self.module, fn_name, None)
        if not callable(fn):
            raise ZomeError(f"function {fn_name} not defined in zome {self.zome.name} code")
        return fn

    def call(self, ctx: ZomeContext, fn_name: str, payload: Any) -> Any:
        """
        Call a declared function.

        JSON calling type functions receive decoded JSON when handed a string;
        string calling type functions always receive a string.
        """
        fn = self.function(fn_name)
        fn_def = self.zome.get_function(fn_name)
        assert fn_def is not None

        if fn_def.calling_type == CallingType.JSON and isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError:
                pass
        elif fn_def.calling_type == CallingType.STRING and not isinstance(payload, str):
            payload = "" if payload is None else json.dumps(payload)

        return fn(ctx, payload)


def load_zome(dna_dir: Path | str, zome: Zome, namespace: str) -> ZomeModule:
    """
    Import a zome's code file.

    Args:
        dna_dir: the chain's dna directory
        zome: zome definition from the DNA
        namespace: unique prefix for the module name (chain dna hash)

    Raises:
        ZomeError: if the code file is missing or fails to import
    """
    code_path = Path(dna_dir) / zome.name / zome.code_filename()
    if not code_path.is_file():
        raise ZomeError(f"zome code not found: {code_path}")

    module_name = f"hcdev_zome_{namespace}_{zome.name}"
    spec = importlib.util.spec_from_file_location(module_name, code_path)
    if spec is None or spec.loader is None:
        raise ZomeError(f"unable to load zome code: {code_path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ZomeError(f"error loading zome {zome.name}: {e}") from e

    logger.debug("loaded zome %s from %s", zome.name, code_path)
    return ZomeModule(zome, module)


def load_zomes(dna_dir: Path | str, zomes: list[Zome], namespace: str) -> Dict[str, ZomeModule]:
    return {z.name: load_zome(dna_dir, z, namespace) for z in zomes}
