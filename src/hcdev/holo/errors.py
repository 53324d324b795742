"""Errors raised by the local holochain runtime."""

from __future__ import annotations


class HoloError(Exception):
    """Base class for runtime errors."""

    pass


class DNAError(HoloError):
    """Missing, unreadable or invalid DNA definition."""

    pass


class AgentError(HoloError):
    """Agent identity or key file could not be read or written."""

    pass


class ChainError(HoloError):
    """Chain lifecycle error (not generated, already started, not active...)."""

    pass


class ZomeError(HoloError):
    """A zome or zome function could not be loaded or called."""

    pass
