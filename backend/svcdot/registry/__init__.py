"""
Registry adapters.

`open_registry()` picks the live SMF repository or, when given a path, a
repository dump loaded into memory.
"""

import logging
from typing import Optional

from svcdot.registry.base import (
    Instance,
    Property,
    PropertyGroup,
    Registry,
    ResolvedEntity,
    Service,
    Snapshot,
)
from svcdot.registry.fmri import FmriParts, parse_fmri
from svcdot.registry.memory import MemoryRegistry
from svcdot.registry.svcprop import SvcpropRegistry

logger = logging.getLogger(__name__)


def open_registry(repository: Optional[str] = None) -> Registry:
    if repository:
        logger.info(f"Reading repository dump {repository}")
        return MemoryRegistry.from_file(repository)

    logger.info("Reading the live service repository")
    return SvcpropRegistry()


__all__ = [
    "FmriParts",
    "Instance",
    "MemoryRegistry",
    "Property",
    "PropertyGroup",
    "Registry",
    "ResolvedEntity",
    "Service",
    "Snapshot",
    "SvcpropRegistry",
    "open_registry",
    "parse_fmri",
]
