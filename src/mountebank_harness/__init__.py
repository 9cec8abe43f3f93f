"""
mountebank-harness - imposter lifecycle management for test suites.

Provisions the mountebank imposters a test suite depends on, restores any
imposter a test replaced before the next test runs, and saves imposter
contracts when the suite ends.
"""

from __future__ import annotations

from ._version import get_version
from .client.models import Imposter
from .client.mountebank import MountebankClient
from .core.errors import (
    ConfigurationError,
    HarnessError,
    PortMismatchError,
    TransportError,
    UnknownAliasError,
)
from .core.manifest import HarnessConfig, ImposterConfig, load_config
from .testing.assertions import ImposterQueries
from .testing.lifecycle import ByDescriptor, BySource, ImposterLifecycle

__version__ = get_version()

__all__ = [
    "__version__",
    "ByDescriptor",
    "BySource",
    "ConfigurationError",
    "HarnessConfig",
    "HarnessError",
    "Imposter",
    "ImposterConfig",
    "ImposterLifecycle",
    "ImposterQueries",
    "MountebankClient",
    "PortMismatchError",
    "TransportError",
    "UnknownAliasError",
    "load_config",
]
