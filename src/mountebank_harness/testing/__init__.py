"""
Imposter lifecycle for test suites.

The registry maps aliases to imposter ports, the lifecycle provisions,
restores and saves imposters, and ``ImposterQueries`` is what tests use
to inspect and replace them. ``fixtures`` is the pytest plugin.
"""

from __future__ import annotations

from mountebank_harness.testing.assertions import ImposterQueries
from mountebank_harness.testing.lifecycle import (
    ByDescriptor,
    BySource,
    ImposterLifecycle,
    ReplaceTarget,
    should_restore,
)
from mountebank_harness.testing.registry import ImposterRegistry

__all__ = [
    "ByDescriptor",
    "BySource",
    "ImposterLifecycle",
    "ImposterQueries",
    "ImposterRegistry",
    "ReplaceTarget",
    "should_restore",
]
