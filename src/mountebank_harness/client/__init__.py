"""mountebank REST API client."""

from __future__ import annotations

from mountebank_harness.client.models import Imposter
from mountebank_harness.client.mountebank import MountebankClient, read_contract

__all__ = ["Imposter", "MountebankClient", "read_contract"]
