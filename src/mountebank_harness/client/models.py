"""
Imposter descriptor as returned by the mountebank REST API.

Only the fields the harness relies on are declared; everything else
mountebank sends (``recordRequests``, ``defaultResponse``, ...) is kept as
extra data so a fetched imposter can be posted back unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Keys that describe recorded state rather than configuration
_NON_CONTRACT_KEYS = frozenset({"requests", "numberOfRequests", "links"})


class Imposter(BaseModel):
    """
    A mountebank imposter: its configuration plus its recorded requests.

    Attributes:
        port: Port the imposter listens on (assigned by mountebank if omitted)
        protocol: Imposter protocol (http, https, tcp, smtp)
        name: Optional display name
        stubs: Stub definitions (predicates + responses)
        requests: Requests recorded by the imposter
        links: Hypermedia links mountebank adds to responses
    """

    port: int | None = None
    protocol: str = "http"
    name: str | None = None
    stubs: list[dict[str, Any]] = Field(default_factory=list)
    requests: list[dict[str, Any]] = Field(default_factory=list)
    links: dict[str, Any] | None = Field(default=None, alias="_links")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def find_requests(self, criteria: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Recorded requests that contain every key/value in ``criteria``.

        Nested mappings are matched the same way, so
        ``{"method": "POST", "headers": {"X-Trace": "1"}}`` matches a POST
        request carrying that header among others.
        """
        return [request for request in self.requests if _is_subset(criteria, request)]

    def has_requests(self) -> bool:
        return len(self.requests) > 0

    def to_contract(self) -> dict[str, Any]:
        """The imposter configuration, without recorded requests."""
        data = self.model_dump(exclude_none=True)
        return {key: value for key, value in data.items() if key not in _NON_CONTRACT_KEYS}


def _is_subset(criteria: Mapping[str, Any], candidate: Any) -> bool:
    if not isinstance(candidate, Mapping):
        return False
    for key, expected in criteria.items():
        if key not in candidate:
            return False
        actual = candidate[key]
        if isinstance(expected, Mapping):
            if not _is_subset(expected, actual):
                return False
        elif actual != expected:
            return False
    return True
