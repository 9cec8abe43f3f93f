"""Shared fixtures for unit tests: an in-memory mountebank server.

``FakeMountebank`` answers the imposter endpoints of the mountebank REST API
through ``httpx.MockTransport``, so the real ``MountebankClient`` can be
exercised without a running server.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from mountebank_harness.client.mountebank import MountebankClient
from mountebank_harness.core.manifest import HarnessConfig, build_config


class FakeMountebank:
    """Minimal stateful stand-in for a mountebank server.

    Args:
        first_port: Port handed out to contracts that do not pin one.
        delete_missing_status: Status returned when deleting an absent imposter.
    """

    def __init__(self, first_port: int = 4545, delete_missing_status: int = 404) -> None:
        self.imposters: dict[int, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self._next_port = first_port
        self._delete_missing_status = delete_missing_status

    def client(self) -> MountebankClient:
        return MountebankClient("localhost", transport=httpx.MockTransport(self.handler))

    def record(self, port: int, **request: Any) -> None:
        """Record a request on the imposter, as if the system under test had called it."""
        self.imposters[port].setdefault("requests", []).append(request)

    def calls_to(self, method: str) -> list[str]:
        return [path for call_method, path in self.calls if call_method == method]

    def _allocate(self) -> int:
        while self._next_port in self.imposters:
            self._next_port += 1
        port = self._next_port
        self._next_port += 1
        return port

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))

        if path == "/imposters":
            if request.method == "DELETE":
                removed = list(self.imposters.values())
                self.imposters.clear()
                return httpx.Response(200, json={"imposters": removed})
            if request.method == "POST":
                body = json.loads(request.content)
                port = body.get("port") or self._allocate()
                if port in self.imposters:
                    return httpx.Response(
                        400,
                        json={"errors": [{"code": "resource conflict", "message": f"port {port} in use"}]},
                    )
                imposter = {**body, "port": port, "requests": []}
                self.imposters[port] = imposter
                return httpx.Response(201, json=imposter)
            return httpx.Response(405)

        port = int(path.rsplit("/", 1)[1])
        if request.method == "GET":
            if port not in self.imposters:
                return _not_found(port)
            imposter = self.imposters[port]
            if request.url.params.get("replayable") == "true":
                imposter = {k: v for k, v in imposter.items() if k != "requests"}
            return httpx.Response(200, json=imposter)
        if request.method == "DELETE":
            if port not in self.imposters:
                if self._delete_missing_status == 404:
                    return _not_found(port)
                return httpx.Response(200, json={})
            return httpx.Response(200, json=self.imposters.pop(port))
        return httpx.Response(405)


def _not_found(port: int) -> httpx.Response:
    return httpx.Response(
        404, json={"errors": [{"code": "no such resource", "message": f"no imposter on {port}"}]}
    )


def _write_contract(directory: Path, name: str, **contract: Any) -> Path:
    contract.setdefault("protocol", "http")
    contract.setdefault("stubs", [{"responses": [{"is": {"statusCode": 200, "body": name}}]}])
    path = directory / f"{name}.json"
    path.write_text(json.dumps(contract), encoding="utf-8")
    return path


@pytest.fixture
def fake_mountebank() -> FakeMountebank:
    return FakeMountebank()


@pytest.fixture
def contracts_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "contracts"
    directory.mkdir()
    return directory


@pytest.fixture
def make_config(tmp_path: Path):
    """Build a HarnessConfig rooted at ``tmp_path`` from an imposters table."""

    def _make(imposters: dict[str, dict[str, Any]] | None = None, **settings: Any) -> HarnessConfig:
        data: dict[str, Any] = {"host": "localhost", **settings}
        data["imposters"] = imposters or {}
        return build_config(data, root=tmp_path)

    return _make


@pytest.fixture
def write_contract(contracts_dir: Path):
    """Write a JSON contract file into ``contracts_dir`` and return its path."""

    def _write(name: str, **contract: Any) -> Path:
        return _write_contract(contracts_dir, name, **contract)

    return _write
