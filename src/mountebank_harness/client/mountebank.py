"""
Synchronous client for the mountebank REST API.

Wraps the imposter management endpoints the harness needs:

- ``DELETE /imposters``          wipe every imposter
- ``POST /imposters``            create an imposter from a contract
- ``GET /imposters/{port}``      fetch configuration and recorded requests
- ``DELETE /imposters/{port}``   delete a single imposter

Failures are raised as ``TransportError``; nothing is retried here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from mountebank_harness.client.models import Imposter
from mountebank_harness.core.errors import ContractError, ImposterNotFoundError, TransportError
from mountebank_harness.core.manifest import DEFAULT_PORT, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class MountebankClient:
    """Client for a mountebank server's management API.

    Args:
        host: Mountebank host name.
        port: Mountebank management port (2525 unless configured otherwise).
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.base_url = f"http://{host}:{port}"
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> MountebankClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def imposter_url(self, port: int) -> str:
        """URL the imposter on ``port`` is reachable at."""
        return f"http://{self.host}:{port}"

    # ------------------------------------------------------------------
    # Imposter operations
    # ------------------------------------------------------------------

    def delete_imposters(self) -> None:
        """Delete every imposter on the server."""
        self._request("DELETE", "/imposters", operation="delete_imposters")

    def post_imposter(self, contract: dict[str, Any] | str) -> int:
        """Create an imposter from a contract document.

        Args:
            contract: The contract as a mapping or as a JSON string.

        Returns:
            The port mountebank assigned to the new imposter.
        """
        if isinstance(contract, str):
            content = contract
        else:
            content = json.dumps(contract)
        response = self._request(
            "POST",
            "/imposters",
            operation="post_imposter",
            content=content,
            headers={"Content-Type": "application/json"},
        )
        port = self._json(response, operation="post_imposter").get("port")
        if not isinstance(port, int):
            raise TransportError(
                f"Mountebank did not report a port for the new imposter: {response.text[:200]}",
                operation="post_imposter",
                status_code=response.status_code,
            )
        return port

    def post_imposter_from_file(self, path: Path | str) -> int:
        """Create an imposter from a JSON contract file."""
        return self.post_imposter(read_contract(path))

    def delete_imposter(self, port: int) -> None:
        """Delete the imposter on ``port``."""
        self._request("DELETE", f"/imposters/{port}", operation="delete_imposter", port=port)

    def delete_imposter_if_exists(self, port: int) -> None:
        """Delete the imposter on ``port``, treating an absent imposter as success."""
        try:
            self.delete_imposter(port)
        except ImposterNotFoundError:
            logger.debug("Imposter on port %d already absent", port)

    def get_imposter(self, port: int) -> Imposter:
        """Fetch an imposter's configuration and recorded requests."""
        response = self._request("GET", f"/imposters/{port}", operation="get_imposter", port=port)
        return Imposter.model_validate(self._json(response, operation="get_imposter", port=port))

    def get_imposter_contract(
        self,
        port: int,
        *,
        replayable: bool = False,
        remove_proxies: bool = False,
    ) -> str:
        """Fetch an imposter as the raw JSON text mountebank returns."""
        params: dict[str, str] = {}
        if replayable:
            params["replayable"] = "true"
        if remove_proxies:
            params["removeProxies"] = "true"
        response = self._request(
            "GET",
            f"/imposters/{port}",
            operation="get_imposter_contract",
            port=port,
            params=params,
        )
        return response.text

    def replace_imposter(self, imposter: Imposter) -> int:
        """Replace the imposter on ``imposter.port`` with ``imposter``.

        Returns:
            The port the replacement was created on.
        """
        if imposter.port is not None:
            self.delete_imposter_if_exists(imposter.port)
        return self.post_imposter(imposter.to_contract())

    def retrieve_and_save_contract(
        self,
        port: int,
        path: Path | str,
        *,
        replayable: bool = False,
    ) -> Path:
        """Write the imposter's current contract to ``path``, creating parent directories."""
        contract = self.get_imposter_contract(port, replayable=replayable)
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contract, encoding="utf-8")
        return path

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        port: int | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(
                f"{method} {self.base_url}{url} failed: {e}",
                operation=operation,
                port=port,
            ) from e

        if response.status_code == 404:
            raise ImposterNotFoundError(
                f"No imposter found: {_error_message(response)}",
                operation=operation,
                port=port,
                status_code=404,
            )
        if response.is_error:
            raise TransportError(
                f"{method} {url} rejected: {_error_message(response)}",
                operation=operation,
                port=port,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, *, operation: str, port: int | None = None) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"Mountebank returned invalid JSON: {response.text[:200]}",
                operation=operation,
                port=port,
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise TransportError(
                "Mountebank returned an unexpected payload",
                operation=operation,
                port=port,
                status_code=response.status_code,
            )
        return data


def read_contract(path: Path | str) -> dict[str, Any]:
    """Read and parse a JSON contract file.

    Raises:
        ContractError: If the file cannot be read or is not a JSON object.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ContractError(
            f"Unable to read contract {path}: {e}", operation="read_contract"
        ) from e
    except json.JSONDecodeError as e:
        raise ContractError(
            f"Invalid JSON in contract {path}: {e}", operation="read_contract"
        ) from e
    if not isinstance(data, dict):
        raise ContractError(
            f"Contract {path} must contain a JSON object", operation="read_contract"
        )
    return data


def _error_message(response: httpx.Response) -> str:
    """Extract mountebank's ``errors[].message`` text, falling back to the body."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    errors = data.get("errors") if isinstance(data, dict) else None
    if errors:
        return "; ".join(str(err.get("message", err)) for err in errors if isinstance(err, dict))
    return response.text[:200] or response.reason_phrase
