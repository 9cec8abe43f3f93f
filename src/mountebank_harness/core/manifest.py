"""
Harness configuration loading.

The configuration lives either in a dedicated ``mountebank.toml`` under a
``[mountebank]`` table, or in ``pyproject.toml`` under ``[tool.mountebank]``::

    [mountebank]
    host = "localhost"
    port = 2525

    [mountebank.imposters.payments]
    contract = "tests/_data/mb/payments.json"
    mock = true
    save = "tests/_output/mb/payments.json"

Relative ``contract`` and ``save`` paths are resolved against the directory
holding the configuration file.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from mountebank_harness.core.errors import ConfigurationError

DEFAULT_PORT = 2525
DEFAULT_TIMEOUT = 10.0

CONFIG_FILENAME = "mountebank.toml"
PYPROJECT_FILENAME = "pyproject.toml"


@dataclass(frozen=True)
class ImposterConfig:
    """Configuration of a single imposter, keyed by alias."""

    alias: str
    contract: Path
    volatile: bool = False  # "mock = true": restore before every test
    save: Path | None = None


@dataclass(frozen=True)
class HarnessConfig:
    """Complete harness configuration."""

    host: str
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    imposters: dict[str, ImposterConfig] = field(default_factory=dict)
    root: Path = field(default_factory=Path.cwd)

    @property
    def base_url(self) -> str:
        """URL of the mountebank management API."""
        return f"http://{self.host}:{self.port}"

    @property
    def aliases(self) -> list[str]:
        return list(self.imposters)

    def imposter(self, alias: str) -> ImposterConfig | None:
        return self.imposters.get(alias)

    def with_overrides(self, *, host: str | None = None, port: int | None = None) -> HarnessConfig:
        """Return a copy with command-line overrides applied."""
        return replace(
            self,
            host=host or self.host,
            port=_validate_port(port) if port is not None else self.port,
        )


def build_config(data: dict[str, Any], root: Path | None = None) -> HarnessConfig:
    """Build and validate a configuration from the ``[mountebank]`` table.

    Args:
        data: Contents of the ``[mountebank]`` (or ``[tool.mountebank]``) table.
        root: Directory that relative paths are resolved against.

    Returns:
        Validated HarnessConfig.

    Raises:
        ConfigurationError: If a required field is missing or has the wrong type.
    """
    root = (root or Path.cwd()).resolve()

    host = data.get("host")
    if not host or not isinstance(host, str):
        raise ConfigurationError("Missing required 'host' field in mountebank configuration")

    port = _validate_port(data.get("port", DEFAULT_PORT))

    timeout = data.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, int | float) or timeout <= 0:
        raise ConfigurationError(f"Invalid 'timeout' value: {timeout!r}")

    imposters_data = data.get("imposters", {})
    if not isinstance(imposters_data, dict):
        raise ConfigurationError("'imposters' must be a table keyed by alias")

    imposters: dict[str, ImposterConfig] = {}
    for alias, imposter_data in imposters_data.items():
        imposters[alias] = _build_imposter(alias, imposter_data, root)

    return HarnessConfig(
        host=host,
        port=port,
        timeout=float(timeout),
        imposters=imposters,
        root=root,
    )


def _build_imposter(alias: str, data: Any, root: Path) -> ImposterConfig:
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Imposter configuration must be a table ('{alias}')", alias=alias
        )

    contract = data.get("contract")
    if not contract:
        raise ConfigurationError(
            f"Missing 'contract' field in imposter configuration ('{alias}')", alias=alias
        )
    if not isinstance(contract, str):
        raise ConfigurationError(
            f"'contract' must be a path string in imposter configuration ('{alias}')",
            alias=alias,
        )

    volatile = data.get("mock", False)
    if not isinstance(volatile, bool):
        raise ConfigurationError(
            f"'mock' must be true or false in imposter configuration ('{alias}')", alias=alias
        )

    save = data.get("save")
    if save is not None and not isinstance(save, str):
        raise ConfigurationError(
            f"'save' must be a path string in imposter configuration ('{alias}')", alias=alias
        )

    return ImposterConfig(
        alias=alias,
        contract=_resolve(root, contract),
        volatile=volatile,
        save=_resolve(root, save) if save else None,
    )


def _validate_port(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid 'port' value: {value!r}")
    if not isinstance(value, int):
        try:
            value = int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid 'port' value: {value!r}") from None
    if not 0 < value < 65536:
        raise ConfigurationError(f"Port out of range: {value}")
    return value


def _resolve(root: Path, path: str | Path) -> Path:
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return root / candidate


def load_config(path: Path) -> HarnessConfig:
    """Load configuration from a ``mountebank.toml`` or ``pyproject.toml`` file.

    Raises:
        ConfigurationError: If the file is missing, unparsable, or lacks the table.
    """
    path = Path(path)
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {path}") from None
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Unable to read configuration {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e

    if path.name == PYPROJECT_FILENAME:
        table = data.get("tool", {}).get("mountebank")
        table_name = "[tool.mountebank]"
    else:
        table = data.get("mountebank")
        table_name = "[mountebank]"

    if not isinstance(table, dict):
        raise ConfigurationError(f"No {table_name} table in {path}")

    return build_config(table, root=path.parent)


def find_config(start: Path | None = None) -> Path | None:
    """Find a configuration file, searching from ``start`` up to the filesystem root.

    A ``mountebank.toml`` wins over a ``pyproject.toml`` in the same directory;
    a ``pyproject.toml`` only counts if it has a ``[tool.mountebank]`` table.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _has_tool_table(pyproject):
            return pyproject
    return None


def _has_tool_table(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return "mountebank" in data.get("tool", {})
