"""
Error types for the mountebank harness.

Every failure raised by the harness derives from ``HarnessError`` and names
the imposter alias and the operation it happened in, when known.
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base exception for all harness errors."""

    def __init__(
        self,
        message: str,
        *,
        alias: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.message = message
        self.alias = alias
        self.operation = operation
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Prefix the message with ``[alias:operation]`` when available."""
        context = ":".join(part for part in (self.alias, self.operation) if part)
        if context:
            return f"[{context}] {self.message}"
        return self.message


class ConfigurationError(HarnessError):
    """
    Raised when the harness configuration is invalid.

    Examples:
    - Missing ``host``
    - Imposter without a ``contract``
    - Non-boolean ``mock`` flag
    """

    pass


class UnknownAliasError(HarnessError):
    """Raised when an operation references an alias that is not configured."""

    def __init__(self, alias: str, *, operation: str | None = None) -> None:
        super().__init__(
            f"Imposter '{alias}' is not presented in configuration",
            alias=alias,
            operation=operation,
        )


class PortMismatchError(HarnessError):
    """Raised when a replaced imposter comes back on a different port."""

    def __init__(
        self,
        alias: str,
        expected: int,
        actual: int | None,
        *,
        operation: str = "replace",
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Failed to replace imposter '{alias}' at port {expected} - "
            f"new imposter port does not match ({actual})",
            alias=alias,
            operation=operation,
        )


class MissingCachedImposterError(HarnessError):
    """Raised when replacing with a cached imposter that was never fetched."""

    def __init__(self, alias: str) -> None:
        super().__init__(
            f"Unable to replace imposter '{alias}' with cached instance - "
            "no cached instance found",
            alias=alias,
            operation="replace",
        )


class TransportError(HarnessError):
    """
    Raised when a call to the mountebank server fails.

    Covers network failures and non-2xx responses. The harness never
    retries; the error propagates to the phase that issued the call.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        port: int | None = None,
        status_code: int | None = None,
        alias: str | None = None,
    ) -> None:
        self.port = port
        self.status_code = status_code
        super().__init__(message, alias=alias, operation=operation)

    def _format_message(self) -> str:
        parts = [super()._format_message()]
        if self.port is not None:
            parts.append(f"(port: {self.port})")
        if self.status_code is not None:
            parts.append(f"(status: {self.status_code})")
        return " ".join(parts)


class ImposterNotFoundError(TransportError):
    """No imposter exists on the requested port."""

    pass


class ContractError(TransportError):
    """A contract document could not be read or is not valid JSON."""

    pass
