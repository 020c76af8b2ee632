"""Exception types raised by the provider client, reconciler and secret stores."""

from __future__ import annotations


class TransportError(Exception):
    """The HTTP exchange with the provider failed before a usable body arrived."""

    def __init__(self, message: str, status_code: int | None = None, timeout: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.timeout = timeout


class ProviderError(Exception):
    """The provider answered, but reported the operation as failed."""

    def __init__(self, error: str, message: str) -> None:
        super().__init__(f"{message} ({error})" if message != error else message)
        self.error = error
        self.message = message


class NotFoundError(Exception):
    """A requested secret or secret key does not exist."""


class ReconcileError(Exception):
    """A reconciliation step failed; the cause is chained."""

    def __init__(self, operation: str, domain: str, subdomain: str, message: str) -> None:
        super().__init__(f"unable to {operation} TXT record '{subdomain}' in '{domain}': {message}")
        self.operation = operation
        self.domain = domain
        self.subdomain = subdomain


class SecretStoreError(Exception):
    """Reading a secret failed for a reason other than it being absent."""
