"""Configuration loading and validation from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from connect_dns.dns.client import PDD_API_BASE

_DEFAULT_RECORD_TTL = 300
_DEFAULT_SECRET_BACKEND = "kubernetes"
_SECRET_BACKENDS = ("kubernetes", "keyvault")
_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppConfig:
    """Application configuration loaded from environment variables."""

    group_name: str
    secret_backend: str = _DEFAULT_SECRET_BACKEND
    keyvault_url: str | None = None
    kubeconfig_path: str | None = None
    pdd_api_base_url: str = PDD_API_BASE
    record_ttl: int = _DEFAULT_RECORD_TTL
    dump_http: bool = False


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise ValueError(f"Required environment variable {name} is not set")
    return value


def load_config() -> AppConfig:
    """Load and validate application configuration from environment variables."""
    group_name = _require_env("GROUP_NAME")

    secret_backend = os.environ.get("SECRET_BACKEND", _DEFAULT_SECRET_BACKEND).lower()
    if secret_backend not in _SECRET_BACKENDS:
        raise ValueError(f"SECRET_BACKEND must be one of {', '.join(_SECRET_BACKENDS)}, got: {secret_backend!r}")
    keyvault_url = os.environ.get("AZURE_KEYVAULT_URL") or None
    if secret_backend == "keyvault" and not keyvault_url:
        raise ValueError("AZURE_KEYVAULT_URL is required when SECRET_BACKEND=keyvault")

    raw_ttl = os.environ.get("DNS_RECORD_TTL", str(_DEFAULT_RECORD_TTL))
    try:
        record_ttl = int(raw_ttl)
    except ValueError:
        raise ValueError(f"DNS_RECORD_TTL must be an integer, got: {raw_ttl!r}")
    if record_ttl < 1:
        raise ValueError(f"DNS_RECORD_TTL must be a positive integer, got: {record_ttl}")

    return AppConfig(
        group_name=group_name,
        secret_backend=secret_backend,
        keyvault_url=keyvault_url,
        kubeconfig_path=os.environ.get("KUBECONFIG_PATH") or None,
        pdd_api_base_url=os.environ.get("PDD_API_BASE_URL", PDD_API_BASE),
        record_ttl=record_ttl,
        dump_http=os.environ.get("PDD_DUMP_HTTP", "").lower() in _TRUTHY,
    )
