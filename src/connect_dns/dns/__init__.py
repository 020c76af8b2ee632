"""DNS client factory: build a provider client from application configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from connect_dns.dns.client import ConnectDnsClient
from connect_dns.dns.reconciler import TxtRecordReconciler

if TYPE_CHECKING:
    from connect_dns.config import AppConfig

__all__ = ["ConnectDnsClient", "TxtRecordReconciler", "get_dns_client"]


def get_dns_client(config: AppConfig, pdd_token: str) -> ConnectDnsClient:
    """Instantiate a Yandex.Connect DNS client for one challenge call.

    Args:
        config: Application configuration.
        pdd_token: PDD token read from the issuer's secret; treated as opaque.

    Returns:
        A configured ConnectDnsClient. Callers close it when done.
    """
    if not pdd_token:
        raise ValueError("PDD token is empty")
    return ConnectDnsClient(
        pdd_token=pdd_token,
        base_url=config.pdd_api_base_url,
        dump_http=config.dump_http,
    )
