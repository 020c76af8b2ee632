"""cert-manager DNS-01 solver backed by Yandex.Connect DNS."""

from __future__ import annotations

import logging
from collections.abc import Callable

from connect_dns.config import AppConfig
from connect_dns.dns import get_dns_client
from connect_dns.dns.client import ConnectDnsClient
from connect_dns.dns.reconciler import TxtRecordReconciler
from connect_dns.dns.util import split_fqdn
from connect_dns.errors import NotFoundError, SecretStoreError
from connect_dns.models import ChallengeRequest, ChallengeTarget, DnsRecord, SolverConfig
from connect_dns.secret_store import SecretStore

logger = logging.getLogger(__name__)

SOLVER_NAME = "yandexConnect"


class ConnectDnsSolver:
    """Presents and cleans up challenge TXT records.

    Both operations tolerate repeated calls: ``present`` overwrites an existing
    record and ``cleanup`` succeeds when the record is already gone. A new
    provider client is built for every call from the token in the issuer's
    secret, and closed before returning.
    """

    name = SOLVER_NAME

    def __init__(
        self,
        config: AppConfig,
        secret_store: SecretStore,
        _client_factory: Callable[[AppConfig, str], ConnectDnsClient] = get_dns_client,
    ) -> None:
        self._config = config
        self._secret_store = secret_store
        self._client_factory = _client_factory

    def present(self, request: ChallengeRequest) -> DnsRecord:
        logger.info(
            "Present: namespace=%s zone=%s fqdn=%s",
            request.resource_namespace,
            request.resolved_zone,
            request.resolved_fqdn,
        )
        target = self._target(request)
        with self._open_client(request) as client:
            return TxtRecordReconciler(client).ensure_present(
                target.domain, target.subdomain, target.value, target.ttl
            )

    def cleanup(self, request: ChallengeRequest) -> None:
        logger.info(
            "CleanUp: namespace=%s zone=%s fqdn=%s",
            request.resource_namespace,
            request.resolved_zone,
            request.resolved_fqdn,
        )
        target = self._target(request)
        with self._open_client(request) as client:
            TxtRecordReconciler(client).ensure_absent(target.domain, target.subdomain)

    def _target(self, request: ChallengeRequest) -> ChallengeTarget:
        domain, subdomain = split_fqdn(request.resolved_fqdn, request.resolved_zone)
        logger.debug("Challenge entry=%s domain=%s", subdomain, domain)
        return ChallengeTarget(domain=domain, subdomain=subdomain, value=request.key, ttl=self._config.record_ttl)

    def _open_client(self, request: ChallengeRequest) -> ConnectDnsClient:
        try:
            solver_config = SolverConfig.from_dict(request.config)
        except ValueError as exc:
            raise ValueError(f"unable to load config: {exc}") from exc

        ref = solver_config.pdd_token_secret_ref
        try:
            token = self._secret_store.get_secret_value(request.resource_namespace, ref.name, ref.key)
        except NotFoundError as exc:
            raise NotFoundError(f"unable to get PDD token: {exc}") from exc
        except Exception as exc:
            raise SecretStoreError(f"unable to get PDD token: {exc}") from exc
        return self._client_factory(self._config, token.strip())
