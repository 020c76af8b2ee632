"""Converge the provider's challenge TXT record to the desired state."""

from __future__ import annotations

import logging

from connect_dns.dns.client import ConnectDnsClient
from connect_dns.errors import ProviderError, ReconcileError, TransportError
from connect_dns.models import DnsRecord, RecordType

logger = logging.getLogger(__name__)


class TxtRecordReconciler:
    """Idempotent create-or-update / delete-if-present for one TXT record.

    Each call lists the zone first and acts on the first TXT record whose
    subdomain matches exactly. Nothing is cached between calls and nothing is
    retried; the host owns retry policy. A list-then-write race against another
    writer for the same name is not detected because the API has no conditional
    writes.
    """

    def __init__(self, client: ConnectDnsClient) -> None:
        self._client = client

    def find(self, domain: str, subdomain: str) -> DnsRecord | None:
        """Return the first TXT record for ``subdomain`` in listing order, or None.

        Raises ProviderError or TransportError from the list call unchanged.
        """
        records = self._client.list_records(domain).unwrap()
        matches = [r for r in records if r.type == RecordType.TXT and r.subdomain == subdomain]
        if not matches:
            logger.debug("No TXT record %s in domain %s", subdomain, domain)
            return None
        if len(matches) > 1:
            logger.warning(
                "Found %d TXT records %s in domain %s; managing only record %d, ignoring %s",
                len(matches),
                subdomain,
                domain,
                matches[0].record_id,
                [r.record_id for r in matches[1:]],
            )
        return matches[0]

    def ensure_present(self, domain: str, subdomain: str, value: str, ttl: int) -> DnsRecord:
        """Make the TXT record exist with exactly ``value`` and ``ttl``.

        An existing record is overwritten in place by id, so repeating the call
        with the same arguments converges to the same state.
        """
        existing = self._lookup(domain, subdomain)

        if existing is not None:
            try:
                record = self._client.update_record(existing.record_id, domain, subdomain, value, ttl).unwrap()
            except (ProviderError, TransportError) as exc:
                raise ReconcileError("update", domain, subdomain, str(exc)) from exc
            logger.info("Updated TXT record %s in domain %s (record_id=%d)", subdomain, domain, existing.record_id)
            return record

        try:
            record = self._client.create_record(domain, subdomain, value, ttl).unwrap()
        except (ProviderError, TransportError) as exc:
            raise ReconcileError("create", domain, subdomain, str(exc)) from exc
        logger.info("Created TXT record %s in domain %s (record_id=%d)", subdomain, domain, record.record_id)
        return record

    def ensure_absent(self, domain: str, subdomain: str) -> None:
        """Delete the TXT record if present; absence already counts as success."""
        existing = self._lookup(domain, subdomain)
        if existing is None:
            logger.warning("TXT record %s not found in domain %s; skipping delete", subdomain, domain)
            return

        try:
            self._client.delete_record(existing.record_id, domain).unwrap()
        except (ProviderError, TransportError) as exc:
            raise ReconcileError("delete", domain, subdomain, str(exc)) from exc
        logger.info("Deleted TXT record %s from domain %s (record_id=%d)", subdomain, domain, existing.record_id)

    def _lookup(self, domain: str, subdomain: str) -> DnsRecord | None:
        # Lookup failures are raised, never treated as absence.
        try:
            return self.find(domain, subdomain)
        except (ProviderError, TransportError) as exc:
            raise ReconcileError("look up", domain, subdomain, str(exc)) from exc
