"""Data classes shared by the provider client, reconciler and webhook."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, NoReturn, TypeVar, Union

from connect_dns.errors import ProviderError

T = TypeVar("T")


def _unsigned(value: Any, name: str) -> int:
    """Parse a non-negative integer field; fractional, boolean or negative values are rejected."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"{name} must be an integer, got: {value!r}")
    number = int(value)
    if number < 0:
        raise ValueError(f"{name} must not be negative, got: {number}")
    return number


class RecordType(StrEnum):
    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    MX = "MX"
    NS = "NS"
    SOA = "SOA"
    SRV = "SRV"
    TXT = "TXT"


@dataclass(frozen=True)
class DnsRecord:
    """A single record as reported by the Yandex.Connect DNS API."""

    record_id: int
    type: str
    domain: str
    subdomain: str
    content: str
    ttl: int
    priority: int = 0
    fqdn: str = ""

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "type": self.type,
            "domain": self.domain,
            "fqdn": self.fqdn,
            "ttl": self.ttl,
            "subdomain": self.subdomain,
            "content": self.content,
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, data: dict) -> DnsRecord:
        """Parse the provider's record object.

        Raises KeyError, TypeError or ValueError when the object is not a record.
        """
        # The API sends priority as "" for record types that have none.
        return cls(
            record_id=_unsigned(data["record_id"], "record_id"),
            type=str(data["type"]),
            domain=str(data["domain"]),
            subdomain=str(data["subdomain"]),
            content=str(data["content"]),
            ttl=_unsigned(data["ttl"], "ttl"),
            priority=_unsigned(data.get("priority") or 0, "priority"),
            fqdn=str(data.get("fqdn") or ""),
        )


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful provider call."""

    value: T
    success: bool = field(default=True, init=False)

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Provider call that reached the API but was rejected by it.

    ``error`` is the provider's error code, ``message`` a readable description.
    """

    error: str
    message: str
    success: bool = field(default=False, init=False)

    def unwrap(self) -> NoReturn:
        raise ProviderError(self.error, self.message)


ProviderResult = Union[Ok[T], Failure]


@dataclass(frozen=True)
class ChallengeTarget:
    """Desired state of the challenge TXT record."""

    domain: str
    subdomain: str
    value: str
    ttl: int


@dataclass(frozen=True)
class SecretKeySelector:
    name: str
    key: str

    @classmethod
    def from_dict(cls, data: dict) -> SecretKeySelector:
        return cls(name=data.get("name", ""), key=data.get("key", ""))


@dataclass(frozen=True)
class SolverConfig:
    """Per-issuer solver configuration from ``webhook.config`` on the Issuer."""

    pdd_token_secret_ref: SecretKeySelector

    @classmethod
    def from_dict(cls, data: dict | None) -> SolverConfig:
        if not isinstance(data, dict):
            raise ValueError("solver config must be an object with a pddTokenSecretRef")
        ref = data.get("pddTokenSecretRef")
        if not isinstance(ref, dict):
            raise ValueError("solver config is missing pddTokenSecretRef")
        selector = SecretKeySelector.from_dict(ref)
        if not selector.name or not selector.key:
            raise ValueError("pddTokenSecretRef requires both 'name' and 'key'")
        return cls(pdd_token_secret_ref=selector)


@dataclass(frozen=True)
class ChallengeRequest:
    """A cert-manager DNS-01 challenge request, as posted to the webhook."""

    uid: str
    action: str
    key: str
    resolved_fqdn: str
    resolved_zone: str
    resource_namespace: str = ""
    type: str = "dns-01"
    dns_name: str = ""
    allow_ambient_credentials: bool = False
    config: dict[str, Any] | None = None

    def to_dict(self) -> dict:
        return {
            "uid": self.uid,
            "action": self.action,
            "type": self.type,
            "dnsName": self.dns_name,
            "key": self.key,
            "resourceNamespace": self.resource_namespace,
            "resolvedFQDN": self.resolved_fqdn,
            "resolvedZone": self.resolved_zone,
            "allowAmbientCredentials": self.allow_ambient_credentials,
            "config": self.config,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ChallengeRequest:
        return cls(
            uid=data["uid"],
            action=data["action"],
            key=data["key"],
            resolved_fqdn=data["resolvedFQDN"],
            resolved_zone=data["resolvedZone"],
            resource_namespace=data.get("resourceNamespace", ""),
            type=data.get("type", "dns-01"),
            dns_name=data.get("dnsName", ""),
            allow_ambient_credentials=bool(data.get("allowAmbientCredentials", False)),
            config=data.get("config"),
        )
