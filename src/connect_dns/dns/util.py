"""DNS name helpers."""

from __future__ import annotations

_ZONE_APEX = "@"


def split_fqdn(fqdn: str, zone: str) -> tuple[str, str]:
    """Split a resolved FQDN into (domain, entry) relative to its resolved zone.

    Both names may carry the trailing root dot. The entry is the FQDN with the
    zone suffix removed; an FQDN equal to the zone maps to the apex entry ``@``.

    Args:
        fqdn: Fully qualified record name (e.g. "_acme-challenge.example.com.").
        zone: Zone the record lives in (e.g. "example.com.").

    Returns:
        Tuple of (domain, entry), e.g. ("example.com", "_acme-challenge").
    """
    domain = zone.removesuffix(".")
    name = fqdn.removesuffix(".")
    if not domain:
        raise ValueError(f"Zone for record '{fqdn}' is empty")
    if name == domain:
        return domain, _ZONE_APEX
    suffix = f".{domain}"
    if not name.endswith(suffix):
        raise ValueError(f"Record '{fqdn}' is not under zone '{zone}'")
    return domain, name.removesuffix(suffix)
