"""Yandex.Connect DNS client: list/add/edit/del records via the PDD REST API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from connect_dns.errors import TransportError
from connect_dns.models import DnsRecord, Failure, Ok, ProviderResult, RecordType

logger = logging.getLogger(__name__)

PDD_API_BASE = "https://pddimp.yandex.ru/api2/admin/dns"
_TOKEN_HEADER = "PddToken"
_TIMEOUT = 30
_MALFORMED = "malformed_response"
_UNSPECIFIED = "unspecified_error"

_ERROR_MESSAGES = {
    "unknown": "temporary provider error, try again later",
    _UNSPECIFIED: "provider reported failure without an error code",
    "no_token": "PDD token was not sent",
    "no_auth": "PDD token was not sent",
    "bad_token": "PDD token is invalid",
    "bad_oauth": "OAuth token is invalid",
    "not_allowed": "token owner is not allowed to manage this domain",
    "no_domain": "domain was not specified",
    "bad_domain": "domain name is invalid or not registered with the account",
    "prohibited": "domain name is prohibited",
    "blocked": "domain is blocked",
    "no_record": "record not found",
    "no_such_record": "record not found",
    "bad_record": "record parameters are invalid",
    "no_content": "record content was not specified",
    "bad_ttl": "record TTL is invalid",
}


def describe_error(code: str) -> str:
    """Translate a PDD error code into a readable message; unknown codes pass through."""
    return _ERROR_MESSAGES.get(code, code)


class ConnectDnsClient:
    """Thin client for the record-management endpoints of the Yandex.Connect DNS API.

    Every operation returns a ``ProviderResult``: the API answers HTTP 200 even when
    it rejects a call, so rejections come back as ``Failure`` values. Anything that
    prevents a usable answer (network, timeout, non-200, broken JSON) raises
    ``TransportError``. Nothing is retried.
    """

    def __init__(
        self,
        pdd_token: str,
        base_url: str = PDD_API_BASE,
        dump_http: bool = False,
        _http_client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {_TOKEN_HEADER: pdd_token}
        if _http_client is None:
            hooks = {"request": [_dump_request], "response": [_dump_response]} if dump_http else {}
            _http_client = httpx.Client(timeout=_TIMEOUT, event_hooks=hooks)
        self._client = _http_client

    def __enter__(self) -> ConnectDnsClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def list_records(self, domain: str) -> ProviderResult[list[DnsRecord]]:
        body = self._call(self._client.get, "list", {"domain": domain})
        if isinstance(body, Failure):
            return body
        raw = body.get("records")
        if not isinstance(raw, list):
            return Failure(_MALFORMED, f"list response for domain {domain} has no records array")
        try:
            records = [DnsRecord.from_dict(r) for r in raw]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            return Failure(_MALFORMED, f"list response for domain {domain} has an unreadable record: {exc!r}")
        logger.debug("Listed %d record(s) for domain %s", len(records), domain)
        return Ok(records)

    def create_record(self, domain: str, subdomain: str, content: str, ttl: int) -> ProviderResult[DnsRecord]:
        params = {
            "domain": domain,
            "subdomain": subdomain,
            "type": RecordType.TXT.value,
            "content": content,
            "ttl": ttl,
        }
        return self._record_result("add", domain, self._call(self._client.post, "add", params))

    def update_record(
        self,
        record_id: int,
        domain: str,
        subdomain: str,
        content: str,
        ttl: int,
    ) -> ProviderResult[DnsRecord]:
        params = {
            "record_id": record_id,
            "domain": domain,
            "subdomain": subdomain,
            "type": RecordType.TXT.value,
            "content": content,
            "ttl": ttl,
        }
        return self._record_result("edit", domain, self._call(self._client.post, "edit", params))

    def delete_record(self, record_id: int, domain: str) -> ProviderResult[None]:
        body = self._call(self._client.post, "del", {"record_id": record_id, "domain": domain})
        if isinstance(body, Failure):
            return body
        return Ok(None)

    def _record_result(self, action: str, domain: str, body: dict | Failure) -> ProviderResult[DnsRecord]:
        if isinstance(body, Failure):
            return body
        raw = body.get("record")
        if not isinstance(raw, dict):
            return Failure(_MALFORMED, f"{action} response for domain {domain} has no record object")
        try:
            return Ok(DnsRecord.from_dict(raw))
        except (KeyError, TypeError, ValueError) as exc:
            return Failure(_MALFORMED, f"{action} response for domain {domain} has an unreadable record: {exc!r}")

    def _call(self, send: Callable[..., httpx.Response], action: str, params: dict[str, Any]) -> dict | Failure:
        """Send one request and return the decoded envelope, or a Failure the API reported."""
        # params= lets httpx percent-encode every value.
        try:
            resp = send(f"{self._base_url}/{action}", params=params, headers=self._headers)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{action} request timed out after {_TIMEOUT}s", timeout=True) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{action} request failed: {exc}") from exc

        if resp.status_code != 200:
            raise TransportError(
                f"{action} request returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        if not resp.content:
            return Failure(_MALFORMED, f"{action} response body is empty")
        try:
            body = resp.json()
        except ValueError as exc:
            raise TransportError(f"{action} response is not valid JSON") from exc

        if not isinstance(body, dict) or "success" not in body:
            return Failure(_MALFORMED, f"{action} response has no success indicator")
        if body["success"] != "ok":
            code = str(body.get("error") or _UNSPECIFIED)
            domain = params.get("domain")
            logger.debug("Provider rejected %s for domain %s: %s", action, domain, code)
            return Failure(code, f"{action} request for domain {domain} failed: {describe_error(code)}")
        return body


def _redacted(headers: httpx.Headers) -> dict[str, str]:
    return {k: ("<redacted>" if k.lower() == _TOKEN_HEADER.lower() else v) for k, v in headers.items()}


def _dump_request(request: httpx.Request) -> None:
    logger.debug(
        "Request: %s %s headers=%s body=%r",
        request.method,
        request.url,
        _redacted(request.headers),
        request.content,
    )


def _dump_response(response: httpx.Response) -> None:
    response.read()
    logger.debug(
        "Response: %s %s -> %d headers=%s body=%r",
        response.request.method,
        response.request.url,
        response.status_code,
        dict(response.headers),
        response.content,
    )
