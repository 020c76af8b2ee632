"""Shared test fixtures for yandex-connect-dns-solver."""

import httpx
import pytest

import connect_dns.secret_store as _store
from connect_dns.dns.client import ConnectDnsClient


def pytest_runtest_setup(item):
    """Reset module-level caches between tests."""
    _store._credential = None


class FakePddApi:
    """In-memory stand-in for the PDD DNS endpoints, served through httpx.MockTransport."""

    def __init__(self, token="pdd-token", records=None):
        self.token = token
        self.records = list(records or [])
        self.calls = []
        self._next_id = 1000

    def handler(self, request: httpx.Request) -> httpx.Response:
        action = request.url.path.rsplit("/", 1)[-1]
        params = dict(request.url.params)
        self.calls.append((request.method, action, params))

        if request.headers.get("PddToken") != self.token:
            return httpx.Response(200, json={"success": "error", "error": "bad_token"})

        domain = params.get("domain")
        if action == "list":
            records = [r for r in self.records if r["domain"] == domain]
            return httpx.Response(200, json={"domain": domain, "records": records, "success": "ok"})
        if action == "add":
            self._next_id += 1
            record = self._record(self._next_id, params)
            self.records.append(record)
            return httpx.Response(200, json={"domain": domain, "record": record, "success": "ok"})
        if action == "edit":
            record_id = int(params["record_id"])
            for i, existing in enumerate(self.records):
                if existing["record_id"] == record_id:
                    self.records[i] = self._record(record_id, params)
                    return httpx.Response(
                        200, json={"domain": domain, "record": self.records[i], "success": "ok"}
                    )
            return httpx.Response(200, json={"domain": domain, "success": "error", "error": "no_such_record"})
        if action == "del":
            record_id = int(params["record_id"])
            before = len(self.records)
            self.records = [r for r in self.records if r["record_id"] != record_id]
            if len(self.records) == before:
                return httpx.Response(200, json={"domain": domain, "success": "error", "error": "no_such_record"})
            return httpx.Response(200, json={"domain": domain, "record_id": record_id, "success": "ok"})
        return httpx.Response(404)

    @staticmethod
    def _record(record_id, params):
        return {
            "record_id": record_id,
            "type": params["type"],
            "domain": params["domain"],
            "fqdn": f"{params['subdomain']}.{params['domain']}",
            "ttl": int(params["ttl"]),
            "subdomain": params["subdomain"],
            "content": params["content"],
            "priority": "",
        }

    def writes(self):
        return [c for c in self.calls if c[1] != "list"]


def make_record(record_id, subdomain="_acme-challenge", content="val", type="TXT", domain="example.com", ttl=300):
    return {
        "record_id": record_id,
        "type": type,
        "domain": domain,
        "fqdn": f"{subdomain}.{domain}",
        "ttl": ttl,
        "subdomain": subdomain,
        "content": content,
        "priority": "",
    }


@pytest.fixture
def pdd_api():
    return FakePddApi()


@pytest.fixture
def pdd_client(pdd_api):
    http_client = httpx.Client(transport=httpx.MockTransport(pdd_api.handler))
    with ConnectDnsClient("pdd-token", _http_client=http_client) as client:
        yield client
