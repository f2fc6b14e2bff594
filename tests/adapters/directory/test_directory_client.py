from __future__ import annotations

import json
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from idsync.adapters.directory import DirectoryAPIError, HttpDirectory, HttpIdCounter
from idsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from idsync.config.directory import DirectoryConfig
from idsync.domain.errors import CounterUnavailableError, ExtractionError
from tests.helpers.directory import INACTIVE, make_identity

BASE_URL = "https://target.example/api/"

type Handler = Callable[[httpx.Request], httpx.Response]


def _make_client_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=BASE_URL,
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


def _directory(handler: Handler, *, page_size: int = 2) -> HttpDirectory:
    config = DirectoryConfig(
        role="target",
        base_url=BASE_URL,
        token="token",
        page_size=page_size,
        resilience=ResilienceConfig(name="directory-test", base_url=BASE_URL),
    )
    return HttpDirectory(config, client_factory=_make_client_factory(handler))


def _identity_payload(identifier: str, name: str) -> dict[str, object]:
    return {
        "employeeID": identifier,
        "sAMAccountName": name,
        "distinguishedName": f"CN={name},OU=Staff,DC=corp,DC=example",
        "mail": f"{name}@corp.example",
        "givenName": "Given",
        "sn": None,
        "enabled": True,
        "accountExpires": "",
        "exemptFromRemoval": "TRUE",
        "extensionAttributes": {"costCenter": "42", "pager": None},
    }


def test_fetch_identities_follows_pages() -> None:
    seen_pages: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/identities"
        assert request.url.params["pageSize"] == "2"
        page = request.url.params["page"]
        seen_pages.append(page)
        items = (
            [_identity_payload("1", "ann"), _identity_payload("2", "bob")]
            if page == "1"
            else [_identity_payload("3", "cid")]
        )
        return httpx.Response(200, json={"items": items, "page": int(page), "totalPages": 2})

    with _directory(handler) as directory:
        records = directory.fetch_identities()

    assert seen_pages == ["1", "2"]
    assert [record.account_name for record in records] == ["ann", "bob", "cid"]
    first = records[0]
    assert first.surname == ""
    assert first.expires_at is None
    assert first.exemption == "TRUE"
    assert first.extensions == {"costCenter": "42"}


def test_fetch_failure_is_reported_as_extraction_error() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": "forbidden", "message": "token expired"})

    with _directory(handler) as directory, pytest.raises(ExtractionError) as excinfo:
        directory.fetch_identities()

    assert "target" in str(excinfo.value)
    assert "forbidden token expired" in str(excinfo.value)


def test_malformed_listing_is_an_extraction_error() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": [{"sAMAccountName": "no-id"}]})

    with _directory(handler) as directory, pytest.raises(ExtractionError):
        directory.fetch_identities()


def test_mutations_send_expected_requests() -> None:
    requests: list[tuple[str, str, dict[str, str], object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        requests.append((request.method, request.url.path, dict(request.url.params), body))
        return httpx.Response(204)

    identity = "CN=ann,OU=Staff,DC=corp,DC=example"
    with _directory(handler) as directory:
        directory.replace_attributes(identity, {"mail": "a@x"})
        directory.clear_attributes(identity, ["title"])
        directory.disable(identity)
        directory.remove_group_membership(identity, ["CN=VPN"])
        directory.move(identity, "OU=Leavers,DC=corp,DC=example")
        directory.delete(identity)

    path = {"path": identity}
    assert requests == [
        ("PATCH", "/api/identity", path, {"replace": {"mail": "a@x"}}),
        ("PATCH", "/api/identity", path, {"clear": ["title"]}),
        ("POST", "/api/identity/disable", path, None),
        ("POST", "/api/identity/groups/remove", path, {"groups": ["CN=VPN"]}),
        ("POST", "/api/identity/move", path, {"targetPath": "OU=Leavers,DC=corp,DC=example"}),
        ("DELETE", "/api/identity", path, None),
    ]


def test_create_posts_payload_with_password() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert (request.method, request.url.path) == ("POST", "/api/identities")
        bodies.append(json.loads(request.content))
        return httpx.Response(201)

    record = make_identity(
        "42", "jdoe", container=INACTIVE, enabled=False, extensions={"uidNumber": "5000"}
    )
    with _directory(handler) as directory:
        directory.create(record, "Secret-123!")

    (body,) = bodies
    assert body["employeeID"] == "42"
    assert body["sAMAccountName"] == "jdoe"
    assert body["distinguishedName"] == f"CN=jdoe,{INACTIVE}"
    assert body["enabled"] is False
    assert body["extensionAttributes"] == {"uidNumber": "5000"}
    assert body["password"] == "Secret-123!"
    assert "exemptFromRemoval" not in body


def test_reads_for_groups_and_lookups() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/identity/groups":
            return httpx.Response(200, json={"groups": ["CN=VPN", "CN=Staff"]})
        if request.url.path == "/api/identities/lookup":
            return httpx.Response(200, json={"exists": request.url.params["accountName"] == "ann"})
        return httpx.Response(404)

    with _directory(handler) as directory:
        assert directory.list_groups("CN=ann") == ["CN=VPN", "CN=Staff"]
        assert directory.account_name_exists("ann")
        assert not directory.account_name_exists("bob")


def test_rejected_mutation_raises_api_error() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, text="conflict")

    with _directory(handler) as directory, pytest.raises(DirectoryAPIError) as excinfo:
        directory.disable("CN=ann")

    assert excinfo.value.status_code == 409


def test_id_counter_reads_and_writes_attribute() -> None:
    state = {"value": "7000"}
    writes: list[object] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/object/attribute"
        assert request.url.params["name"] == "uidNumber"
        if request.method == "PUT":
            writes.append(json.loads(request.content))
            return httpx.Response(204)
        return httpx.Response(200, json={"value": state["value"]})

    with _directory(handler) as directory:
        counter = HttpIdCounter(directory, "CN=uid-counter,DC=corp", "uidNumber")
        assert counter.read() == 7000
        counter.write(7001)

    assert writes == [{"value": "7001"}]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"error": "not found"}),
        httpx.Response(200, json={"value": None}),
        httpx.Response(200, json={"value": "abc"}),
    ],
)
def test_unreadable_counter_raises_counter_unavailable(response: httpx.Response) -> None:
    with _directory(lambda _request: response) as directory:
        counter = HttpIdCounter(directory, "CN=uid-counter,DC=corp", "uidNumber")
        with pytest.raises(CounterUnavailableError):
            counter.read()
