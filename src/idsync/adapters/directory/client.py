"""HTTP client for a directory domain's REST API.

Endpoints used (relative to the configured base URL)::

    GET    identities?page=&pageSize=        paged identity listing
    GET    identities/lookup?accountName=    account-name availability
    POST   identities                        create (payload + password)
    PATCH  identity?path=                    {"replace": {...}} or {"clear": [...]}
    POST   identity/disable?path=
    POST   identity/move?path=               {"targetPath": ...}
    DELETE identity?path=
    GET    identity/groups?path=
    POST   identity/groups/remove?path=      {"groups": [...]}
    GET    object/attribute?path=&name=      single attribute of any object
    PUT    object/attribute?path=&name=      {"value": ...}

The async client runs on one private event loop behind a synchronous facade,
so calls are issued strictly one after another.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from idsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from idsync.domain.errors import CounterUnavailableError, ExtractionError

from .schema import AttributeValue, ErrorResponse, GroupList, IdentityPage, LookupResponse
from .translator import identity_to_payload, parse_identity_model

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Mapping, Sequence
    from types import TracebackType

    from idsync.config.directory import DirectoryConfig
    from idsync.domain.model import IdentityRecord

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class DirectoryAPIError(RuntimeError):
    """Raised when the directory API rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpDirectory:
    """Directory reader and mutator backed by the REST API of one domain."""

    def __init__(
        self,
        config: DirectoryConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
    ) -> None:
        self.config = config
        self._runner = asyncio.Runner()
        self._client = client_factory(config.resilience)

    def __enter__(self) -> HttpDirectory:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._runner.run(self._client.aclose())
        self._runner.close()

    def _run[T](self, coro: Coroutine[object, object, T]) -> T:
        return self._runner.run(coro)

    # Reads -----------------------------------------------------------------

    def fetch_identities(self) -> list[IdentityRecord]:
        try:
            records = self._run(self._fetch_identities_async())
        except (DirectoryAPIError, httpx.HTTPError, ValidationError, ValueError) as exc:
            raise ExtractionError(self.config.role, str(exc)) from exc
        log.info("Fetched %s identities from %s directory", len(records), self.config.role)
        return records

    async def _fetch_identities_async(self) -> list[IdentityRecord]:
        records: list[IdentityRecord] = []
        page = 1
        while True:
            payload = await self._call(
                "GET",
                "identities",
                params={"page": page, "pageSize": self.config.page_size},
            )
            listing = IdentityPage.model_validate(payload)
            records.extend(parse_identity_model(item) for item in listing.items)
            if page >= listing.total_pages:
                break
            page += 1
        return records

    def list_groups(self, identity: str) -> list[str]:
        payload = self._run(self._call("GET", "identity/groups", params={"path": identity}))
        return GroupList.model_validate(payload).groups

    def account_name_exists(self, account_name: str) -> bool:
        payload = self._run(
            self._call("GET", "identities/lookup", params={"accountName": account_name})
        )
        return LookupResponse.model_validate(payload).exists

    def read_attribute(self, object_path: str, name: str) -> str | None:
        payload = self._run(
            self._call("GET", "object/attribute", params={"path": object_path, "name": name})
        )
        return AttributeValue.model_validate(payload).value

    # Mutations -------------------------------------------------------------

    def create(self, record: IdentityRecord, password: str) -> None:
        body = identity_to_payload(record)
        body["password"] = password
        self._run(self._call("POST", "identities", json=body))

    def replace_attributes(self, identity: str, values: Mapping[str, str]) -> None:
        self._run(
            self._call(
                "PATCH",
                "identity",
                params={"path": identity},
                json={"replace": dict(values)},
            )
        )

    def clear_attributes(self, identity: str, names: Sequence[str]) -> None:
        self._run(
            self._call(
                "PATCH",
                "identity",
                params={"path": identity},
                json={"clear": list(names)},
            )
        )

    def disable(self, identity: str) -> None:
        self._run(self._call("POST", "identity/disable", params={"path": identity}))

    def move(self, identity: str, target_path: str) -> None:
        self._run(
            self._call(
                "POST",
                "identity/move",
                params={"path": identity},
                json={"targetPath": target_path},
            )
        )

    def delete(self, identity: str) -> None:
        self._run(self._call("DELETE", "identity", params={"path": identity}))

    def remove_group_membership(self, identity: str, groups: Sequence[str]) -> None:
        self._run(
            self._call(
                "POST",
                "identity/groups/remove",
                params={"path": identity},
                json={"groups": list(groups)},
            )
        )

    def write_attribute(self, object_path: str, name: str, value: str) -> None:
        self._run(
            self._call(
                "PUT",
                "object/attribute",
                params={"path": object_path, "name": name},
                json={"value": value},
            )
        )

    # Transport -------------------------------------------------------------

    async def _call(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str | int] | None = None,
        json: object = None,
    ) -> object:
        query = httpx.QueryParams(dict(params)) if params is not None else None
        response = await self._client.request(method, url, params=query, json=json)

        if response.is_error:
            message = f"{method} {url} failed with HTTP {response.status_code}"
            try:
                error = ErrorResponse.model_validate(response.json())
            except ValueError:
                pass
            else:
                message = f"{message}: {error.error} {error.message}".rstrip()
            log.error(message)
            raise DirectoryAPIError(message, status_code=response.status_code)

        if not response.content:
            return None
        return response.json()


class HttpIdCounter:
    """Numeric-ID counter stored as an attribute of a directory object."""

    def __init__(self, directory: HttpDirectory, object_path: str, attribute: str) -> None:
        self.directory = directory
        self.object_path = object_path
        self.attribute = attribute

    def read(self) -> int:
        try:
            raw = self.directory.read_attribute(self.object_path, self.attribute)
        except (DirectoryAPIError, httpx.HTTPError, ValidationError) as exc:
            raise CounterUnavailableError(
                f"Cannot read {self.attribute} on {self.object_path}: {exc}"
            ) from exc
        if raw is None or not raw.strip().isdigit():
            raise CounterUnavailableError(
                f"{self.attribute} on {self.object_path} holds no number: {raw!r}"
            )
        return int(raw)

    def write(self, value: int) -> None:
        self.directory.write_attribute(self.object_path, self.attribute, str(value))

