"""Generic CRUD engine shared by every Beeswax resource.

A resource is described by a `ResourceConfig` record (path, id field, alias
table, optional request-shaping hook, capability flags); `Resource` turns
that record into find/query/query_all/create/edit/delete calls.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

from beeswax_client.models.entities import Entity
from beeswax_client.models.envelope import BeeswaxResponse
from beeswax_client.resources.compat import FieldAlias, SchemaMode, normalize_fields
from beeswax_client.session import SessionManager
from beeswax_client.utils.errors import ApiError, BeeswaxError, NotFoundError
from beeswax_client.utils.pagination import PAGE_SIZE, paginate
from beeswax_client.utils.records import is_plain_record, records_of

logger = logging.getLogger(__name__)

EMPTY_BODY_MESSAGE = "Body must be non-empty object"


class ResourceConfig(BaseModel):
    """Declarative description of one REST resource."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    id_field: str
    model: type[Entity] = Entity
    aliases: tuple[FieldAlias, ...] = ()
    defaults: dict[str, Any] = {}
    current_create_path: str | None = None
    read_only_fields: frozenset[str] = frozenset()
    prepare: Callable[[dict[str, Any], SchemaMode], dict[str, Any]] | None = None
    # Deprecated resources: writes return a structured error, reads are best-effort
    writes_disabled: bool = False
    disabled_code: int = 410
    disabled_message: str = ""


def _error_messages(body: Any) -> list[str]:
    """Collect every message string from an API error body."""
    messages: list[str] = []
    if not isinstance(body, dict):
        return messages
    if isinstance(body.get("message"), str):
        messages.append(body["message"])
    payload = body.get("payload")
    items = payload if isinstance(payload, list) else [payload]
    for item in items:
        if not isinstance(item, dict):
            continue
        message = item.get("message")
        if isinstance(message, str):
            messages.append(message)
        elif isinstance(message, list):
            messages.extend(str(m) for m in message)
    return messages


def is_not_found_error(error: ApiError, action: str) -> bool:
    """True if the API said the object to update/delete does not exist."""
    if error.status_code == 404:
        return True
    pattern = re.compile(rf"Could not load object.*to {action}", re.IGNORECASE)
    return any(pattern.search(message) for message in _error_messages(error.body))


def _created_id(payload: Any, id_field: str) -> Any:
    for record in records_of(payload):
        for key in ("id", id_field):
            if record.get(key) is not None:
                return record[key]
    return None


class Resource:
    """CRUD operations for one resource, driven by its config."""

    def __init__(
        self,
        session: SessionManager,
        config: ResourceConfig,
        schema_mode: SchemaMode = "legacy",
        page_size: int = PAGE_SIZE,
    ) -> None:
        self._session = session
        self._config = config
        self._schema_mode = schema_mode
        self._page_size = page_size

    @property
    def config(self) -> ResourceConfig:
        return self._config

    @property
    def id_field(self) -> str:
        return self._config.id_field

    @property
    def schema_mode(self) -> SchemaMode:
        return self._schema_mode

    def parse(self, record: dict[str, Any]) -> Entity:
        """Typed view of a raw record."""
        return self._config.model.model_validate(record)

    def prepare(self, body: dict[str, Any]) -> dict[str, Any]:
        """Normalize field aliases and apply the resource's shaping hook."""
        shaped = normalize_fields(body, self._config.aliases, self._schema_mode)
        if self._config.prepare is not None:
            shaped = self._config.prepare(shaped, self._schema_mode)
        return shaped

    # ── Reads ────────────────────────────────────────────────────────

    async def find(self, id: int | str) -> BeeswaxResponse:
        """Fetch one record by id; `success: false, code: 404` if absent."""
        response = await self._session.request(
            "GET", self._config.path, body={self.id_field: id}
        )
        records = records_of(response.get("payload"))
        if not records:
            return BeeswaxResponse.failure(f"{self._config.name} {id} not found", code=404)
        return BeeswaxResponse.ok(records[0])

    async def query(self, body: dict[str, Any] | None = None) -> BeeswaxResponse:
        """Fetch one page of records matching the filter."""
        try:
            response = await self._session.request("GET", self._config.path, body=body or {})
        except BeeswaxError as e:
            if not self._config.writes_disabled:
                raise
            logger.warning(f"Query on deprecated {self._config.name} failed: {e}")
            return BeeswaxResponse.ok([], message=self._config.disabled_message)
        return BeeswaxResponse.ok(records_of(response.get("payload")))

    async def query_all(self, body: dict[str, Any] | None = None) -> BeeswaxResponse:
        """Fetch every record matching the filter, page by page in id order."""

        async def fetch(page_body: dict[str, Any]) -> list[dict[str, Any]]:
            page = await self.query(page_body)
            return page.payload or []

        records = await paginate(
            fetch, dict(body or {}), page_size=self._page_size, sort_by=self.id_field
        )
        return BeeswaxResponse.ok(records)

    # ── Writes ───────────────────────────────────────────────────────

    def _disabled(self) -> BeeswaxResponse:
        return BeeswaxResponse.failure(
            self._config.disabled_message or f"{self._config.name} is read only",
            code=self._config.disabled_code,
        )

    @staticmethod
    def _as_record(body: Any) -> Any:
        if isinstance(body, Entity):
            return body.to_record()
        return body

    def _create_path(self) -> str:
        if self._schema_mode == "current" and self._config.current_create_path:
            return self._config.current_create_path
        return f"{self._config.path}/strict"

    async def create(self, body: dict[str, Any] | Entity) -> BeeswaxResponse:
        """Create a record and return it re-fetched from the API."""
        if self._config.writes_disabled:
            return self._disabled()
        body = self._as_record(body)
        if not is_plain_record(body) or not body:
            return BeeswaxResponse.failure(EMPTY_BODY_MESSAGE, code=400)

        prepared = self.prepare({**self._config.defaults, **body})
        response = await self._session.request("POST", self._create_path(), body=prepared)

        new_id = _created_id(response.get("payload"), self.id_field)
        if new_id is None:
            return BeeswaxResponse.from_envelope(response)
        return await self.find(new_id)

    async def edit(
        self,
        id: int | str,
        body: dict[str, Any] | Entity,
        fail_on_not_found: bool = False,
    ) -> BeeswaxResponse:
        """Update a record and return it re-fetched.

        Raises:
            NotFoundError: Only when fail_on_not_found is set.
        """
        if self._config.writes_disabled:
            return self._disabled()
        body = self._as_record(body)
        if not is_plain_record(body) or not body:
            return BeeswaxResponse.failure(EMPTY_BODY_MESSAGE, code=400)

        update = self.prepare(body)
        update[self.id_field] = id
        try:
            await self._session.request("PUT", f"{self._config.path}/strict", body=update)
        except ApiError as e:
            return self._not_found(e, id, "update", fail_on_not_found)
        return await self.find(id)

    async def delete(self, id: int | str, fail_on_not_found: bool = False) -> BeeswaxResponse:
        """Delete a record.

        Raises:
            NotFoundError: Only when fail_on_not_found is set.
        """
        if self._config.writes_disabled:
            return self._disabled()
        try:
            response = await self._session.request(
                "DELETE", f"{self._config.path}/strict", body={self.id_field: id}
            )
        except ApiError as e:
            return self._not_found(e, id, "delete", fail_on_not_found)
        records = records_of(response.get("payload"))
        return BeeswaxResponse.ok(records[0] if records else None)

    def _not_found(
        self, error: ApiError, id: int | str, action: str, fail_on_not_found: bool
    ) -> BeeswaxResponse:
        if not is_not_found_error(error, action):
            raise error
        if fail_on_not_found:
            raise NotFoundError(
                f"Could not load {self._config.name} {id} to {action}",
                error.method, error.path, status_code=error.status_code, body=error.body,
            ) from error
        return BeeswaxResponse.failure(f"{self._config.name} {id} not found", code=404)
