"""
API gateway: the single seam between the client and the resource store.

One async method per store operation. Each returns plain pydantic models or
raises a ``GatewayError`` subclass; "not found" on a read is a ``None``
result, not an error.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaError

from petconnect_shared.board import DonationBoard, DonationFilters
from petconnect_shared.schemas.auth import SessionResponse
from petconnect_shared.schemas.common import RequestStatus, ResourceType
from petconnect_shared.schemas.organizations import (
    OrganizationProfile,
    OrganizationRead,
    OrganizationStats,
)
from petconnect_shared.schemas.requests import ResourceRequestCreate, ResourceRequestRead
from petconnect_shared.schemas.resources import (
    CREATE_SCHEMAS,
    ArticleRead,
    MedicineRead,
    RationRead,
    Resource,
)

from .errors import AuthError, GatewayError, NetworkError, NotFoundError, ValidationError, error_for_status

log = structlog.get_logger()

CSRF_COOKIE = "pc_csrf"
CSRF_HEADER = "X-CSRF-Token"
UNSAFE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

_resource_adapter: TypeAdapter[Resource] = TypeAdapter(Resource)
_resource_list_adapter: TypeAdapter[list[Resource]] = TypeAdapter(list[Resource])
_org_list_adapter = TypeAdapter(list[OrganizationRead])
_request_list_adapter = TypeAdapter(list[ResourceRequestRead])


class ApiGateway:
    """
    Typed client for the resource store's HTTP API.

    Holds the session cookies between calls and echoes the CSRF cookie on
    every unsafe request.
    """

    def __init__(
        self,
        base_url: str,
        verify_tls: bool = True,
        request_timeout: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._verify_tls = verify_tls
        self._request_timeout = request_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def open(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._request_timeout),
            verify=self._verify_tls,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiGateway":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # --- Transport ---

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        assert self._client, "gateway is not open"
        headers = {}
        if method in UNSAFE_METHODS:
            csrf = self._client.cookies.get(CSRF_COOKIE)
            if csrf:
                headers[CSRF_HEADER] = csrf

        try:
            resp = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TransportError as exc:
            log.error("gateway.transport_error", method=method, path=path, error=str(exc))
            raise NetworkError(f"Could not reach the server: {exc}") from exc

        if resp.is_success:
            return resp.json()

        message = _error_message(resp)
        log.warning("gateway.request_failed", method=method, path=path, status=resp.status_code)
        raise error_for_status(resp.status_code, message)

    async def _get_or_none(self, path: str) -> Any:
        try:
            return await self._request("GET", path)
        except NotFoundError:
            return None

    # --- Session ---

    async def login(self, email: str, password: str) -> OrganizationRead:
        """Open a session. Unknown email and wrong password raise the same AuthError."""
        try:
            data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        except (AuthError, ValidationError) as exc:
            raise AuthError("Invalid email or password", exc.status_code) from exc
        return SessionResponse.model_validate(data).organization

    async def logout(self) -> None:
        """Close the session. Best effort: never raises."""
        try:
            await self._request("POST", "/auth/logout")
        except GatewayError as exc:
            log.warning("gateway.logout_failed", error=exc.message)
        finally:
            if self._client:
                self._client.cookies.clear()

    async def get_authenticated_user(self) -> Optional[OrganizationRead]:
        try:
            data = await self._request("GET", "/auth/me")
        except AuthError:
            return None
        return SessionResponse.model_validate(data).organization

    async def register_ngo(self, profile: OrganizationProfile, password: str) -> OrganizationRead:
        """Create a pending organization. Does not open a session."""
        body = {**profile.model_dump(mode="json"), "password": password}
        return OrganizationRead.model_validate(await self._request("POST", "/auth/register", json=body))

    # --- Organizations ---

    async def list_organizations(self) -> list[OrganizationRead]:
        return _org_list_adapter.validate_python(await self._request("GET", "/api/v1/organizations"))

    async def get_organization_by_id(self, org_id: uuid.UUID) -> Optional[OrganizationRead]:
        data = await self._get_or_none(f"/api/v1/organizations/{org_id}")
        return OrganizationRead.model_validate(data) if data is not None else None

    async def get_organization_stats(self, org_id: uuid.UUID) -> OrganizationStats:
        return OrganizationStats.model_validate(
            await self._request("GET", f"/api/v1/organizations/{org_id}/stats")
        )

    # --- Resources ---

    async def list_resources(self, resource_type: ResourceType) -> list[Resource]:
        data = await self._request("GET", f"/api/v1/resources/{resource_type.value}")
        return _resource_list_adapter.validate_python(data)

    async def list_medicines(self) -> list[MedicineRead]:
        return await self.list_resources(ResourceType.MEDICINES)

    async def list_rations(self) -> list[RationRead]:
        return await self.list_resources(ResourceType.RATIONS)

    async def list_articles(self) -> list[ArticleRead]:
        return await self.list_resources(ResourceType.ARTICLES)

    async def get_resource_by_id_and_type(
        self, resource_type: ResourceType, resource_id: uuid.UUID
    ) -> Optional[Resource]:
        data = await self._get_or_none(f"/api/v1/resources/{resource_type.value}/{resource_id}")
        return _resource_adapter.validate_python(data) if data is not None else None

    async def add_resource(self, resource_type: ResourceType, data: BaseModel | dict) -> Resource:
        """Store assigns id, created_at, owner and status=available."""
        body = _editable_fields(resource_type, data)
        created = await self._request("POST", f"/api/v1/resources/{resource_type.value}", json=body)
        return _resource_adapter.validate_python(created)

    async def update_resource(self, resource_type: ResourceType, record: Resource) -> Resource:
        """Replace every editable field of ``record`` by id."""
        body = _editable_fields(resource_type, record)
        updated = await self._request(
            "PUT", f"/api/v1/resources/{resource_type.value}/{record.id}", json=body
        )
        return _resource_adapter.validate_python(updated)

    # --- Requests ---

    async def create_resource_request(self, data: ResourceRequestCreate) -> ResourceRequestRead:
        created = await self._request("POST", "/api/v1/requests", json=data.model_dump(mode="json"))
        return ResourceRequestRead.model_validate(created)

    async def list_resource_requests(self) -> list[ResourceRequestRead]:
        """Every request the session's organization gives or receives."""
        return _request_list_adapter.validate_python(await self._request("GET", "/api/v1/requests"))

    async def list_resource_requests_for_organization(
        self, org_id: uuid.UUID
    ) -> list[ResourceRequestRead]:
        """Requests where ``org_id`` is the donor."""
        data = await self._request(
            "GET", "/api/v1/requests", params={"donating_organization_id": str(org_id)}
        )
        return _request_list_adapter.validate_python(data)

    async def update_resource_request_status(
        self, request_id: uuid.UUID, status: RequestStatus
    ) -> ResourceRequestRead:
        data = await self._request(
            "POST",
            f"/api/v1/requests/{request_id}/transition",
            json={"to_status": RequestStatus(status).value},
        )
        return ResourceRequestRead.model_validate(data)

    # --- Derived computations ---

    async def search_donations(self, filters: DonationFilters | None = None) -> DonationBoard:
        params = (filters or DonationFilters()).model_dump()
        params["urgent_only"] = "true" if params["urgent_only"] else "false"
        return DonationBoard.model_validate(await self._request("GET", "/api/v1/donations", params=params))


def _editable_fields(resource_type: ResourceType, data: BaseModel | dict) -> dict:
    """Project a record (or raw dict) onto the variant's editable fields."""
    raw = data.model_dump() if isinstance(data, BaseModel) else data
    try:
        return CREATE_SCHEMAS[resource_type].model_validate(raw).model_dump(mode="json")
    except SchemaError as exc:
        raise ValidationError(str(exc)) from exc


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if detail:
        if isinstance(detail, list):
            return "; ".join(err.get("msg", str(err)) if isinstance(err, dict) else str(err) for err in detail)
        return str(detail)
    return f"Server error ({resp.status_code})"
