"""
Catalog cache: the client's snapshot of every collection.

Refresh protocol:
- Session established → fetch all five collections concurrently and publish
  one new snapshot.
- Successful mutation → same full refetch, snapshot replaced wholesale.
- Session cleared → empty snapshot, not loading.
- Failed refetch → previous snapshot kept, ``error`` set until dismissed.
- Failed mutation → error raised to the caller and recorded, no refresh.

Views (inventory, request queue, donation board) are derived from the
current snapshot only, so joins across collections are always consistent.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import date
from typing import Any, Awaitable, Callable, Optional

import structlog
from pydantic import BaseModel

from petconnect_shared.board import URGENCY_WINDOW_DAYS, DonationBoard, DonationFilters, build_donation_board
from petconnect_shared.schemas.common import RequestStatus, ResourceType
from petconnect_shared.schemas.organizations import OrganizationRead
from petconnect_shared.schemas.requests import ResourceRequestCreate, ResourceRequestRead
from petconnect_shared.schemas.resources import ArticleRead, MedicineRead, RationRead, Resource

from .errors import AuthError, ForbiddenError, GatewayError, NotFoundError
from .gateway import ApiGateway
from .session import SessionManager

log = structlog.get_logger()


class CatalogSnapshot(BaseModel):
    """All five collections as fetched together."""

    model_config = {"frozen": True}

    organizations: tuple[OrganizationRead, ...] = ()
    medicines: tuple[MedicineRead, ...] = ()
    rations: tuple[RationRead, ...] = ()
    articles: tuple[ArticleRead, ...] = ()
    requests: tuple[ResourceRequestRead, ...] = ()

    @property
    def resources(self) -> list[Resource]:
        return [*self.medicines, *self.rations, *self.articles]

    def resources_of(self, resource_type: ResourceType) -> tuple[Resource, ...]:
        return {
            ResourceType.MEDICINES: self.medicines,
            ResourceType.RATIONS: self.rations,
            ResourceType.ARTICLES: self.articles,
        }[ResourceType(resource_type)]


EMPTY_SNAPSHOT = CatalogSnapshot()


class ResourceDetail(BaseModel):
    """One resource as fetched from the store, with its owner and the requests on it."""

    resource: Resource
    owner: Optional[OrganizationRead] = None
    requests: list[ResourceRequestRead] = []


class RequestQueueItem(BaseModel):
    """An incoming request joined to its resource and requesting organization."""

    request: ResourceRequestRead
    resource: Optional[Resource] = None
    requester: Optional[OrganizationRead] = None


class CatalogCache:
    """Read-optimized snapshot fed by full refetches through the gateway."""

    def __init__(
        self,
        gateway: ApiGateway,
        session: SessionManager,
        window_days: int = URGENCY_WINDOW_DAYS,
    ):
        self._gateway = gateway
        self._session = session
        self._window_days = window_days
        self.snapshot: CatalogSnapshot = EMPTY_SNAPSHOT
        self.loading = False
        self.error: Optional[str] = None
        session.subscribe(self.on_session_changed)

    # --- Refresh protocol ---

    async def on_session_changed(self, user: Optional[OrganizationRead]) -> None:
        if user is None:
            self.snapshot = EMPTY_SNAPSHOT
            self.loading = False
            self.error = None
            return
        await self.refresh()

    async def refresh(self) -> CatalogSnapshot:
        """Refetch every collection; on failure keep the last good snapshot."""
        if self._session.user is None:
            self.snapshot = EMPTY_SNAPSHOT
            self.loading = False
            return self.snapshot

        self.loading = True
        try:
            results = await asyncio.gather(
                self._gateway.list_organizations(),
                self._gateway.list_medicines(),
                self._gateway.list_rations(),
                self._gateway.list_articles(),
                self._gateway.list_resource_requests(),
                return_exceptions=True,
            )
        finally:
            self.loading = False

        # Every fetch has settled; a single failure discards the whole batch
        for result in results:
            if isinstance(result, GatewayError):
                self.error = result.message
                log.warning("catalog.refresh_failed", error=result.message)
                return self.snapshot
            if isinstance(result, BaseException):
                raise result

        organizations, medicines, rations, articles, requests = results
        self.snapshot = CatalogSnapshot(
            organizations=tuple(organizations),
            medicines=tuple(medicines),
            rations=tuple(rations),
            articles=tuple(articles),
            requests=tuple(requests),
        )
        self.error = None
        log.debug(
            "catalog.refreshed",
            organizations=len(organizations),
            resources=len(medicines) + len(rations) + len(articles),
            requests=len(requests),
        )
        return self.snapshot

    def clear_error(self) -> None:
        self.error = None

    async def _mutate(self, call: Callable[[], Awaitable[Any]]) -> Any:
        try:
            result = await call()
        except GatewayError as exc:
            self.error = exc.message
            log.warning("catalog.mutation_failed", error=exc.message, kind=type(exc).__name__)
            raise
        await self.refresh()
        return result

    # --- Mutations ---

    async def add_resource(self, resource_type: ResourceType, data: BaseModel | dict) -> Resource:
        return await self._mutate(lambda: self._gateway.add_resource(resource_type, data))

    async def update_resource(self, resource_type: ResourceType, record: Resource) -> Resource:
        return await self._mutate(lambda: self._gateway.update_resource(resource_type, record))

    async def request_resource(self, resource: Resource) -> ResourceRequestRead:
        """Ask the resource's owner for it on behalf of the session's organization."""
        user = self._require_user()
        data = ResourceRequestCreate(
            resource_id=resource.id,
            resource_type=resource.resource_type,
            donating_organization_id=resource.organization_id,
            requesting_organization_id=user.id,
        )
        return await self._mutate(lambda: self._gateway.create_resource_request(data))

    async def approve_request(self, request_id: uuid.UUID) -> ResourceRequestRead:
        return await self._answer(request_id, RequestStatus.APPROVED)

    async def reject_request(self, request_id: uuid.UUID) -> ResourceRequestRead:
        return await self._answer(request_id, RequestStatus.REJECTED)

    async def _answer(self, request_id: uuid.UUID, status: RequestStatus) -> ResourceRequestRead:
        """Only the donor may answer; refuse locally before reaching the store."""
        user = self._require_user()
        request = self.find_request(request_id)
        if request is None:
            self.error = "Request not found"
            raise NotFoundError(self.error, 404)
        if request.donating_organization_id != user.id:
            self.error = "Only the donating organization can answer this request"
            raise ForbiddenError(self.error, 403)
        return await self._mutate(
            lambda: self._gateway.update_resource_request_status(request_id, status)
        )

    def _require_user(self) -> OrganizationRead:
        if self._session.user is None:
            raise AuthError("Not logged in", 401)
        return self._session.user

    # --- Lookups ---

    def find_organization(self, org_id: uuid.UUID) -> Optional[OrganizationRead]:
        return next((o for o in self.snapshot.organizations if o.id == org_id), None)

    def find_resource(self, resource_type: ResourceType, resource_id: uuid.UUID) -> Optional[Resource]:
        return next(
            (r for r in self.snapshot.resources_of(resource_type) if r.id == resource_id), None
        )

    def find_request(self, request_id: uuid.UUID) -> Optional[ResourceRequestRead]:
        return next((r for r in self.snapshot.requests if r.id == request_id), None)

    async def resource_detail(
        self, resource_type: ResourceType, resource_id: uuid.UUID
    ) -> Optional[ResourceDetail]:
        """Fetch one resource fresh from the store and join it to the snapshot."""
        resource = await self._gateway.get_resource_by_id_and_type(ResourceType(resource_type), resource_id)
        if resource is None:
            return None
        return ResourceDetail(
            resource=resource,
            owner=self.find_organization(resource.organization_id),
            requests=[
                req
                for req in self.snapshot.requests
                if req.resource_id == resource.id and req.resource_type == resource.resource_type
            ],
        )

    # --- Views ---

    def inventory(self) -> list[Resource]:
        """The session organization's own resources, every status and variant."""
        if self._session.user is None:
            return []
        org_id = self._session.user.id
        return [r for r in self.snapshot.resources if r.organization_id == org_id]

    def request_queue(self, status: Optional[RequestStatus] = RequestStatus.PENDING) -> list[RequestQueueItem]:
        """Requests received by the session organization, oldest first."""
        if self._session.user is None:
            return []
        org_id = self._session.user.id
        return [
            RequestQueueItem(
                request=req,
                resource=self.find_resource(req.resource_type, req.resource_id),
                requester=self.find_organization(req.requesting_organization_id),
            )
            for req in self.snapshot.requests
            if req.donating_organization_id == org_id and (status is None or req.status == status)
        ]

    def donation_board(
        self, filters: Optional[DonationFilters] = None, today: Optional[date] = None
    ) -> DonationBoard:
        if self._session.user is None:
            return DonationBoard()
        return build_donation_board(
            self._session.user.id,
            self.snapshot.organizations,
            self.snapshot.resources,
            filters,
            today=today,
            window_days=self._window_days,
        )

