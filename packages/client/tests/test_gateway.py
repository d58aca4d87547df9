"""
Tests for the API gateway against the real store app.

Covers the operation table: results, "absent is None" reads, and the
mapping of store failures onto the error taxonomy.
"""

from __future__ import annotations

import uuid

import httpx
import pytest

from client_helpers import COLEIRA, DRONTAL, GOLDEN, PASSWORD, profile

from petconnect_client.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    ValidationError,
    error_for_status,
)
from petconnect_client.gateway import ApiGateway
from petconnect_shared.board import DonationFilters
from petconnect_shared.schemas.common import OrganizationStatus, RequestStatus, ResourceStatus, ResourceType
from petconnect_shared.schemas.requests import ResourceRequestCreate


# ---------------------------------------------------------------------------
# Error mapping (no server)
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @pytest.mark.parametrize("status,cls", [
        (401, AuthError),
        (403, ForbiddenError),
        (404, NotFoundError),
        (409, ConflictError),
        (422, ValidationError),
        (500, NetworkError),
        (503, NetworkError),
        (418, NetworkError),
    ])
    def test_status_to_error(self, status, cls):
        err = error_for_status(status, "boom")
        assert type(err) is cls
        assert err.status_code == status
        assert err.message == "boom"

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self):
        def _handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with ApiGateway("http://test", transport=httpx.MockTransport(_handler)) as gateway:
            with pytest.raises(NetworkError):
                await gateway.list_organizations()

    @pytest.mark.asyncio
    async def test_server_error_is_network_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="oops"))
        async with ApiGateway("http://test", transport=transport) as gateway:
            with pytest.raises(NetworkError) as exc_info:
                await gateway.list_articles()
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_logout_never_raises(self):
        def _handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with ApiGateway("http://test", transport=httpx.MockTransport(_handler)) as gateway:
            await gateway.logout()


# ---------------------------------------------------------------------------
# Session operations
# ---------------------------------------------------------------------------


class TestSessionOperations:
    @pytest.mark.asyncio
    async def test_register_is_pending_and_opens_no_session(self, gateway):
        org = await gateway.register_ngo(profile("focinhos@test.com", name="Focinhos Carentes"), PASSWORD)
        assert org.status == OrganizationStatus.PENDING
        assert await gateway.get_authenticated_user() is None

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, gateway):
        await gateway.register_ngo(profile("caosemfome@test.com"), PASSWORD)
        with pytest.raises(ConflictError):
            await gateway.register_ngo(profile("caosemfome@test.com", name="Outra"), PASSWORD)

    @pytest.mark.asyncio
    async def test_email_identity_ignores_case(self, gateway):
        registered = await gateway.register_ngo(profile("ngo@test.com"), PASSWORD)
        with pytest.raises(ConflictError):
            await gateway.register_ngo(profile("NGO@test.com", name="Outra"), PASSWORD)

        org = await gateway.login("Ngo@test.com", PASSWORD)
        assert org.id == registered.id

    @pytest.mark.asyncio
    async def test_login_and_session_check(self, gateway):
        registered = await gateway.register_ngo(profile("caosemfome@test.com"), PASSWORD)
        org = await gateway.login("caosemfome@test.com", PASSWORD)
        assert org.id == registered.id
        me = await gateway.get_authenticated_user()
        assert me is not None and me.id == registered.id

        await gateway.logout()
        assert await gateway.get_authenticated_user() is None

    @pytest.mark.asyncio
    async def test_bad_credentials_are_one_generic_error(self, gateway):
        await gateway.register_ngo(profile("caosemfome@test.com"), PASSWORD)

        with pytest.raises(AuthError) as wrong:
            await gateway.login("caosemfome@test.com", "not-the-password")
        with pytest.raises(AuthError) as unknown:
            await gateway.login("nobody@test.com", PASSWORD)
        with pytest.raises(AuthError) as malformed:
            await gateway.login("not-an-email", PASSWORD)
        assert wrong.value.message == unknown.value.message == malformed.value.message


# ---------------------------------------------------------------------------
# Catalog operations
# ---------------------------------------------------------------------------


class TestReads:
    @pytest.mark.asyncio
    async def test_absent_records_are_none(self, make_ngo):
        ngo = await make_ngo("caosemfome@test.com")
        gateway = ngo.gateway
        assert await gateway.get_organization_by_id(uuid.uuid4()) is None
        assert await gateway.get_resource_by_id_and_type(ResourceType.ARTICLES, uuid.uuid4()) is None

        me = await gateway.get_organization_by_id(ngo.org.id)
        assert me.contact_email == "caosemfome@test.com"

    @pytest.mark.asyncio
    async def test_reads_require_session(self, gateway):
        with pytest.raises(AuthError):
            await gateway.list_organizations()


class TestResources:
    @pytest.mark.asyncio
    async def test_add_each_variant(self, make_ngo):
        gateway = (await make_ngo("patasunidas@test.com", name="Patas Unidas", state="RJ")).gateway

        medicine = await gateway.add_resource(ResourceType.MEDICINES, DRONTAL)
        ration = await gateway.add_resource(ResourceType.RATIONS, GOLDEN)
        article = await gateway.add_resource(ResourceType.ARTICLES, COLEIRA.model_dump())

        assert medicine.resource_type == "medicines" and medicine.status == ResourceStatus.AVAILABLE
        assert ration.quantity_kg == 15
        assert article.category == "accessories"
        assert [m.id for m in await gateway.list_medicines()] == [medicine.id]
        assert [r.id for r in await gateway.list_rations()] == [ration.id]
        assert [a.id for a in await gateway.list_articles()] == [article.id]

        fetched = await gateway.get_resource_by_id_and_type(ResourceType.RATIONS, ration.id)
        assert fetched == ration

    @pytest.mark.asyncio
    async def test_update_replaces_record(self, make_ngo):
        gateway = (await make_ngo("caosemfome@test.com")).gateway
        article = await gateway.add_resource(ResourceType.ARTICLES, COLEIRA)

        updated = await gateway.update_resource(
            ResourceType.ARTICLES, article.model_copy(update={"quantity": 2, "notes": "Duas unidades"})
        )
        assert updated.id == article.id
        assert updated.quantity == 2
        assert updated.notes == "Duas unidades"

    @pytest.mark.asyncio
    async def test_update_missing_is_not_found(self, make_ngo):
        gateway = (await make_ngo("caosemfome@test.com")).gateway
        article = await gateway.add_resource(ResourceType.ARTICLES, COLEIRA)

        with pytest.raises(NotFoundError):
            await gateway.update_resource(ResourceType.ARTICLES, article.model_copy(update={"id": uuid.uuid4()}))

    @pytest.mark.asyncio
    async def test_invalid_payload_is_validation_error(self, make_ngo):
        gateway = (await make_ngo("caosemfome@test.com")).gateway
        with pytest.raises(ValidationError):
            await gateway.add_resource(ResourceType.RATIONS, {"brand": "X", "quantity_kg": -1, "expiration_date": "2025-01-01"})

    @pytest.mark.asyncio
    async def test_pending_org_is_forbidden(self, make_ngo):
        gateway = (await make_ngo("focinhos@test.com", verified=False)).gateway
        with pytest.raises(ForbiddenError):
            await gateway.add_resource(ResourceType.ARTICLES, COLEIRA)


class TestRequests:
    @pytest.mark.asyncio
    async def test_request_lifecycle(self, make_ngo):
        donor = await make_ngo("caosemfome@test.com")
        requester = await make_ngo("patasunidas@test.com", name="Patas Unidas", state="RJ")
        article = await donor.gateway.add_resource(ResourceType.ARTICLES, COLEIRA)

        req = await requester.gateway.create_resource_request(
            ResourceRequestCreate(
                resource_id=article.id,
                resource_type=ResourceType.ARTICLES,
                donating_organization_id=donor.org.id,
                requesting_organization_id=requester.org.id,
            )
        )
        assert req.status == RequestStatus.PENDING

        incoming = await donor.gateway.list_resource_requests_for_organization(donor.org.id)
        assert [r.id for r in incoming] == [req.id]
        assert [r.id for r in await requester.gateway.list_resource_requests()] == [req.id]

        approved = await donor.gateway.update_resource_request_status(req.id, RequestStatus.APPROVED)
        assert approved.status == RequestStatus.APPROVED
        donated = await donor.gateway.get_resource_by_id_and_type(ResourceType.ARTICLES, article.id)
        assert donated.status == ResourceStatus.DONATED

        with pytest.raises(ConflictError):
            await donor.gateway.update_resource_request_status(req.id, RequestStatus.REJECTED)

    @pytest.mark.asyncio
    async def test_unresolvable_request_is_not_found(self, make_ngo):
        donor = await make_ngo("caosemfome@test.com")
        requester = await make_ngo("patasunidas@test.com", name="Patas Unidas", state="RJ")

        with pytest.raises(NotFoundError):
            await requester.gateway.create_resource_request(
                ResourceRequestCreate(
                    resource_id=uuid.uuid4(),
                    resource_type=ResourceType.ARTICLES,
                    donating_organization_id=donor.org.id,
                    requesting_organization_id=requester.org.id,
                )
            )
        with pytest.raises(NotFoundError):
            await donor.gateway.update_resource_request_status(uuid.uuid4(), RequestStatus.APPROVED)


class TestDerived:
    @pytest.mark.asyncio
    async def test_search_and_stats(self, make_ngo):
        donor = await make_ngo("patasunidas@test.com", name="Patas Unidas", state="RJ")
        viewer = await make_ngo("caosemfome@test.com")
        await donor.gateway.add_resource(ResourceType.MEDICINES, DRONTAL)
        await donor.gateway.add_resource(ResourceType.RATIONS, GOLDEN)

        board = await viewer.gateway.search_donations(DonationFilters(query="drontal"))
        assert [i.resource.resource_type for i in board.items] == ["medicines"]
        assert board.states == ["RJ"]

        # The donor's own listings never show on its board
        assert (await donor.gateway.search_donations()).items == []

        stats = await viewer.gateway.get_organization_stats(donor.org.id)
        assert stats.total_resources == 2
        assert stats.resources[ResourceType.RATIONS][ResourceStatus.AVAILABLE] == 1
