"""
Session manager: owns the current-user state.

The user is resolved once at start-up from the gateway's session check and
then follows login and logout. Listeners are notified on every change, which
is how the catalog cache learns to refresh or clear itself.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

import structlog

from petconnect_shared.schemas.common import OrganizationStatus
from petconnect_shared.schemas.organizations import OrganizationProfile, OrganizationRead

from .errors import AuthError, NetworkError
from .gateway import ApiGateway

log = structlog.get_logger()

SessionListener = Callable[[Optional[OrganizationRead]], Awaitable[None]]


class SessionManager:
    """Current organization (or None) plus a session-changed notification channel."""

    def __init__(self, gateway: ApiGateway):
        self._gateway = gateway
        self._listeners: list[SessionListener] = []
        self.user: Optional[OrganizationRead] = None
        self.loading = True

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def awaiting_approval(self) -> bool:
        """Logged in, but the organization has not been verified yet."""
        return self.user is not None and self.user.status == OrganizationStatus.PENDING

    async def start(self) -> Optional[OrganizationRead]:
        """Resolve an existing session, if the gateway still holds one."""
        try:
            user = await self._gateway.get_authenticated_user()
        except NetworkError as exc:
            log.warning("session.check_failed", error=exc.message)
            user = None
        self.loading = False
        await self._set_user(user)
        return user

    async def login(self, email: str, password: str) -> OrganizationRead:
        try:
            user = await self._gateway.login(email, password)
        except AuthError:
            log.info("session.login_failed", email=email)
            # A failed login also ends any earlier session
            await self._gateway.logout()
            await self._set_user(None)
            raise
        log.info("session.logged_in", org_id=str(user.id), status=user.status.value)
        await self._set_user(user)
        return user

    async def logout(self) -> None:
        await self._gateway.logout()
        log.info("session.logged_out")
        await self._set_user(None)

    async def register_ngo(self, profile: OrganizationProfile, password: str) -> OrganizationRead:
        """Register a new NGO. The current session, if any, is left untouched."""
        org = await self._gateway.register_ngo(profile, password)
        log.info("session.registered", org_id=str(org.id))
        return org

    async def _set_user(self, user: Optional[OrganizationRead]) -> None:
        self.user = user
        for listener in self._listeners:
            await listener(user)
