"""Authorization guard in front of the persistence gateway.

Every call resolves the caller from the session provider and passes the
caller's *verified* email to the gateway.  Client-side data never supplies
the owner email: creates are stamped with the session email, updates and
deletes are scoped by ``(id, session email)``.

Gateway errors are re-worded with an operation prefix
("Error updating service area: …") and never say whether a row exists for a
different owner.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.geometry.geojson_codec import Geometry, dump_geometry
from ..models.company import User
from ..models.service import Service
from ..models.service_area import ServiceArea
from .gateway import GatewayResult, PersistenceGateway
from .session_service import SessionProvider

__all__ = ["AuthorizationGuard", "NotAuthenticatedError", "require_user", "NOT_AUTHENTICATED"]

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "User not authenticated"


class NotAuthenticatedError(RuntimeError):
    """Raised when the editor is opened without a verified session."""


def require_user(session: SessionProvider) -> User:
    """Return the current user or raise :class:`NotAuthenticatedError`."""
    user = session.get_current_user()
    if user is None or not user.email:
        raise NotAuthenticatedError(NOT_AUTHENTICATED)
    return user


class AuthorizationGuard:
    """Scopes gateway calls to the session's verified email."""

    def __init__(self, gateway: PersistenceGateway, session: SessionProvider):
        self._gateway = gateway
        self._session = session

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    def caller_email(self) -> Optional[str]:
        user = self._session.get_current_user()
        return user.email if user is not None and user.email else None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_services(self, company_id: str) -> GatewayResult[list[Service]]:
        if self.caller_email() is None:
            return GatewayResult.failure(NOT_AUTHENTICATED)
        result = self._gateway.list_services(company_id)
        if not result.ok:
            return GatewayResult.failure(f"Error fetching services: {result.error}")
        return result

    def list_service_areas(self, company_id: str) -> GatewayResult[list[ServiceArea]]:
        if self.caller_email() is None:
            return GatewayResult.failure(NOT_AUTHENTICATED)
        result = self._gateway.list_service_areas(company_id)
        if not result.ok:
            return GatewayResult.failure(f"Error fetching service areas: {result.error}")
        return result

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_service_area(
        self, service_id: str, company_id: str, geometry: Geometry, is_active: bool,
    ) -> GatewayResult[ServiceArea]:
        email = self.caller_email()
        if email is None:
            return GatewayResult.failure(NOT_AUTHENTICATED)
        result = self._gateway.create_service_area(
            service_id=service_id,
            company_id=company_id,
            geojson=dump_geometry(geometry),
            is_active=is_active,
            email=email,
        )
        if not result.ok:
            logger.error("Gateway refused create for service %s: %s", service_id, result.error)
            return GatewayResult.failure(f"Error creating service area: {result.error}")
        return result

    def update_service_area(
        self, area_id: str, geometry: Geometry, is_active: bool, service_id: str,
    ) -> GatewayResult[ServiceArea]:
        email = self.caller_email()
        if email is None:
            return GatewayResult.failure(NOT_AUTHENTICATED)
        result = self._gateway.update_service_area(
            id=area_id,
            geojson=dump_geometry(geometry),
            is_active=is_active,
            service_id=service_id,
            email=email,
        )
        if not result.ok:
            logger.error("Gateway refused update of area %s: %s", area_id, result.error)
            return GatewayResult.failure(f"Error updating service area: {result.error}")
        return result

    def delete_service_area(self, area_id: str) -> GatewayResult[None]:
        email = self.caller_email()
        if email is None:
            return GatewayResult.failure(NOT_AUTHENTICATED)
        result = self._gateway.delete_service_area(area_id, email)
        if not result.ok:
            logger.error("Gateway refused delete of area %s: %s", area_id, result.error)
            return GatewayResult.failure(f"Error deleting service area: {result.error}")
        return result
