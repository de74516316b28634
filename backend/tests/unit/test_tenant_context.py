"""
Tests for session-based tenant context resolution.

Calls get_tenant_context directly with a request carrying the decoded
session, the way SessionMiddleware leaves it in the ASGI scope.
"""

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from backend.src.middleware.tenant import get_tenant_context, require_manager
from backend.src.models import UserRole
from backend.src.services.exceptions import NotFoundError
from backend.src.services.user_service import UserService


def _request(session):
    return Request({"type": "http", "method": "GET", "path": "/", "headers": [], "session": session})


class TestGetTenantContext:
    """Tests for get_tenant_context."""

    @pytest.mark.asyncio
    async def test_resolves_active_user(self, test_db_session, test_organisation, test_manager):
        ctx = await get_tenant_context(
            _request({"user_guid": test_manager.guid}), db=test_db_session
        )

        assert ctx.user_id == test_manager.id
        assert ctx.user_guid == test_manager.guid
        assert ctx.organisation_id == test_organisation.id
        assert ctx.organisation_guid == test_organisation.guid
        assert ctx.is_manager_tier

    @pytest.mark.asyncio
    @pytest.mark.parametrize("session", [
        {},
        {"user_guid": "usr_garbage"},
        {"user_guid": "usr_01hgw2bbg00000000000000000"},
    ])
    async def test_missing_or_unknown_session_is_unauthorized(self, test_db_session, session):
        with pytest.raises(HTTPException) as exc_info:
            await get_tenant_context(_request(session), db=test_db_session)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_inactive_user_is_forbidden(
        self, test_db_session, make_user, test_organisation
    ):
        user = make_user(test_organisation, is_active=False)

        with pytest.raises(HTTPException) as exc_info:
            await get_tenant_context(_request({"user_guid": user.guid}), db=test_db_session)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_inactive_organisation_is_forbidden(
        self, test_db_session, make_organisation, make_user
    ):
        closed = make_organisation(name="Closed Provider", is_active=False)
        user = make_user(closed)

        with pytest.raises(HTTPException) as exc_info:
            await get_tenant_context(_request({"user_guid": user.guid}), db=test_db_session)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_require_manager_refuses_carer(
        self, test_db_session, make_user, test_organisation
    ):
        carer = make_user(test_organisation, role=UserRole.CARER)
        ctx = await get_tenant_context(_request({"user_guid": carer.guid}), db=test_db_session)

        with pytest.raises(HTTPException) as exc_info:
            require_manager(ctx)

        assert exc_info.value.status_code == 403


class TestUserServiceGetByGuid:
    """Tests for UserService.get_by_guid."""

    def test_finds_user(self, test_db_session, test_manager):
        assert UserService(test_db_session).get_by_guid(test_manager.guid).id == test_manager.id

    @pytest.mark.parametrize("guid", ["usr_garbage", "usr_01hgw2bbg00000000000000000"])
    def test_unknown_or_malformed(self, test_db_session, guid):
        with pytest.raises(NotFoundError):
            UserService(test_db_session).get_by_guid(guid)
