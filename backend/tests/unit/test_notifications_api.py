"""
Tests for the notification API endpoints.

Covers listing, unread count, read tracking, the manager-only compliance
check trigger, and authentication failures.
"""

from datetime import date, timedelta

import pytest

from backend.src.models import Notification, StaffPvgRecord, UserRole
from backend.src.services.compliance_rules import COMPLIANCE_RULES
from backend.src.services.compliance_runner import ComplianceCheckRunner


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def create_notification(test_db_session, test_organisation, test_manager, frozen_now):
    """Factory for creating test notifications."""
    def _create(title="Policy Overdue - Fire Safety", user=None, is_read=False, age_hours=0):
        notification = Notification(
            organisation_id=test_organisation.id,
            user_id=(user or test_manager).id,
            title=title,
            message='Policy "Fire Safety" is overdue for review.',
            entity_type="policy",
            entity_id="pol_01hgw2bbg00000000000000001",
            link="/compliance?tab=policies",
            is_read=is_read,
            read_at=frozen_now if is_read else None,
            created_at=frozen_now - timedelta(hours=age_hours),
        )
        test_db_session.add(notification)
        test_db_session.commit()
        test_db_session.refresh(notification)
        return notification
    return _create


@pytest.fixture
def manager_client(test_client, authenticate, test_manager):
    """Test client authenticated as the organisation's manager."""
    authenticate(test_manager)
    return test_client


# ============================================================================
# Test: authentication
# ============================================================================


class TestAuthentication:
    """Requests without a valid session are rejected."""

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/notifications"),
        ("get", "/api/notifications/unread"),
        ("get", "/api/notifications/unread-count"),
        ("post", "/api/notifications/mark-all-read"),
        ("post", "/api/notifications/ntf_01hgw2bbg00000000000000000/read"),
        ("post", "/api/notifications/compliance-check"),
    ])
    def test_requires_session(self, test_client, method, path):
        response = getattr(test_client, method)(path)

        assert response.status_code == 401

    def test_health_is_public(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# ============================================================================
# Test: listing
# ============================================================================


class TestListNotifications:
    """Tests for GET /api/notifications and /unread."""

    def test_lists_newest_first(self, manager_client, create_notification):
        create_notification(title="older", age_hours=3)
        create_notification(title="newer", age_hours=1, is_read=True)

        response = manager_client.get("/api/notifications")

        assert response.status_code == 200
        data = response.json()
        assert [n["title"] for n in data] == ["newer", "older"]
        assert data[0]["guid"].startswith("ntf_")
        assert data[0]["is_read"] is True
        assert data[0]["created_at"].endswith("Z")
        assert data[1]["read_at"] is None

    def test_respects_limit(self, manager_client, create_notification):
        for hours in range(4):
            create_notification(title=f"n{hours}", age_hours=hours)

        response = manager_client.get("/api/notifications", params={"limit": 2})

        assert [n["title"] for n in response.json()] == ["n0", "n1"]

    @pytest.mark.parametrize("limit", [0, 101])
    def test_rejects_out_of_range_limit(self, manager_client, limit):
        response = manager_client.get("/api/notifications", params={"limit": limit})

        assert response.status_code == 422

    def test_unread_excludes_read(self, manager_client, create_notification):
        unread = create_notification(title="unread")
        create_notification(title="read", is_read=True)

        response = manager_client.get("/api/notifications/unread")

        assert response.status_code == 200
        assert [n["guid"] for n in response.json()] == [unread.guid]

    def test_only_own_notifications(
        self, manager_client, create_notification, make_user, test_organisation
    ):
        colleague = make_user(test_organisation, role=UserRole.ORG_ADMIN)
        create_notification(user=colleague)

        assert manager_client.get("/api/notifications").json() == []
        assert manager_client.get("/api/notifications/unread").json() == []

    def test_unread_count(self, manager_client, create_notification):
        create_notification()
        create_notification()
        create_notification(is_read=True)

        response = manager_client.get("/api/notifications/unread-count")

        assert response.status_code == 200
        assert response.json() == {"unread_count": 2}


# ============================================================================
# Test: read tracking
# ============================================================================


class TestReadTracking:
    """Tests for POST /{guid}/read and /mark-all-read."""

    def test_mark_read(self, manager_client, create_notification, test_db_session):
        notification = create_notification()

        response = manager_client.post(f"/api/notifications/{notification.guid}/read")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        test_db_session.refresh(notification)
        assert notification.is_read is True

    def test_mark_read_unknown_guid_still_succeeds(self, manager_client):
        response = manager_client.post("/api/notifications/ntf_garbage/read")

        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_mark_read_foreign_notification_is_ignored(
        self, manager_client, create_notification, make_user,
        test_organisation, test_db_session
    ):
        colleague = make_user(test_organisation, role=UserRole.ORG_ADMIN)
        theirs = create_notification(user=colleague)

        response = manager_client.post(f"/api/notifications/{theirs.guid}/read")

        assert response.status_code == 200
        test_db_session.refresh(theirs)
        assert theirs.is_read is False

    def test_mark_all_read(self, manager_client, create_notification):
        create_notification()
        create_notification()
        create_notification(is_read=True)

        response = manager_client.post("/api/notifications/mark-all-read")

        assert response.status_code == 200
        assert response.json() == {"success": True, "updated_count": 2}
        assert manager_client.get("/api/notifications/unread-count").json() == {
            "unread_count": 0
        }


# ============================================================================
# Test: compliance check trigger
# ============================================================================


class TestComplianceCheckEndpoint:
    """Tests for POST /api/notifications/compliance-check."""

    @pytest.fixture
    def pvg_only_runner(self, test_session_factory, clock, settings):
        """Runner with the single PVG rule, so one worker thread touches SQLite."""
        from backend.src.api.notifications import get_compliance_runner
        from backend.src.main import app

        runner = ComplianceCheckRunner(
            test_session_factory,
            clock=clock,
            rules=[rule for rule in COMPLIANCE_RULES if rule.name == "expiring_pvg"],
            settings=settings,
        )
        app.dependency_overrides[get_compliance_runner] = lambda: runner
        return runner

    def test_manager_runs_checks(
        self, manager_client, pvg_only_runner, test_organisation, make_staff,
        test_db_session
    ):
        staff = make_staff(test_organisation)
        test_db_session.add(StaffPvgRecord(
            staff_member_id=staff.id, renewal_date=date(2026, 4, 1)
        ))
        test_db_session.commit()

        response = manager_client.post("/api/notifications/compliance-check")

        assert response.status_code == 200
        data = response.json()
        assert data["organisation_guid"] == test_organisation.guid
        assert data["outcomes"] == [{"name": "expiring_pvg", "count": 1, "error": None}]
        assert data["total_created"] == 1
        assert data["failed"] == []

        repeat = manager_client.post("/api/notifications/compliance-check")
        assert repeat.json()["total_created"] == 0

    @pytest.mark.parametrize("role", [
        UserRole.READ_ONLY,
        UserRole.CARER,
        UserRole.SENIOR_CARER,
        UserRole.OFFICE_STAFF,
    ])
    def test_non_managers_are_forbidden(
        self, test_client, authenticate, make_user, test_organisation, role
    ):
        authenticate(make_user(test_organisation, role=role))

        response = test_client.post("/api/notifications/compliance-check")

        assert response.status_code == 403
