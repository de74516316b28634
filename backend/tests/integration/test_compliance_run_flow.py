"""
Integration tests for a full compliance run.

Seeds one organisation with a record that trips every rule, then runs the
real rule registry concurrently against a file-backed SQLite database.
Each rule thread holds its own connection.
"""

from datetime import date, timedelta

import pytest

from backend.src.models import (
    EquipmentCheck,
    Incident,
    Notification,
    PersonalPlan,
    Policy,
    ServiceUserReview,
    StaffPvgRecord,
    StaffRegistration,
    StaffTrainingRecord,
    UserRole,
)
from backend.src.services.compliance_rules import COMPLIANCE_RULES
from backend.src.services.compliance_runner import ComplianceCheckRunner


pytestmark = pytest.mark.integration

TODAY = date(2026, 3, 2)


@pytest.fixture
def seeded_organisation(file_db_session, file_factories, frozen_now):
    """
    Organisation with two manager-tier users, one carer, and one record
    due for every rule.
    """
    organisation = file_factories["organisation"](name="Glenview Care")
    managers = [
        file_factories["user"](organisation, role=UserRole.MANAGER),
        file_factories["user"](organisation, role=UserRole.ORG_ADMIN),
    ]
    file_factories["user"](organisation, role=UserRole.CARER)

    staff = file_factories["staff"](organisation)
    client = file_factories["service_user"](organisation)

    file_db_session.add_all([
        StaffPvgRecord(staff_member_id=staff.id, renewal_date=TODAY + timedelta(days=30)),
        StaffRegistration(
            staff_member_id=staff.id,
            registration_type="SSSC",
            expiry_date=TODAY + timedelta(days=45),
        ),
        StaffTrainingRecord(
            staff_member_id=staff.id,
            training_type="First Aid",
            is_mandatory=True,
            expiry_date=TODAY + timedelta(days=10),
        ),
        PersonalPlan(
            service_user_id=client.id,
            status="active",
            next_review_date=TODAY - timedelta(days=40),
        ),
        ServiceUserReview(service_user_id=client.id, review_date=date(2024, 11, 5)),
        Policy(
            organisation_id=organisation.id,
            policy_name="Safeguarding",
            status="active",
            next_review_date=TODAY - timedelta(days=3),
        ),
        EquipmentCheck(
            organisation_id=organisation.id,
            equipment_name="Hoist",
            serial_number="HX-100",
            next_check_date=TODAY - timedelta(days=1),
        ),
        Incident(
            organisation_id=organisation.id,
            service_user_id=client.id,
            incident_type="Fall",
            incident_date=frozen_now - timedelta(days=21),
            status="open",
        ),
    ])
    file_db_session.commit()
    return organisation, managers


@pytest.fixture
def runner(file_session_factory, clock, settings):
    return ComplianceCheckRunner(
        file_session_factory, clock=clock, rules=COMPLIANCE_RULES, settings=settings
    )


class TestFullComplianceRun:
    """End-to-end run of every rule for one organisation."""

    @pytest.mark.asyncio
    async def test_every_rule_alerts_every_manager(
        self, runner, seeded_organisation, file_db_session
    ):
        organisation, managers = seeded_organisation

        summary = await runner.run_all_checks(organisation.id)

        assert summary.failed == []
        assert [o.name for o in summary.outcomes] == [r.name for r in COMPLIANCE_RULES]
        assert all(o.count == 2 for o in summary.outcomes)
        assert summary.total_created == 16

        rows = file_db_session.query(Notification).all()
        assert len(rows) == 16
        assert {row.user_id for row in rows} == {m.id for m in managers}
        assert {row.entity_type for row in rows} == {
            "staff_member",
            "personal_plan",
            "service_user",
            "policy",
            "equipment_check",
            "incident",
        }

    @pytest.mark.asyncio
    async def test_second_run_is_deduplicated(
        self, runner, seeded_organisation, file_db_session
    ):
        organisation, _ = seeded_organisation

        await runner.run_all_checks(organisation.id)
        repeat = await runner.run_all_checks(organisation.id)

        assert repeat.failed == []
        assert repeat.total_created == 0
        assert file_db_session.query(Notification).count() == 16

    @pytest.mark.asyncio
    async def test_sweep_covers_every_active_organisation(
        self, runner, seeded_organisation, file_factories
    ):
        organisation, _ = seeded_organisation
        quiet = file_factories["organisation"](name="Riverside Care")
        file_factories["user"](quiet, role=UserRole.MANAGER)

        results = await runner.run_for_active_organisations()

        by_guid = {r.organisation_guid: r for r in results}
        assert by_guid[organisation.guid].summary.total_created == 16
        assert by_guid[quiet.guid].summary.total_created == 0
        assert all(r.error is None for r in results)
