"""
Tests for the run_compliance_checks command line script.
"""

import json
from datetime import date, timedelta

import pytest

from backend.src.models import Notification, StaffPvgRecord, UserRole
from backend.src.scripts import run_compliance_checks
from backend.src.services.compliance_rules import COMPLIANCE_RULES


@pytest.fixture(autouse=True)
def no_signal_handlers(monkeypatch):
    """Keep the script from replacing pytest's own signal handlers."""
    monkeypatch.setattr(run_compliance_checks.signal, "signal", lambda *args: None)


class TestParseArgs:

    def test_defaults(self):
        args = run_compliance_checks.parse_args([])

        assert args.organisation is None
        assert args.json is False

    def test_organisation_and_json(self):
        args = run_compliance_checks.parse_args(
            ["-o", "org_01hgw2bbg00000000000000001", "--json"]
        )

        assert args.organisation == "org_01hgw2bbg00000000000000001"
        assert args.json is True


class TestMain:

    def test_unknown_organisation_exits_with_error(self, file_session_factory, capsys):
        status = run_compliance_checks.main(
            ["--organisation", "org_01hgw2bbg00000000000000000"],
            session_factory=file_session_factory,
        )

        assert status == 1
        assert "Organisation not found" in capsys.readouterr().out

    def test_no_active_organisations(self, file_session_factory, capsys):
        status = run_compliance_checks.main([], session_factory=file_session_factory)

        assert status == 0
        assert "No active organisations." in capsys.readouterr().out

    def test_json_output_for_one_organisation(
        self, file_session_factory, file_factories, file_db_session, capsys
    ):
        organisation = file_factories["organisation"](name="Glenview Care")
        file_factories["user"](organisation, role=UserRole.MANAGER)
        staff = file_factories["staff"](organisation)
        # Relative to the real clock, so the renewal is always inside the window
        file_db_session.add(StaffPvgRecord(
            staff_member_id=staff.id,
            renewal_date=date.today() + timedelta(days=10),
        ))
        file_db_session.commit()

        status = run_compliance_checks.main(
            ["--organisation", organisation.guid, "--json"],
            session_factory=file_session_factory,
        )

        assert status == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data) == 1
        assert data[0]["organisation_guid"] == organisation.guid
        assert data[0]["organisation_name"] == "Glenview Care"
        assert data[0]["expiring_pvg"] == 1
        assert data[0]["total_created"] == 1
        assert data[0]["failed"] == []
        assert set(rule.name for rule in COMPLIANCE_RULES) <= set(data[0])
        assert file_db_session.query(Notification).count() == 1

    def test_text_output_lists_every_rule(
        self, file_session_factory, file_factories, capsys
    ):
        file_factories["organisation"](name="Riverside Care")

        status = run_compliance_checks.main([], session_factory=file_session_factory)

        out = capsys.readouterr().out
        assert status == 0
        assert "Riverside Care" in out
        for rule in COMPLIANCE_RULES:
            assert rule.name in out
