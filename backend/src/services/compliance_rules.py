"""
Compliance rule checks for care organisations.

Each check scans one category of dated compliance records for a single
organisation and raises a deduplicated alert to the organisation's
manager-tier users for every record that needs attention:

- expiring_pvg: PVG renewals due within the warning window
- expiring_sssc: SSSC registrations expiring within the warning window
- expiring_training: mandatory training expiring within the warning window
- overdue_personal_plans: personal plan reviews missed by the grace period
- overdue_reviews: clients whose latest review is too old, or who have none
- overdue_policies: active policies past their review date
- overdue_equipment: equipment past its next check date
- open_incidents: incidents still open after the stale window

Checks are read-then-notify: they own no state, take "now" from the
injected clock, and let database errors propagate to the caller.
Records whose date column is NULL are excluded by the query itself.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.src.config.settings import AppSettings, get_settings
from backend.src.models import (
    EquipmentCheck,
    Incident,
    IncidentStatus,
    NotificationEntityType,
    PersonalPlan,
    PersonalPlanStatus,
    Policy,
    PolicyStatus,
    RegistrationType,
    ServiceUser,
    ServiceUserReview,
    ServiceUserStatus,
    StaffMember,
    StaffPvgRecord,
    StaffRegistration,
    StaffStatus,
    StaffTrainingRecord,
)
from backend.src.services.notification_service import NotificationService, RuleViolation
from backend.src.utils.clock import Clock, utc_now
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


def months_before(day: date, months: int) -> date:
    """
    Same calendar day ``months`` earlier, clamped to the end of the month.

    Example:
        >>> months_before(date(2024, 2, 29), 12)
        datetime.date(2023, 2, 28)
    """
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class ComplianceRuleService:
    """
    Service running the compliance rule checks for one organisation.

    Every ``check_*`` method returns the number of notifications actually
    created after deduplication.

    Usage:
        >>> service = ComplianceRuleService(db_session, clock=utc_now)
        >>> service.check_expiring_pvg(organisation_id=1)
        3
    """

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        settings: Optional[AppSettings] = None,
    ):
        """
        Initialize compliance rule service.

        Args:
            db: SQLAlchemy database session
            clock: Time source for every threshold computed by the checks
            settings: Window configuration (defaults to get_settings())
        """
        self.db = db
        self.clock = clock
        self.settings = settings or get_settings()
        self.notifications = NotificationService(
            db, clock=clock, dedup_window=self.settings.dedup_window
        )

    def _today(self) -> date:
        return self.clock().date()

    def _expiry_window(self) -> Tuple[date, date]:
        today = self._today()
        return today, today + timedelta(days=self.settings.expiry_warning_days)

    def _notify(self, organisation_id: int, violation: RuleViolation) -> int:
        return self.notifications.notify_audience(organisation_id, violation)

    # ========================================================================
    # Workforce
    # ========================================================================

    def check_expiring_pvg(self, organisation_id: int) -> int:
        """Alert on PVG renewals due between today and the warning horizon."""
        today, horizon = self._expiry_window()

        rows = (
            self.db.query(StaffPvgRecord, StaffMember)
            .join(StaffMember, StaffPvgRecord.staff_member_id == StaffMember.id)
            .filter(
                StaffMember.organisation_id == organisation_id,
                StaffMember.status == StaffStatus.ACTIVE.value,
                StaffPvgRecord.renewal_date.isnot(None),
                StaffPvgRecord.renewal_date >= today,
                StaffPvgRecord.renewal_date <= horizon,
            )
            .order_by(StaffPvgRecord.id.asc())
            .all()
        )

        created = 0
        for record, staff in rows:
            created += self._notify(organisation_id, RuleViolation(
                title=f"PVG Renewal Due - {staff.full_name}",
                message=f"PVG renewal is due on {record.renewal_date.isoformat()}.",
                entity_type=NotificationEntityType.STAFF_MEMBER,
                entity_id=staff.guid,
                link=f"/staff/{staff.guid}",
            ))
        return created

    def check_expiring_sssc(self, organisation_id: int) -> int:
        """Alert on SSSC registrations expiring before the warning horizon."""
        today, horizon = self._expiry_window()

        rows = (
            self.db.query(StaffRegistration, StaffMember)
            .join(StaffMember, StaffRegistration.staff_member_id == StaffMember.id)
            .filter(
                StaffMember.organisation_id == organisation_id,
                StaffMember.status == StaffStatus.ACTIVE.value,
                StaffRegistration.registration_type == RegistrationType.SSSC.value,
                StaffRegistration.expiry_date.isnot(None),
                StaffRegistration.expiry_date >= today,
                StaffRegistration.expiry_date <= horizon,
            )
            .order_by(StaffRegistration.id.asc())
            .all()
        )

        created = 0
        for registration, staff in rows:
            created += self._notify(organisation_id, RuleViolation(
                title=f"SSSC Registration Expiring - {staff.full_name}",
                message=f"SSSC registration expires on {registration.expiry_date.isoformat()}.",
                entity_type=NotificationEntityType.STAFF_MEMBER,
                entity_id=staff.guid,
                link=f"/staff/{staff.guid}",
            ))
        return created

    def check_expiring_training(self, organisation_id: int) -> int:
        """Alert on mandatory training expiring before the warning horizon."""
        today, horizon = self._expiry_window()

        rows = (
            self.db.query(StaffTrainingRecord, StaffMember)
            .join(StaffMember, StaffTrainingRecord.staff_member_id == StaffMember.id)
            .filter(
                StaffMember.organisation_id == organisation_id,
                StaffMember.status == StaffStatus.ACTIVE.value,
                StaffTrainingRecord.is_mandatory == True,  # noqa: E712
                StaffTrainingRecord.expiry_date.isnot(None),
                StaffTrainingRecord.expiry_date >= today,
                StaffTrainingRecord.expiry_date <= horizon,
            )
            .order_by(StaffTrainingRecord.id.asc())
            .all()
        )

        created = 0
        for training, staff in rows:
            # Course name in the title keeps two expiring courses apart
            created += self._notify(organisation_id, RuleViolation(
                title=f"Training Expiring - {training.training_type} ({staff.full_name})",
                message=f"Mandatory training expires on {training.expiry_date.isoformat()}.",
                entity_type=NotificationEntityType.STAFF_MEMBER,
                entity_id=staff.guid,
                link=f"/staff/{staff.guid}",
            ))
        return created

    # ========================================================================
    # Clients
    # ========================================================================

    def check_overdue_personal_plans(self, organisation_id: int) -> int:
        """Alert on active plans whose review slipped past the grace period."""
        grace = self.settings.personal_plan_grace_days
        threshold = self._today() - timedelta(days=grace)

        rows = (
            self.db.query(PersonalPlan, ServiceUser)
            .join(ServiceUser, PersonalPlan.service_user_id == ServiceUser.id)
            .filter(
                ServiceUser.organisation_id == organisation_id,
                PersonalPlan.status == PersonalPlanStatus.ACTIVE.value,
                PersonalPlan.next_review_date.isnot(None),
                PersonalPlan.next_review_date < threshold,
            )
            .order_by(PersonalPlan.id.asc())
            .all()
        )

        created = 0
        for plan, client in rows:
            created += self._notify(organisation_id, RuleViolation(
                title=f"Personal Plan Overdue - {client.full_name}",
                message=f"Personal plan review is overdue by more than {grace} days.",
                entity_type=NotificationEntityType.PERSONAL_PLAN,
                entity_id=plan.guid,
                link=f"/clients/{client.guid}",
            ))
        return created

    def check_overdue_reviews(self, organisation_id: int) -> int:
        """
        Alert on active clients without a recent review.

        A client is overdue when their most recent review is older than
        the review interval, or when no review was ever recorded.
        """
        cutoff = months_before(self._today(), self.settings.review_interval_months)

        latest_review = (
            self.db.query(
                ServiceUserReview.service_user_id.label("service_user_id"),
                func.max(ServiceUserReview.review_date).label("last_review_date"),
            )
            .group_by(ServiceUserReview.service_user_id)
            .subquery()
        )

        rows = (
            self.db.query(ServiceUser, latest_review.c.last_review_date)
            .outerjoin(latest_review, latest_review.c.service_user_id == ServiceUser.id)
            .filter(
                ServiceUser.organisation_id == organisation_id,
                ServiceUser.status == ServiceUserStatus.ACTIVE.value,
            )
            .order_by(ServiceUser.id.asc())
            .all()
        )

        created = 0
        for client, last_review_date in rows:
            if last_review_date is not None and last_review_date >= cutoff:
                continue

            if last_review_date is None:
                message = "No review has been recorded."
            else:
                message = f"Last review was on {last_review_date.isoformat()}."

            created += self._notify(organisation_id, RuleViolation(
                title=f"Annual Review Overdue - {client.full_name}",
                message=message,
                entity_type=NotificationEntityType.SERVICE_USER,
                entity_id=client.guid,
                link=f"/clients/{client.guid}",
            ))
        return created

    # ========================================================================
    # Organisation
    # ========================================================================

    def check_overdue_policies(self, organisation_id: int) -> int:
        """Alert on active policies past their next review date."""
        today = self._today()

        policies = (
            self.db.query(Policy)
            .filter(
                Policy.organisation_id == organisation_id,
                Policy.status == PolicyStatus.ACTIVE.value,
                Policy.next_review_date.isnot(None),
                Policy.next_review_date < today,
            )
            .order_by(Policy.id.asc())
            .all()
        )

        created = 0
        for policy in policies:
            created += self._notify(organisation_id, RuleViolation(
                title=f"Policy Overdue - {policy.policy_name}",
                message=f'Policy "{policy.policy_name}" is overdue for review.',
                entity_type=NotificationEntityType.POLICY,
                entity_id=policy.guid,
                link="/compliance?tab=policies",
            ))
        return created

    def check_overdue_equipment(self, organisation_id: int) -> int:
        """Alert on equipment past its next check date."""
        today = self._today()

        checks = (
            self.db.query(EquipmentCheck)
            .filter(
                EquipmentCheck.organisation_id == organisation_id,
                EquipmentCheck.next_check_date.isnot(None),
                EquipmentCheck.next_check_date < today,
            )
            .order_by(EquipmentCheck.id.asc())
            .all()
        )

        created = 0
        for check in checks:
            serial = f" (S/N: {check.serial_number})" if check.serial_number else ""
            created += self._notify(organisation_id, RuleViolation(
                title=f"Equipment Check Overdue - {check.equipment_name}",
                message=f'Equipment check for "{check.equipment_name}"{serial} is overdue.',
                entity_type=NotificationEntityType.EQUIPMENT_CHECK,
                entity_id=check.guid,
                link="/incidents?tab=equipment",
            ))
        return created

    def check_open_incidents(self, organisation_id: int) -> int:
        """Alert on incidents still open after the stale window."""
        stale_days = self.settings.stale_incident_days
        threshold = self.clock() - timedelta(days=stale_days)

        incidents = (
            self.db.query(Incident)
            .filter(
                Incident.organisation_id == organisation_id,
                Incident.status != IncidentStatus.CLOSED.value,
                Incident.incident_date < threshold,
            )
            .order_by(Incident.id.asc())
            .all()
        )

        created = 0
        for incident in incidents:
            created += self._notify(organisation_id, RuleViolation(
                title=f"Incident Open >{stale_days} Days - {incident.incident_type}",
                message=(
                    f"Incident from {incident.incident_date.date().isoformat()} "
                    f"has been open for more than {stale_days} days."
                ),
                entity_type=NotificationEntityType.INCIDENT,
                entity_id=incident.guid,
                link=f"/incidents/{incident.guid}",
            ))
        return created


@dataclass(frozen=True)
class ComplianceRule:
    """A named compliance check, as run by the compliance runner."""

    name: str
    check: Callable[[ComplianceRuleService, int], int]


COMPLIANCE_RULES: Tuple[ComplianceRule, ...] = (
    ComplianceRule("expiring_pvg", ComplianceRuleService.check_expiring_pvg),
    ComplianceRule("expiring_sssc", ComplianceRuleService.check_expiring_sssc),
    ComplianceRule("expiring_training", ComplianceRuleService.check_expiring_training),
    ComplianceRule("overdue_personal_plans", ComplianceRuleService.check_overdue_personal_plans),
    ComplianceRule("overdue_reviews", ComplianceRuleService.check_overdue_reviews),
    ComplianceRule("overdue_policies", ComplianceRuleService.check_overdue_policies),
    ComplianceRule("overdue_equipment", ComplianceRuleService.check_overdue_equipment),
    ComplianceRule("open_incidents", ComplianceRuleService.check_open_incidents),
)
