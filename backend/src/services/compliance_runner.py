"""
Compliance check runner.

Runs every compliance rule for an organisation concurrently and collects
one outcome per rule. A failing rule is recorded against its own name and
never stops the others.

Each rule runs in a worker thread with its own database session taken
from the session factory; SQLAlchemy sessions must not be shared across
threads.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from backend.src.config.settings import AppSettings, get_settings
from backend.src.db.database import SessionFactory
from backend.src.services.compliance_rules import (
    COMPLIANCE_RULES,
    ComplianceRule,
    ComplianceRuleService,
)
from backend.src.services.organisation_service import OrganisationService
from backend.src.utils.clock import Clock, utc_now
from backend.src.utils.logging_config import get_logger


logger = get_logger("scheduler")


@dataclass(frozen=True)
class CheckOutcome:
    """Result of one rule: a created count, or the error that stopped it."""

    name: str
    count: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ComplianceRunSummary:
    """Outcomes of every rule for one organisation, in rule order."""

    organisation_id: int
    outcomes: List[CheckOutcome] = field(default_factory=list)

    @property
    def total_created(self) -> int:
        return sum(outcome.count or 0 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> List[str]:
        return [outcome.name for outcome in self.outcomes if not outcome.ok]

    def as_dict(self) -> Dict[str, Any]:
        """
        Flatten to ``{rule name: count or "error: ..."}`` plus totals.

        Example:
            >>> summary.as_dict()
            {'expiring_pvg': 2, ..., 'open_incidents': 'error: timeout',
             'total_created': 2, 'failed': ['open_incidents']}
        """
        result: Dict[str, Any] = {}
        for outcome in self.outcomes:
            result[outcome.name] = outcome.count if outcome.ok else f"error: {outcome.error}"
        result["total_created"] = self.total_created
        result["failed"] = self.failed
        return result


@dataclass
class OrganisationRunResult:
    """Run result for one organisation in a multi-organisation sweep."""

    organisation_guid: str
    organisation_name: str
    summary: Optional[ComplianceRunSummary] = None
    error: Optional[str] = None


class ComplianceCheckRunner:
    """
    Runs the compliance rules for one or all organisations.

    Usage:
        >>> runner = ComplianceCheckRunner(SessionLocal)
        >>> summary = await runner.run_all_checks(organisation_id=1)
        >>> summary.as_dict()["total_created"]
        5
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        clock: Clock = utc_now,
        rules: Sequence[ComplianceRule] = COMPLIANCE_RULES,
        settings: Optional[AppSettings] = None,
    ):
        """
        Initialize the runner.

        Args:
            session_factory: Callable returning a new database session
            clock: Time source passed to every rule
            rules: Rules to run, in reporting order
            settings: Window configuration (defaults to get_settings())
        """
        self.session_factory = session_factory
        self.clock = clock
        self.rules = tuple(rules)
        self.settings = settings or get_settings()

    def _run_rule(self, rule: ComplianceRule, organisation_id: int) -> int:
        db = self.session_factory()
        try:
            service = ComplianceRuleService(db, clock=self.clock, settings=self.settings)
            return rule.check(service, organisation_id)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    async def run_all_checks(self, organisation_id: int) -> ComplianceRunSummary:
        """
        Run every rule for one organisation concurrently.

        Never raises for a failing rule: its outcome carries the error
        message and the remaining rules still complete.
        """
        results = await asyncio.gather(
            *[
                asyncio.to_thread(self._run_rule, rule, organisation_id)
                for rule in self.rules
            ],
            return_exceptions=True,
        )

        summary = ComplianceRunSummary(organisation_id=organisation_id)
        for rule, result in zip(self.rules, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Compliance rule failed",
                    extra={
                        "organisation_id": organisation_id,
                        "rule": rule.name,
                        "error": str(result),
                    },
                    exc_info=(type(result), result, result.__traceback__),
                )
                summary.outcomes.append(CheckOutcome(name=rule.name, error=str(result)))
            else:
                summary.outcomes.append(CheckOutcome(name=rule.name, count=result))

        logger.info(
            "Compliance run finished",
            extra={
                "organisation_id": organisation_id,
                "total_created": summary.total_created,
                "failed": summary.failed,
            },
        )
        return summary

    async def run_for_active_organisations(self) -> List[OrganisationRunResult]:
        """
        Run every rule for every active organisation concurrently, at most
        ``max_concurrent_organisations`` at a time.

        An organisation whose run cannot start is reported with an error
        and the other organisations still complete. Results follow the
        organisation order (oldest first).
        """
        db = self.session_factory()
        try:
            organisations = [
                (org.id, org.guid, org.name)
                for org in OrganisationService(db).list_active()
            ]
        finally:
            db.close()

        logger.info(
            "Starting compliance sweep",
            extra={"organisations": len(organisations)},
        )

        # Each organisation holds one pooled connection per rule while it runs
        semaphore = asyncio.Semaphore(self.settings.max_concurrent_organisations)

        async def _bounded(organisation_id: int) -> ComplianceRunSummary:
            async with semaphore:
                return await self.run_all_checks(organisation_id)

        summaries = await asyncio.gather(
            *[_bounded(organisation_id) for organisation_id, _, _ in organisations],
            return_exceptions=True,
        )

        results: List[OrganisationRunResult] = []
        for (_, guid, name), summary in zip(organisations, summaries):
            if isinstance(summary, BaseException):
                logger.error(
                    "Compliance run failed for organisation",
                    extra={"organisation_guid": guid, "error": str(summary)},
                    exc_info=(type(summary), summary, summary.__traceback__),
                )
                results.append(
                    OrganisationRunResult(
                        organisation_guid=guid, organisation_name=name, error=str(summary)
                    )
                )
            else:
                results.append(
                    OrganisationRunResult(
                        organisation_guid=guid, organisation_name=name, summary=summary
                    )
                )

        return results

    async def run_for_organisation(self, organisation_guid: str) -> OrganisationRunResult:
        """
        Run every rule for a single organisation identified by GUID.

        Raises:
            NotFoundError: If the organisation does not exist
        """
        db = self.session_factory()
        try:
            organisation = OrganisationService(db).get_by_guid(organisation_guid)
            organisation_id, guid, name = organisation.id, organisation.guid, organisation.name
        finally:
            db.close()

        summary = await self.run_all_checks(organisation_id)
        return OrganisationRunResult(
            organisation_guid=guid,
            organisation_name=name,
            summary=summary,
        )
