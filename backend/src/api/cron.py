"""
Scheduler-facing endpoints.

An external scheduler calls POST /api/cron/check-compliance once a day
with ``Authorization: Bearer $CRON_SECRET``. The route is disabled (503)
until CRON_SECRET is configured.
"""

import hmac

from fastapi import APIRouter, Depends, HTTPException, Request, status

from backend.src.api.notifications import get_compliance_runner
from backend.src.config.settings import AppSettings, get_settings
from backend.src.schemas.compliance import (
    CheckOutcomeResponse,
    CronRunResponse,
    OrganisationRunResponse,
)
from backend.src.services.compliance_runner import ComplianceCheckRunner
from backend.src.utils.logging_config import get_logger
from backend.src.utils.rate_limit import limiter


logger = get_logger("api")

router = APIRouter(
    prefix="/cron",
    tags=["Cron"],
)


def verify_cron_secret(
    request: Request,
    settings: AppSettings = Depends(get_settings),
) -> None:
    """
    Check the bearer secret sent by the scheduler.

    Raises:
        HTTPException 503: If CRON_SECRET is not configured
        HTTPException 401: If the header is missing or the secret is wrong
    """
    if not settings.cron_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scheduled compliance checks are not configured",
        )

    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(
        token.encode(), settings.cron_secret.encode()
    ):
        logger.warning(
            "Rejected cron request",
            extra={"path": request.url.path},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.post(
    "/check-compliance",
    response_model=CronRunResponse,
    summary="Run compliance checks for every active organisation",
    dependencies=[Depends(verify_cron_secret)],
)
@limiter.limit("5/minute")
async def check_compliance(
    request: Request,
    runner: ComplianceCheckRunner = Depends(get_compliance_runner),
):
    """
    Sweep all active organisations and report per-organisation results.

    An organisation counts as failed when its run could not start or any
    of its rules failed.
    """
    results = await runner.run_for_active_organisations()

    entries = []
    for result in results:
        if result.summary is None:
            entries.append(OrganisationRunResponse(
                organisation_guid=result.organisation_guid,
                organisation_name=result.organisation_name,
                error=result.error,
            ))
        else:
            entries.append(OrganisationRunResponse(
                organisation_guid=result.organisation_guid,
                organisation_name=result.organisation_name,
                outcomes=[
                    CheckOutcomeResponse.model_validate(o) for o in result.summary.outcomes
                ],
                total_created=result.summary.total_created,
                failed=result.summary.failed,
            ))

    failed = sum(1 for entry in entries if entry.error or entry.failed)
    logger.info(
        "Scheduled compliance sweep finished",
        extra={"checked": len(entries), "failed": failed},
    )
    return CronRunResponse(checked=len(entries), failed=failed, results=entries)
