"""
Pydantic schemas for compliance run responses.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class CheckOutcomeResponse(BaseModel):
    """Outcome of one compliance rule."""

    name: str = Field(..., description="Rule name, e.g. expiring_pvg")
    count: Optional[int] = Field(default=None, ge=0, description="Notifications created")
    error: Optional[str] = Field(default=None, description="Failure message if the rule failed")

    model_config = {"from_attributes": True}


class ComplianceRunResponse(BaseModel):
    """Result of running every compliance rule for one organisation."""

    organisation_guid: str
    outcomes: List[CheckOutcomeResponse]
    total_created: int = Field(..., ge=0)
    failed: List[str] = Field(default_factory=list)


class OrganisationRunResponse(BaseModel):
    """One organisation's entry in a scheduled sweep."""

    organisation_guid: str
    organisation_name: str
    outcomes: List[CheckOutcomeResponse] = Field(default_factory=list)
    total_created: Optional[int] = None
    failed: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class CronRunResponse(BaseModel):
    """Result of a scheduler-triggered sweep over all active organisations."""

    checked: int = Field(..., ge=0, description="Organisations processed")
    failed: int = Field(..., ge=0, description="Organisations with at least one failure")
    results: List[OrganisationRunResponse]
