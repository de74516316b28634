"""
Pydantic schemas for notification API responses.

Provides serialization for:
- Notification bell panel (list, unread list, unread count)
- Read tracking acknowledgements
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


class NotificationResponse(BaseModel):
    """Response schema for a single notification."""

    guid: str = Field(..., description="Notification GUID (ntf_xxx)")
    title: str
    message: str
    entity_type: str = Field(..., description="Kind of record the alert is about")
    entity_id: str = Field(..., description="GUID of the record the alert is about")
    link: Optional[str] = Field(default=None, description="In-app navigation path")
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    @field_serializer("read_at", "created_at")
    @classmethod
    def serialize_datetime_utc(cls, v: Optional[datetime]) -> Optional[str]:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return v.isoformat() + "Z" if v else None

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "guid": "ntf_01hgw2bbg0000000000000001",
                "title": "PVG Renewal Due - Jane Smith",
                "message": "PVG renewal is due on 2026-03-01.",
                "entity_type": "staff_member",
                "entity_id": "stf_01hgw2bbg0000000000000001",
                "link": "/staff/stf_01hgw2bbg0000000000000001",
                "is_read": False,
                "read_at": None,
                "created_at": "2026-01-15T06:00:00Z",
            }
        },
    }


class UnreadCountResponse(BaseModel):
    """Response schema for unread notification count."""

    unread_count: int = Field(..., ge=0, description="Number of unread notifications")


class MarkReadResponse(BaseModel):
    """
    Acknowledgement for marking one notification as read.

    Always successful: unknown or foreign notifications are ignored.
    """

    success: bool = True


class MarkAllReadResponse(BaseModel):
    """Response schema for marking all notifications as read."""

    success: bool = True
    updated_count: int = Field(..., ge=0, description="Number of notifications marked as read")
