"""
Notification service for creating, deduplicating, and reading alerts.

Provides business logic for:
- Creating notification records (single and batched)
- Fanning a compliance violation out to the organisation's manager-tier
  users, skipping anyone who already got the same alert recently
- Listing, counting, and marking notifications as read for the bell panel

Deduplication:
    A notification is a duplicate when another one with the same
    (organisation, user, title, entity_type, entity_id) was created at or
    after ``now - window``. The window start is recomputed on every call,
    so an unresolved condition alerts again once the window has passed.
    There is no lock: two concurrent runs for the same organisation can
    both pass the check and insert.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.src.models import Notification, NotificationEntityType
from backend.src.services.exceptions import ValidationError
from backend.src.services.user_service import UserService
from backend.src.utils.clock import Clock, utc_now
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


DEFAULT_DEDUP_WINDOW = timedelta(hours=24)
DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100

# Column sizes on Notification; titles are cut before both insert and lookup
TITLE_MAX_LENGTH = 255
MESSAGE_MAX_LENGTH = 1000


@dataclass(frozen=True)
class RuleViolation:
    """
    One non-compliant record found by a compliance check.

    Carries everything needed to build the notification; never persisted.
    """

    title: str
    message: str
    entity_type: NotificationEntityType
    entity_id: str
    link: str


class NotificationService:
    """
    Service for notification creation, deduplication, and read tracking.

    Usage:
        >>> service = NotificationService(db_session)
        >>> service.notify_audience(organisation_id=1, violation=violation)
        2
        >>> service.get_unread(user_id=5, organisation_id=1)
        [<Notification(...)>, <Notification(...)>]
    """

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        dedup_window: timedelta = DEFAULT_DEDUP_WINDOW,
    ):
        """
        Initialize notification service.

        Args:
            db: SQLAlchemy database session
            clock: Time source for timestamps and the dedup window
            dedup_window: How far back an identical alert suppresses a new one
        """
        self.db = db
        self.clock = clock
        self.dedup_window = dedup_window

    # ========================================================================
    # Creation
    # ========================================================================

    def _build(
        self,
        organisation_id: int,
        user_id: int,
        title: str,
        message: str,
        entity_type: NotificationEntityType,
        entity_id: str,
        link: Optional[str] = None,
    ) -> Notification:
        return Notification(
            organisation_id=organisation_id,
            user_id=user_id,
            title=title[:TITLE_MAX_LENGTH],
            message=message[:MESSAGE_MAX_LENGTH],
            entity_type=entity_type.value,
            entity_id=entity_id,
            link=link,
            is_read=False,
            created_at=self.clock(),
        )

    def send(
        self,
        organisation_id: int,
        user_id: int,
        title: str,
        message: str,
        entity_type: NotificationEntityType,
        entity_id: str,
        link: Optional[str] = None,
    ) -> Notification:
        """
        Create a notification record unconditionally.

        Args:
            organisation_id: Organisation ID for tenant isolation
            user_id: Recipient user's internal ID
            title: Notification title (max 255 chars)
            message: Notification detail (max 1000 chars)
            entity_type: Kind of record the alert is about
            entity_id: GUID of that record
            link: In-app navigation path

        Returns:
            Created Notification instance
        """
        notification = self._build(
            organisation_id, user_id, title, message, entity_type, entity_id, link
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        logger.info(
            "Created notification",
            extra={
                "guid": notification.guid,
                "entity_type": entity_type.value,
                "user_id": user_id,
            },
        )
        return notification

    def send_many(self, notifications: Sequence[Notification]) -> int:
        """
        Insert pending notifications in a single commit.

        Returns:
            Number of notifications inserted
        """
        if not notifications:
            return 0
        self.db.add_all(notifications)
        self.db.commit()
        return len(notifications)

    # ========================================================================
    # Deduplicated fan-out
    # ========================================================================

    def is_duplicate(
        self,
        organisation_id: int,
        user_id: int,
        title: str,
        entity_type: NotificationEntityType,
        entity_id: str,
    ) -> bool:
        """
        Check whether the same alert reached this user inside the window.

        The window is ``[clock() - dedup_window, ...)``, evaluated now.
        """
        since = self.clock() - self.dedup_window
        existing = (
            self.db.query(Notification.id)
            .filter(
                Notification.organisation_id == organisation_id,
                Notification.user_id == user_id,
                Notification.title == title[:TITLE_MAX_LENGTH],
                Notification.entity_type == entity_type.value,
                Notification.entity_id == entity_id,
                Notification.created_at >= since,
            )
            .first()
        )
        return existing is not None

    def notify_audience(self, organisation_id: int, violation: RuleViolation) -> int:
        """
        Alert every manager-tier user of the organisation about a violation.

        Recipients who already received the same alert inside the dedup
        window are skipped; the rest are inserted in one batch.

        Args:
            organisation_id: Organisation the violation belongs to
            violation: What to alert about

        Returns:
            Number of notifications created (0 when all were duplicates or
            the organisation has no manager-tier users)
        """
        recipients = UserService(self.db).list_manager_tier(organisation_id)
        title = violation.title[:TITLE_MAX_LENGTH]

        pending: List[Notification] = []
        for recipient in recipients:
            if self.is_duplicate(
                organisation_id=organisation_id,
                user_id=recipient.id,
                title=title,
                entity_type=violation.entity_type,
                entity_id=violation.entity_id,
            ):
                continue
            pending.append(
                self._build(
                    organisation_id=organisation_id,
                    user_id=recipient.id,
                    title=title,
                    message=violation.message,
                    entity_type=violation.entity_type,
                    entity_id=violation.entity_id,
                    link=violation.link,
                )
            )

        created = self.send_many(pending)
        if created:
            logger.info(
                "Sent compliance alert",
                extra={
                    "organisation_id": organisation_id,
                    "title": title,
                    "entity_type": violation.entity_type.value,
                    "created": created,
                    "suppressed": len(recipients) - created,
                },
            )
        return created

    # ========================================================================
    # Reading
    # ========================================================================

    def get_unread(self, user_id: int, organisation_id: int) -> List[Notification]:
        """
        Get every unread notification for a user, newest first.

        Args:
            user_id: User's internal ID
            organisation_id: Organisation ID for tenant isolation
        """
        return (
            self.db.query(Notification)
            .filter(
                Notification.user_id == user_id,
                Notification.organisation_id == organisation_id,
                Notification.is_read == False,  # noqa: E712
            )
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def list_notifications(
        self,
        user_id: int,
        organisation_id: int,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> List[Notification]:
        """
        Get the most recent notifications for a user regardless of read state.

        Args:
            user_id: User's internal ID
            organisation_id: Organisation ID for tenant isolation
            limit: Maximum results (1-100)

        Raises:
            ValidationError: If limit is outside 1-100
        """
        if limit < 1 or limit > MAX_LIST_LIMIT:
            raise ValidationError(
                f"limit must be between 1 and {MAX_LIST_LIMIT}", field="limit"
            )
        return (
            self.db.query(Notification)
            .filter(
                Notification.user_id == user_id,
                Notification.organisation_id == organisation_id,
            )
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )

    def get_unread_count(self, user_id: int, organisation_id: int) -> int:
        """Get the number of unread notifications for a user."""
        return (
            self.db.query(func.count(Notification.id))
            .filter(
                Notification.user_id == user_id,
                Notification.organisation_id == organisation_id,
                Notification.is_read == False,  # noqa: E712
            )
            .scalar()
        )

    # ========================================================================
    # Read tracking
    # ========================================================================

    def mark_as_read(self, guid: str, user_id: int) -> int:
        """
        Mark one notification as read (idempotent, tolerant).

        The update matches both the notification and the user, so a user
        can never mark someone else's notification. Unknown, malformed or
        foreign GUIDs simply update nothing. Already-read notifications
        keep their original read_at.

        Args:
            guid: Notification GUID (ntf_xxx)
            user_id: User's internal ID

        Returns:
            Number of notifications updated (0 or 1)
        """
        try:
            uuid_value = Notification.parse_guid(guid)
        except ValueError:
            return 0

        updated = (
            self.db.query(Notification)
            .filter(
                Notification.uuid == uuid_value,
                Notification.user_id == user_id,
                Notification.is_read == False,  # noqa: E712
            )
            .update(
                {"is_read": True, "read_at": self.clock()},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return updated

    def mark_all_as_read(self, user_id: int, organisation_id: int) -> int:
        """
        Mark all unread notifications as read for a user.

        Already-read notifications are not touched.

        Returns:
            Number of notifications that were marked as read
        """
        update_values: Dict[str, Any] = {"is_read": True, "read_at": self.clock()}
        updated = (
            self.db.query(Notification)
            .filter(
                Notification.user_id == user_id,
                Notification.organisation_id == organisation_id,
                Notification.is_read == False,  # noqa: E712
            )
            .update(update_values, synchronize_session=False)
        )
        self.db.commit()
        return updated
