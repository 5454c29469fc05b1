"""Daily web search quota stored per user."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from flokkk.core.settings import settings
from flokkk.db.time import utctoday
from flokkk.models import Notification, User, WebSearchQuota
from flokkk.models.notification import (
    NOTIFICATION_QUOTA_EXHAUSTED,
    NOTIFICATION_QUOTA_WARNING,
)
from flokkk.services.notifications import NotificationEmitter


@dataclass(frozen=True)
class QuotaStatus:
    """Remaining searches for the current UTC day."""

    allowed: bool
    limit: int
    used: int
    remaining: int
    total_searches: int
    resets_on: date

    def as_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "limit": self.limit,
            "used": self.used,
            "remaining": self.remaining,
            "total_searches": self.total_searches,
            "resets_on": self.resets_on.isoformat(),
        }


class WebSearchQuotaService:
    """Check and consume the daily web search allowance."""

    @staticmethod
    def _load(db: Session, user_id: int) -> WebSearchQuota:
        today = utctoday()
        quota = db.get(WebSearchQuota, user_id)
        if quota is None:
            quota = WebSearchQuota(
                user_id=user_id,
                daily_limit=settings.web_search_daily_limit,
                daily_searches=0,
                last_reset_date=today,
                total_searches=0,
            )
            db.add(quota)
            db.flush()
        elif quota.last_reset_date < today:
            quota.daily_searches = 0
            quota.last_reset_date = today
            db.flush()
        return quota

    @staticmethod
    def _status(quota: WebSearchQuota) -> QuotaStatus:
        remaining = max(0, quota.daily_limit - quota.daily_searches)
        return QuotaStatus(
            allowed=remaining > 0,
            limit=quota.daily_limit,
            used=quota.daily_searches,
            remaining=remaining,
            total_searches=quota.total_searches,
            resets_on=quota.last_reset_date + timedelta(days=1),
        )

    @staticmethod
    def check(db: Session, user_id: int) -> QuotaStatus:
        """Return today's quota without consuming any of it."""
        quota = WebSearchQuotaService._load(db, user_id)
        db.commit()
        return WebSearchQuotaService._status(quota)

    @staticmethod
    def consume(db: Session, user_id: int) -> QuotaStatus:
        """Use one search. The status reports ``allowed=False`` if none was left."""
        quota = WebSearchQuotaService._load(db, user_id)
        updated = (
            db.query(WebSearchQuota)
            .filter(
                WebSearchQuota.user_id == user_id,
                WebSearchQuota.daily_searches < WebSearchQuota.daily_limit,
            )
            .update(
                {
                    WebSearchQuota.daily_searches: WebSearchQuota.daily_searches + 1,
                    WebSearchQuota.total_searches: WebSearchQuota.total_searches + 1,
                },
                synchronize_session=False,
            )
        )
        db.commit()
        db.refresh(quota)
        status = WebSearchQuotaService._status(quota)
        if not updated:
            return QuotaStatus(
                allowed=False,
                limit=status.limit,
                used=status.used,
                remaining=0,
                total_searches=status.total_searches,
                resets_on=status.resets_on,
            )
        return status

    @staticmethod
    def notify_if_low(db: Session, user: User, status: QuotaStatus) -> None:
        """Send a low-quota warning (once per day) or an exhausted notice."""
        if status.remaining == 0:
            NotificationEmitter.emit(
                db,
                recipient_id=user.id,
                type=NOTIFICATION_QUOTA_EXHAUSTED,
                content=(
                    "You have used all your daily web searches. "
                    "Your quota will reset tomorrow."
                ),
                sender=None,
            )
            return
        if status.remaining > settings.web_search_warning_threshold:
            return

        already_warned = (
            db.query(func.count(Notification.id))
            .filter(
                Notification.user_id == user.id,
                Notification.type == NOTIFICATION_QUOTA_WARNING,
                Notification.created_at >= datetime.combine(utctoday(), time.min, tzinfo=UTC),
            )
            .scalar()
        )
        if already_warned:
            return
        NotificationEmitter.emit(
            db,
            recipient_id=user.id,
            type=NOTIFICATION_QUOTA_WARNING,
            content=f"You have {status.remaining} web searches remaining today.",
            sender=None,
        )
