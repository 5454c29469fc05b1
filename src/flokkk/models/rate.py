# src/flokkk/models/rate.py
from datetime import date

from sqlalchemy import Date, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from flokkk.db.session import Base


class WebSearchQuota(Base):
    __tablename__ = "web_search_quota"
    # One row per user; daily_searches resets when last_reset_date falls behind today (UTC).
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    daily_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    daily_searches: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_reset_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_searches: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
