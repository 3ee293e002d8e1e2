"""SQLAlchemy ORM models."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

SITE_COUNTER_ID = 1


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProfileModel(Base):
    """Public profile page, keyed by the owner's external identity."""

    __tablename__ = "profiles"
    __table_args__ = (CheckConstraint("view_count >= 0", name="ck_profiles_view_count"),)

    owner_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Nullable display fields resolve to their defaults on read
    status_text: Mapped[str | None] = mapped_column(String(200))
    location: Mapped[str | None] = mapped_column(String(100))
    mood: Mapped[str | None] = mapped_column(String(100))
    join_date: Mapped[str] = mapped_column(String(50), nullable=False)
    avatar_ref: Mapped[str | None] = mapped_column(String(500))
    provider_username: Mapped[str | None] = mapped_column(String(100))
    social_links_json: Mapped[str | None] = mapped_column(Text)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shareable_slug: Mapped[str | None] = mapped_column(String(50), unique=True)
    theme_id: Mapped[str | None] = mapped_column(String(50))
    background_kind: Mapped[str | None] = mapped_column(String(50))
    background_ref: Mapped[str | None] = mapped_column(String(500))
    audio_ref: Mapped[str | None] = mapped_column(String(500))
    audio_title: Mapped[str | None] = mapped_column(String(200))
    name_style: Mapped[str | None] = mapped_column(String(50))
    name_color: Mapped[str | None] = mapped_column(String(9))
    social_icon_style: Mapped[str | None] = mapped_column(String(50))
    social_icon_color: Mapped[str | None] = mapped_column(String(9))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ViewCounterModel(Base):
    """Authoritative per-profile view counter."""

    __tablename__ = "view_counters"
    __table_args__ = (CheckConstraint("count >= 0", name="ck_view_counters_count"),)

    profile_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("profiles.owner_id", ondelete="CASCADE"),
        primary_key=True,
    )
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_viewed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class SiteCounterModel(Base):
    """Singleton row holding site-wide view totals."""

    __tablename__ = "site_counter"
    __table_args__ = (CheckConstraint("id = 1", name="ck_site_counter_singleton"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SITE_COUNTER_ID)
    total_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unique_visitors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_updated_at: Mapped[datetime | None] = mapped_column(DateTime)
