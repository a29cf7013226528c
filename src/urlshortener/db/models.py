from sqlalchemy import String, Text, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone

from urlshortener.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UrlMapping(Base):
    __tablename__ = "url_mappings"

    id: Mapped[int] = mapped_column(primary_key=True)
    original_url: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # uniqueness is enforced here, the allocation loop only avoids most collisions
    short_code: Mapped[str] = mapped_column(String(16), unique=True, index=True, nullable=False)

    visit_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )
