"""Timer ORM model."""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, true
from sqlalchemy.sql import func
from countdown.database import Base


class Timer(Base):
    __tablename__ = "timers"

    timer_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    event_name = Column(String(255), nullable=False)
    event_date = Column(DateTime(timezone=True), nullable=False)  # UTC
    is_main_display = Column(Boolean, nullable=False, default=False)
    share_id = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4()))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_timers_owner_event_date", "owner_id", "event_date"),
        # At most one main timer per owner, enforced by the store.
        Index(
            "uq_timers_one_main_per_owner",
            "owner_id",
            unique=True,
            sqlite_where=is_main_display == true(),
            postgresql_where=is_main_display == true(),
        ),
    )
