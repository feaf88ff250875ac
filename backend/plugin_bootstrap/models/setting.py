from __future__ import annotations
from datetime import datetime, timezone
from typing import Any
from sqlalchemy import Integer, String, DateTime, Text, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from plugin_bootstrap.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SettingRow(Base):
    __tablename__ = 'settings'
    __table_args__ = (UniqueConstraint('category', 'key', name='uq_settings_category_key'),)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # system|account|preference|domain
    family: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default='text')
    name: Mapped[str | None] = mapped_column(String(150), nullable=True)
    desc: Mapped[str | None] = mapped_column(Text, nullable=True)
    value: Mapped[Any | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)
