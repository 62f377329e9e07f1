# comics_api/models.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from comics_api.lib.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)

def _new_id() -> str:
    return str(uuid.uuid4())


class Story(Base):
    __tablename__ = "stories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    slug: Mapped[str] = mapped_column(String(120), unique=True, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    style: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    pages: Mapped[List["Page"]] = relationship(
        back_populates="story", cascade="all, delete-orphan", order_by="Page.page_number"
    )

    def __repr__(self) -> str:
        return f"<Story {self.slug}>"


class Page(Base):
    __tablename__ = "pages"
    # closes the max()+1 race: the second concurrent insert fails
    __table_args__ = (UniqueConstraint("story_id", "page_number", name="uq_pages_story_page_number"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    story_id: Mapped[str] = mapped_column(ForeignKey("stories.id", ondelete="CASCADE"), index=True, nullable=False)
    page_number: Mapped[int] = mapped_column(Integer, nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    character_image_urls: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    # null while generation is in progress
    generated_image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    story: Mapped[Story] = relationship(back_populates="pages")

    def __repr__(self) -> str:
        return f"<Page {self.story_id}#{self.page_number}>"


class GenerationEvent(Base):
    """One quota-counted, successful page generation."""
    __tablename__ = "generation_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    story_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    page_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
