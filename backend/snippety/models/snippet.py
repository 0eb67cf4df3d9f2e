"""
Snippety — Snippet SQLAlchemy Model
=====================================

What:  ORM model representing the `snippets` table.
Why:   Maps rows to Python objects so statements are built with bound
       parameters instead of SQL text.
Who:   Used only by SnippetStore; no other component reads or writes rows.

Table Design:
    - id: auto-incrementing integer; creation order == id order, which is
      what "latest" sorts on
    - created / expires: UTC timestamps; expiry is computed at insert time
      and never updated
    - Index on created: matches the schema the app has always shipped with
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snippety.database import Base

TITLE_MAX_LENGTH = 100


class SnippetRecord(Base):
    """
    A persisted snippet row.

    Lifecycle:
        1. Inserted by SnippetStore.create() with created/expires set
        2. Read while expires > now
        3. Never updated; never deleted by the application
    """

    __tablename__ = "snippets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_snippets_created", "created"),
    )

    def __repr__(self) -> str:
        return f"<SnippetRecord(id={self.id}, title={self.title!r}, expires='{self.expires}')>"
