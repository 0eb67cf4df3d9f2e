"""
Snippety — Snippet Store (Data Access)
========================================

What:  Sole point of contact with persisted snippet data.
Why:   Keeps the expiry-visibility rule in one place: every read filters on
       `expires > now`, so expired rows never leave this module.
How:   Each operation opens its own session from the factory, runs one
       statement built with the SQLAlchemy expression language (values are
       always bound parameters) and releases the connection on exit.
Who:   Called by route handlers through the `get_snippet_store` dependency.

Statements:
    create:  INSERT INTO snippets (title, content, created, expires) VALUES (?, ?, ?, ?)
    get:     SELECT ... FROM snippets WHERE id = ? AND expires > ?
    latest:  SELECT ... FROM snippets WHERE expires > ? ORDER BY id DESC LIMIT 10

"now" comes from the store's clock rather than the database server, so the
same rule holds on every backend and tests can move time forward.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snippety.exceptions import DatabaseError, NotFoundError
from snippety.models.snippet import SnippetRecord
from snippety.schemas.snippet import Snippet

logger = logging.getLogger(__name__)

LATEST_LIMIT = 10

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnippetStore:
    """
    Create, fetch and list snippets.

    Safe for concurrent use: the only shared state is the engine's
    connection pool behind the session factory.

    Error Handling Strategy:
        Missing or expired rows raise NotFoundError. Any SQLAlchemy failure
        is wrapped in DatabaseError with the driver error chained as the
        cause. Nothing is retried.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Optional[Clock] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    async def create(self, title: str, content: str, days: int) -> int:
        """
        Insert a new snippet that stays live for `days` days.

        Args:
            title: Snippet title (validated by the caller)
            content: Snippet body (validated by the caller)
            days: Lifetime in days; expires = created + days

        Returns:
            The id assigned by the database

        Raises:
            DatabaseError: the insert or commit failed
        """
        created = self.now()
        record = SnippetRecord(
            title=title,
            content=content,
            created=created,
            expires=created + timedelta(days=days),
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(record)
                    await session.flush()
                    snippet_id = record.id
        except SQLAlchemyError as e:
            logger.error("Database error inserting snippet: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the snippet. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Snippet %d created (expires in %d days)", snippet_id, days)
        return snippet_id

    async def get(self, snippet_id: int) -> Snippet:
        """
        Return the live snippet with the given id.

        Raises:
            NotFoundError: no row with this id, or the row has expired
            DatabaseError: the query failed
        """
        stmt = select(SnippetRecord).where(
            SnippetRecord.id == snippet_id,
            SnippetRecord.expires > self.now(),
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching snippet %s: %s", snippet_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the snippet. Please try again.",
                context={"snippet_id": snippet_id, "error_type": type(e).__name__},
            ) from e

        if record is None:
            raise NotFoundError(resource="snippet", resource_id=snippet_id)

        return Snippet.model_validate(record)

    async def latest(self) -> List[Snippet]:
        """
        Return up to ten live snippets, newest (highest id) first.

        An empty list means there are no live snippets; it is not an error.

        Raises:
            DatabaseError: the query failed
        """
        stmt = (
            select(SnippetRecord)
            .where(SnippetRecord.expires > self.now())
            .order_by(SnippetRecord.id.desc())
            .limit(LATEST_LIMIT)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                records = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing snippets: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve snippets. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        return [Snippet.model_validate(record) for record in records]
