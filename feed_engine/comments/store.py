"""
Comment store: persistence of comments on posts
"""
from typing import List, Optional, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from feed_engine.comments.models import CommentRecord
from feed_engine.comments.schemas import Comment
from feed_engine.exceptions import StoreUnavailableException
from feed_engine.posts.schemas import Author


class CommentStore(Protocol):
    async def insert(self, post_id: str, content: str, author: Author) -> Comment:
        """Persist a new comment; the store assigns id and timestamp."""
        ...

    async def get(self, comment_id: str) -> Optional[Comment]:
        ...

    async def delete_by_id(self, comment_id: str) -> bool:
        """False if the comment does not exist."""
        ...

    async def query_by_post(self, post_id: str) -> List[Comment]:
        """Comments on post_id, oldest first, ties broken by id ascending."""
        ...


def record_to_comment(record: CommentRecord) -> Comment:
    return Comment(
        id=record.id,
        post_id=record.post_id,
        content=record.content,
        author=Author(
            id=record.author_id,
            name=record.author_name,
            image_url=record.author_image_url,
        ),
        created_at=record.created_at,
    )


class SqlCommentStore:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def insert(self, post_id: str, content: str, author: Author) -> Comment:
        async with self.session_factory() as session:
            record = CommentRecord(
                post_id=post_id,
                content=content,
                author_id=author.id,
                author_name=author.name,
                author_image_url=author.image_url,
            )
            try:
                session.add(record)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreUnavailableException("comment store", str(e)) from e
            return record_to_comment(record)

    async def get(self, comment_id: str) -> Optional[Comment]:
        async with self.session_factory() as session:
            try:
                record = await session.get(CommentRecord, comment_id)
            except SQLAlchemyError as e:
                raise StoreUnavailableException("comment store", str(e)) from e
            return record_to_comment(record) if record else None

    async def delete_by_id(self, comment_id: str) -> bool:
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    delete(CommentRecord).where(CommentRecord.id == comment_id)
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreUnavailableException("comment store", str(e)) from e
            return result.rowcount > 0

    async def query_by_post(self, post_id: str) -> List[Comment]:
        stmt = (
            select(CommentRecord)
            .where(CommentRecord.post_id == post_id)
            .order_by(CommentRecord.created_at, CommentRecord.id)
        )
        async with self.session_factory() as session:
            try:
                result = await session.execute(stmt)
            except SQLAlchemyError as e:
                raise StoreUnavailableException("comment store", str(e)) from e
            return [record_to_comment(record) for record in result.scalars().all()]
