"""
Content store: persistence of posts
"""
from typing import List, Optional, Protocol

from sqlalchemy import delete, desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from feed_engine.exceptions import StoreUnavailableException
from feed_engine.posts.models import PostRecord
from feed_engine.posts.schemas import Author, Post, PostQuery


class ContentStore(Protocol):
    async def insert(self, title: str, content: str, author: Author) -> Post:
        """Persist a new post without image; the store assigns id and timestamp."""
        ...

    async def get(self, post_id: str) -> Optional[Post]:
        ...

    async def update_image(self, post_id: str, image_url: str) -> bool:
        """Set the image reference. False if the post does not exist."""
        ...

    async def delete_by_id(self, post_id: str) -> bool:
        """False if the post does not exist."""
        ...

    async def query_ordered(self, query: PostQuery) -> List[Post]:
        """Posts matching query, newest first, ties broken by id ascending.

        An empty id_in set yields [] without touching the backing store.
        """
        ...


def record_to_post(record: PostRecord) -> Post:
    return Post(
        id=record.id,
        title=record.title,
        content=record.content,
        author=Author(
            id=record.author_id,
            name=record.author_name,
            image_url=record.author_image_url,
        ),
        image_url=record.image_url,
        created_at=record.created_at,
    )


class SqlContentStore:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def insert(self, title: str, content: str, author: Author) -> Post:
        async with self.session_factory() as session:
            record = PostRecord(
                title=title,
                content=content,
                image_url=None,
                author_id=author.id,
                author_name=author.name,
                author_image_url=author.image_url,
            )
            try:
                session.add(record)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreUnavailableException("content store", str(e)) from e
            return record_to_post(record)

    async def get(self, post_id: str) -> Optional[Post]:
        async with self.session_factory() as session:
            try:
                record = await session.get(PostRecord, post_id)
            except SQLAlchemyError as e:
                raise StoreUnavailableException("content store", str(e)) from e
            return record_to_post(record) if record else None

    async def update_image(self, post_id: str, image_url: str) -> bool:
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    update(PostRecord)
                    .where(PostRecord.id == post_id)
                    .values(image_url=image_url)
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreUnavailableException("content store", str(e)) from e
            return result.rowcount > 0

    async def delete_by_id(self, post_id: str) -> bool:
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    delete(PostRecord).where(PostRecord.id == post_id)
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreUnavailableException("content store", str(e)) from e
            return result.rowcount > 0

    async def query_ordered(self, query: PostQuery) -> List[Post]:
        # Some backends reject `IN ()`, never send one
        if query.id_in is not None and not query.id_in:
            return []

        stmt = select(PostRecord)
        if query.author_id is not None:
            stmt = stmt.where(PostRecord.author_id == query.author_id)
        if query.id_in is not None:
            stmt = stmt.where(PostRecord.id.in_(sorted(query.id_in)))
        stmt = stmt.order_by(desc(PostRecord.created_at), PostRecord.id)

        async with self.session_factory() as session:
            try:
                result = await session.execute(stmt)
            except SQLAlchemyError as e:
                raise StoreUnavailableException("content store", str(e)) from e
            return [record_to_post(record) for record in result.scalars().all()]
