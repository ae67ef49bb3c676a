"""
Relation store: persistence of favorite relations (post <-> user)
"""
import enum
from typing import Protocol, Set

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from feed_engine.exceptions import StoreUnavailableException
from feed_engine.favorites.models import Favorite


class StoreOutcome(str, enum.Enum):
    OK = "ok"
    CONFLICT = "conflict"


class RelationStore(Protocol):
    async def insert(self, post_id: str, user_id: str) -> StoreOutcome:
        """Create the relation; CONFLICT if it already exists."""
        ...

    async def delete_matching(self, post_id: str, user_id: str) -> int:
        """Delete the first relation matching (post_id, user_id) and return how many matched."""
        ...

    async def query_by_user(self, user_id: str) -> Set[str]:
        """Ids of every post user_id has favorited."""
        ...


class SqlRelationStore:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def insert(self, post_id: str, user_id: str) -> StoreOutcome:
        async with self.session_factory() as session:
            try:
                session.add(Favorite(post_id=post_id, user_id=user_id))
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return StoreOutcome.CONFLICT
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreUnavailableException("relation store", str(e)) from e
        return StoreOutcome.OK

    async def delete_matching(self, post_id: str, user_id: str) -> int:
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    select(Favorite.id)
                    .where(Favorite.post_id == post_id, Favorite.user_id == user_id)
                    .order_by(Favorite.id)
                )
                matches = list(result.scalars().all())
                if not matches:
                    return 0

                await session.execute(delete(Favorite).where(Favorite.id == matches[0]))
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreUnavailableException("relation store", str(e)) from e
        return len(matches)

    async def query_by_user(self, user_id: str) -> Set[str]:
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    select(Favorite.post_id).where(Favorite.user_id == user_id)
                )
            except SQLAlchemyError as e:
                raise StoreUnavailableException("relation store", str(e)) from e
            return set(result.scalars().all())
