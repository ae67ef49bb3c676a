from sqlalchemy import Column, Integer, String, UniqueConstraint
from feed_engine.database import Base
from feed_engine.orm_mixins import TimestampMixin


class Favorite(Base, TimestampMixin):
    """A user marking a post as favorite.

    post_id carries no foreign key: a relation may outlive its post and is
    simply excluded from favorite feeds once the post is gone.
    """
    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(128), nullable=False, index=True)

    # At most one relation per (post, user)
    __table_args__ = (UniqueConstraint('post_id', 'user_id', name='unique_post_user_favorite'),)
