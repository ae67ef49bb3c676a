import uuid

from sqlalchemy import Column, String, Text
from feed_engine.database import Base
from feed_engine.orm_mixins import TimestampMixin


def new_comment_id() -> str:
    return str(uuid.uuid4())


class CommentRecord(Base, TimestampMixin):
    """A comment on a post.

    Like favorites, post_id carries no foreign key; comments of a deleted
    post are no longer reachable through it.
    """
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=new_comment_id)
    post_id = Column(String(36), nullable=False, index=True)
    content = Column(Text, nullable=False)

    # Author identity snapshot taken at creation time
    author_id = Column(String(128), nullable=False)
    author_name = Column(String(255), nullable=False)
    author_image_url = Column(String(512), nullable=True)
