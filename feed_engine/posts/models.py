import uuid

from sqlalchemy import Column, String, Text
from feed_engine.database import Base
from feed_engine.orm_mixins import TimestampMixin


def new_post_id() -> str:
    return str(uuid.uuid4())


class PostRecord(Base, TimestampMixin):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=new_post_id)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String(512), nullable=True)

    # Author identity snapshot taken at creation time
    author_id = Column(String(128), nullable=False, index=True)
    author_name = Column(String(255), nullable=False)
    author_image_url = Column(String(512), nullable=True)
