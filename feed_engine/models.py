from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict


def datetime_to_gmt_str(dt: datetime) -> str:
    """Convert datetime to GMT string format"""
    if not dt.tzinfo:
        dt = dt.replace(tzinfo=ZoneInfo("UTC"))
    return dt.strftime("%Y-%m-%dT%H:%M:%S%z")


class CustomModel(BaseModel):
    """Custom base model with global configurations"""
    model_config = ConfigDict(
        json_encoders={datetime: datetime_to_gmt_str},
        populate_by_name=True,
        from_attributes=True,
    )


# Import all SQLAlchemy models to ensure they are registered with Base.metadata
# This is needed for Alembic to detect all models
from feed_engine.posts.models import PostRecord  # noqa: E402,F401
from feed_engine.favorites.models import Favorite  # noqa: E402,F401
from feed_engine.comments.models import CommentRecord  # noqa: E402,F401
