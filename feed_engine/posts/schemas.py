import enum
from datetime import datetime
from typing import FrozenSet, List, Optional

from pydantic import Field, model_validator, validator

from feed_engine.identity.schemas import CurrentUser
from feed_engine.models import CustomModel
from feed_engine.posts.constants import (
    CONTENT_EMPTY,
    IMAGE_NOT_AN_IMAGE,
    IMAGE_TOO_LARGE,
    MAX_CONTENT_LENGTH,
    MAX_IMAGE_BYTES,
    MAX_TITLE_LENGTH,
    TITLE_EMPTY,
)
from feed_engine.posts.utils import format_post_date, sanitize_content, sanitize_title, text_matches

# Constants for field descriptions
TITLE_DESCRIPTION = "Post title"
CONTENT_DESCRIPTION = "Post body text"


class Author(CustomModel):
    """Snapshot of the author's identity taken when the post was created"""
    id: str = Field(..., description="Author ID")
    name: str = Field(..., description="Author display name")
    image_url: Optional[str] = Field(None, description="Author avatar reference")

    @classmethod
    def from_user(cls, user: CurrentUser) -> "Author":
        return cls(id=user.id, name=user.name, image_url=user.image_url)


class Post(CustomModel):
    """A stored post as seen by one requesting user.

    is_favorite is derived per request from the requesting user's favorite
    relations; it is never read from the post row.
    """
    id: str = Field(..., description="Post ID")
    title: str = Field(..., description=TITLE_DESCRIPTION)
    content: str = Field(..., description=CONTENT_DESCRIPTION)
    author: Author = Field(..., description="Author snapshot")
    image_url: Optional[str] = Field(None, description="Attached image URL")
    created_at: datetime = Field(..., description="Creation time")
    is_favorite: bool = Field(False, description="Favorited by the requesting user")

    def with_favorite(self, is_favorite: bool) -> "Post":
        return self.model_copy(update={"is_favorite": is_favorite})

    def contains(self, text: str) -> bool:
        """Case-insensitive match against title, content, author name and display date"""
        return text_matches(
            text,
            self.title,
            self.content,
            self.author.name,
            format_post_date(self.created_at),
        )


class PostDraft(CustomModel):
    """Input to post creation; never stored as-is"""
    title: str = Field(..., max_length=MAX_TITLE_LENGTH, description=TITLE_DESCRIPTION)
    content: str = Field(..., max_length=MAX_CONTENT_LENGTH, description=CONTENT_DESCRIPTION)
    image: Optional[bytes] = Field(None, description="Raw image payload")
    image_content_type: Optional[str] = Field(None, description="MIME type of the image payload")

    @validator('title')
    def validate_title(cls, v):
        v = sanitize_title(v)
        if not v:
            raise ValueError(TITLE_EMPTY)
        return v

    @validator('content')
    def validate_content(cls, v):
        v = sanitize_content(v)
        if not v:
            raise ValueError(CONTENT_EMPTY)
        return v

    @model_validator(mode="after")
    def validate_image(self) -> "PostDraft":
        if self.image is None:
            return self
        if not self.image_content_type or not self.image_content_type.startswith("image/"):
            raise ValueError(IMAGE_NOT_AN_IMAGE)
        if len(self.image) > MAX_IMAGE_BYTES:
            raise ValueError(IMAGE_TOO_LARGE.format(limit=MAX_IMAGE_BYTES))
        return self


class FeedScope(str, enum.Enum):
    ALL = "all"
    AUTHOR = "author"
    FAVORITES = "favorites"


class FeedFilter(CustomModel):
    """Which posts a feed shows"""
    scope: FeedScope = Field(FeedScope.ALL, description="Feed shape")
    author_id: Optional[str] = Field(None, description="Author to show (author scope only)")

    @model_validator(mode="after")
    def check_author(self) -> "FeedFilter":
        if self.scope == FeedScope.AUTHOR and not self.author_id:
            raise ValueError("author_id is required for the author scope")
        if self.scope != FeedScope.AUTHOR and self.author_id is not None:
            raise ValueError("author_id is only allowed for the author scope")
        return self

    @classmethod
    def all_posts(cls) -> "FeedFilter":
        return cls(scope=FeedScope.ALL)

    @classmethod
    def by_author(cls, author_id: str) -> "FeedFilter":
        return cls(scope=FeedScope.AUTHOR, author_id=author_id)

    @classmethod
    def favorites(cls) -> "FeedFilter":
        return cls(scope=FeedScope.FAVORITES)

    def includes(self, post: Post) -> bool:
        """Whether post belongs in a feed bound to this filter"""
        if self.scope == FeedScope.AUTHOR:
            return post.author.id == self.author_id
        if self.scope == FeedScope.FAVORITES:
            return post.is_favorite
        return True


class PostQuery(CustomModel):
    """Content store query; no criteria means every post"""
    author_id: Optional[str] = None
    id_in: Optional[FrozenSet[str]] = None


class MutationStatus(str, enum.Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    ALREADY_FAVORITED = "already_favorited"
    NOT_FAVORITED = "not_favorited"


class MutationResult(CustomModel):
    """Outcome of a feed mutation.

    Transient store failures are raised as StoreUnavailableException instead;
    every status here is final and not worth retrying as-is.
    """
    status: MutationStatus
    post: Optional[Post] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == MutationStatus.SUCCESS
