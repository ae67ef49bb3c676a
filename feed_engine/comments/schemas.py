from datetime import datetime
from typing import Optional

from pydantic import Field, validator

from feed_engine.comments.constants import COMMENT_EMPTY, MAX_COMMENT_LENGTH
from feed_engine.models import CustomModel
from feed_engine.posts.schemas import Author, MutationStatus
from feed_engine.posts.utils import sanitize_content


class Comment(CustomModel):
    id: str = Field(..., description="Comment ID")
    post_id: str = Field(..., description="Post the comment belongs to")
    content: str = Field(..., description="Comment text")
    author: Author = Field(..., description="Author snapshot")
    created_at: datetime = Field(..., description="Creation time")


class CommentCreate(CustomModel):
    """Request body for adding a comment"""
    content: str


class CommentDraft(CustomModel):
    content: str = Field(..., max_length=MAX_COMMENT_LENGTH, description="Comment text")

    @validator('content')
    def validate_content(cls, v):
        v = sanitize_content(v)
        if not v:
            raise ValueError(COMMENT_EMPTY)
        return v


class CommentResult(CustomModel):
    """Outcome of a comment mutation; only SUCCESS, NOT_FOUND and UNAUTHORIZED occur"""
    status: MutationStatus
    comment: Optional[Comment] = None

    @property
    def ok(self) -> bool:
        return self.status == MutationStatus.SUCCESS
