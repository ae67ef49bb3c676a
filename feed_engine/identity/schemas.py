from typing import Optional

from pydantic import Field

from feed_engine.models import CustomModel


class CurrentUser(CustomModel):
    """Authenticated user as yielded by the identity provider"""
    id: str = Field(..., min_length=1, description="User ID")
    name: str = Field(..., description="Display name")
    image_url: Optional[str] = Field(None, description="Avatar reference")
