"""Comment API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateCommentRequest(BaseModel):
    content: str = Field(min_length=1, max_length=2000)


class Comment(BaseModel):
    id: str
    folktale_id: str
    user_id: str
    username: str | None = None
    content: str
    created_at: datetime
