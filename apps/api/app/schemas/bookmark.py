"""Bookmark API schemas."""

from datetime import datetime

from pydantic import BaseModel


class CreateBookmarkRequest(BaseModel):
    folktale_id: str


class BookmarkedFolktale(BaseModel):
    id: str
    title: str
    region: str
    genre: str
    image_url: str
    audio_url: str | None = None


class Bookmark(BaseModel):
    id: str
    folktale_id: str
    created_at: datetime
    folktale: BookmarkedFolktale | None = None
