"""Folktale API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, HttpUrl, field_validator

from app.domain.ratings import MAX_RATING, MIN_RATING
from app.domain.story_markup import clean_story_html
from app.schemas.comment import Comment


class Rating(BaseModel):
    user_id: str
    rating: int


class Folktale(BaseModel):
    id: str
    title: str
    content: str
    region: str
    genre: str
    age_group: str
    image_url: str
    audio_url: str | None = None
    views: int = 0
    ratings: list[Rating] = Field(default_factory=list)
    average_rating: float | None = None
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class FolktaleInput(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=10)
    region: str = Field(min_length=1, max_length=50)
    genre: str = Field(min_length=1, max_length=50)
    age_group: str = Field(min_length=1, max_length=50)
    image_url: HttpUrl
    audio_url: HttpUrl | None = None

    @field_validator("title", "content", "region", "genre", "age_group")
    @classmethod
    def _strip(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("content")
    @classmethod
    def _clean_markup(cls, value: str) -> str:
        cleaned = clean_story_html(value).strip()
        if not cleaned:
            raise ValueError("must contain text after removing unsafe markup")
        return cleaned

    @field_validator("image_url")
    @classmethod
    def _require_https(cls, value: HttpUrl) -> HttpUrl:
        if value.scheme != "https":
            raise ValueError("image_url must use https")
        return value


class FolktalePage(BaseModel):
    folktales: list[Folktale]
    total: int


class RateFolktaleRequest(BaseModel):
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)


class FolktaleEnvelope(BaseModel):
    message: str
    data: Folktale


class AdminFolktale(Folktale):
    comments: list[Comment] = Field(default_factory=list)


class AdminFolktaleList(BaseModel):
    message: str
    data: list[AdminFolktale]


class DeletedFolktaleData(BaseModel):
    id: str


class DeleteFolktaleResponse(BaseModel):
    message: str
    data: DeletedFolktaleData
