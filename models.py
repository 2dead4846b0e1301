from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

MovieId = Union[int, str]


class Genre(BaseModel):
    id: int
    name: str


class CastMember(BaseModel):
    id: int
    name: str
    character: Optional[str] = None
    profile_path: Optional[str] = None


class CrewMember(BaseModel):
    id: int
    name: str
    job: Optional[str] = None
    department: Optional[str] = None


class Credits(BaseModel):
    cast: list[CastMember] = Field(default_factory=list)
    crew: list[CrewMember] = Field(default_factory=list)


class Video(BaseModel):
    key: str
    site: str
    type: str
    name: Optional[str] = None


class VideoList(BaseModel):
    results: list[Video] = Field(default_factory=list)


class CatalogRecord(BaseModel):
    id: MovieId
    title: str
    poster_path: Optional[str] = None
    vote_average: float = Field(ge=0.0, le=10.0)
    release_date: Optional[date] = None
    backdrop_path: Optional[str] = None
    overview: Optional[str] = None
    runtime: Optional[int] = None
    vote_count: Optional[int] = None
    genres: list[Genre] = Field(default_factory=list)
    budget: Optional[int] = None
    revenue: Optional[int] = None
    credits: Optional[Credits] = None
    videos: Optional[VideoList] = None

    @field_validator("release_date", mode="before")
    @classmethod
    def _blank_date_is_absent(cls, value):
        # TMDB sends "" for unreleased titles
        return value or None


class WatchlistEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: MovieId
    title: str
    poster_path: Optional[str] = None
    vote_average: float = Field(ge=0.0, le=10.0)
    release_date: Optional[date] = None
