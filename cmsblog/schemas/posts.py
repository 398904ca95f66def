from __future__ import annotations

from typing import Any

from flask import current_app, has_app_context
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from cmsblog.utils.dates import format_publication_date
from cmsblog.utils.reading_time import estimate_reading_time
from cmsblog.utils.richtext import as_text


def _setting(key: str, default: Any) -> Any:
    if has_app_context():
        return current_app.config.get(key, default)
    return default


def _key_text(v: Any) -> str:
    """Key text fields may arrive as plain strings or as rich text arrays."""
    if v is None:
        return ""
    if isinstance(v, list):
        return as_text(v)
    return str(v)


class CMSModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PublishedDocument(CMSModel):
    uid: str | None = None
    first_publication_date: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def formatted_date(self) -> str | None:
        return format_publication_date(
            self.first_publication_date,
            locale=_setting("DATE_LOCALE", "pt_BR"),
            fmt=_setting("DATE_FORMAT", "dd MMM yyyy"),
        )


class PostSummaryData(CMSModel):
    title: str = ""
    subtitle: str = ""
    author: str = ""

    @field_validator("title", "subtitle", "author", mode="before")
    @classmethod
    def flatten_text(cls, v: Any) -> str:
        return _key_text(v)


class PostSummary(PublishedDocument):
    data: PostSummaryData = Field(default_factory=PostSummaryData)

    @classmethod
    def from_document(cls, doc: dict) -> "PostSummary":
        return cls.model_validate(doc)


class PostPagination(CMSModel):
    next_page: str | None = None
    results: list[PostSummary] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: dict, public_url=None) -> "PostPagination":
        """Map a search response; ``public_url`` strips secrets from ``next_page``."""
        next_page = response.get("next_page")
        if public_url is not None:
            next_page = public_url(next_page)
        return cls(
            next_page=next_page or None,
            results=[PostSummary.from_document(doc) for doc in response.get("results") or []],
        )


class Banner(CMSModel):
    url: str | None = None
    alt: str | None = None


class ContentSection(CMSModel):
    heading: str = ""
    body: list[dict] = Field(default_factory=list)

    @field_validator("heading", mode="before")
    @classmethod
    def flatten_heading(cls, v: Any) -> str:
        return _key_text(v)

    @field_validator("body", mode="before")
    @classmethod
    def body_list(cls, v: Any) -> list:
        return [b for b in v or [] if isinstance(b, dict)]


class PostData(PostSummaryData):
    banner: Banner = Field(default_factory=Banner)
    content: list[ContentSection] = Field(default_factory=list)

    @field_validator("banner", mode="before")
    @classmethod
    def empty_banner(cls, v: Any) -> Any:
        return v or {}

    @field_validator("content", mode="before")
    @classmethod
    def content_list(cls, v: Any) -> list:
        return v or []


class Post(PublishedDocument):
    uid: str
    data: PostData = Field(default_factory=PostData)

    @classmethod
    def from_document(cls, doc: dict) -> "Post":
        return cls.model_validate(doc)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def reading_time(self) -> int:
        return estimate_reading_time(
            [section.model_dump() for section in self.data.content],
            words_per_minute=_setting("WORDS_PER_MINUTE", 200),
        )
