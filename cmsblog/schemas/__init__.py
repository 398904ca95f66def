from __future__ import annotations

# Re-export common schema classes for convenient imports
from .posts import (  # noqa: F401
    Banner,
    ContentSection,
    Post,
    PostData,
    PostPagination,
    PostSummary,
    PostSummaryData,
)

__all__ = [
    "Banner",
    "ContentSection",
    "Post",
    "PostData",
    "PostPagination",
    "PostSummary",
    "PostSummaryData",
]
