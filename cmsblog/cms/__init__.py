from __future__ import annotations

from cmsblog.cms.client import PrismicClient
from cmsblog.cms.errors import BlockedURLError, CMSError
from cmsblog.cms import predicates

__all__ = [
    "PrismicClient",
    "CMSError",
    "BlockedURLError",
    "predicates",
]
