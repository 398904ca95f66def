from __future__ import annotations

from typing import Iterator, Optional

import structlog
from flask import current_app

from cmsblog.cms import PrismicClient, predicates
from cmsblog.extensions import cache

log = structlog.get_logger(__name__)

SUMMARY_FIELDS = ("title", "subtitle", "author")


def get_client() -> PrismicClient:
    """Return the app-wide content API client, creating it on first use."""
    client = current_app.extensions.get("prismic")
    if client is None:
        cfg = current_app.config
        client = PrismicClient(
            cfg["PRISMIC_API_ENDPOINT"],
            access_token=cfg.get("PRISMIC_ACCESS_TOKEN"),
            allowed_domains=cfg.get("CMS_ALLOWED_DOMAINS") or [],
            timeout=cfg.get("CMS_TIMEOUT_SECONDS", 10),
            block_private_networks=cfg.get("CMS_BLOCK_PRIVATE_NETWORKS", True),
        )
        current_app.extensions["prismic"] = client
    return client


def _post_type() -> str:
    return current_app.config.get("CMS_POST_TYPE", "posts")


def get_master_ref() -> str:
    """The current master ref, cached for CMS_REF_CACHE_SECONDS."""
    client = get_client()
    key = f"prismic:master_ref:{client.api_endpoint}"
    ref = cache.get(key)
    if ref is None:
        ref = client.master_ref()
        cache.set(key, ref, timeout=current_app.config.get("CMS_REF_CACHE_SECONDS", 60))
    return ref


def fetch_posts_page(page: int = 1, page_size: Optional[int] = None) -> dict:
    """One page of post summaries (title, subtitle, author only)."""
    post_type = _post_type()
    return get_client().query(
        [predicates.at("document.type", post_type)],
        ref=get_master_ref(),
        page_size=page_size or current_app.config.get("POSTS_PAGE_SIZE", 1),
        page=page,
        fetch=[f"{post_type}.{name}" for name in SUMMARY_FIELDS],
        orderings=current_app.config.get("POSTS_ORDERING"),
    )


def fetch_next_page(next_page_url: str) -> dict:
    """The listing page a `next_page` link points at.

    Only its page number is used; the query itself is rebuilt here.
    """
    return fetch_posts_page(page=get_client().page_from_url(next_page_url))


def fetch_post(uid: str) -> Optional[dict]:
    return get_client().get_by_uid(_post_type(), uid, ref=get_master_ref())


def iter_post_uids(page_size: Optional[int] = None) -> Iterator[str]:
    """Yield the uid of every published post, walking all result pages."""
    page_size = page_size or current_app.config.get("POST_PATHS_PAGE_SIZE", 100)
    ref = get_master_ref()
    seen: set[str] = set()
    page = 1
    while True:
        response = get_client().query(
            [predicates.at("document.type", _post_type())],
            ref=ref,
            page_size=page_size,
            page=page,
            fetch=[f"{_post_type()}.title"],
            orderings=current_app.config.get("POSTS_ORDERING"),
        )
        for doc in response.get("results") or []:
            uid = doc.get("uid")
            if uid and uid not in seen:
                seen.add(uid)
                yield uid
        # next_page is absent on the last page
        if not response.get("next_page"):
            break
        page += 1
    log.info("post_uids_collected", count=len(seen))
