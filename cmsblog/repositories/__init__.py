from cmsblog.repositories.posts import (
    get_client,
    get_master_ref,
    fetch_posts_page,
    fetch_next_page,
    fetch_post,
    iter_post_uids,
)

__all__ = [
    "get_client",
    "get_master_ref",
    "fetch_posts_page",
    "fetch_next_page",
    "fetch_post",
    "iter_post_uids",
]
