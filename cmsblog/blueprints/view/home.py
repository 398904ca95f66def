from __future__ import annotations

import structlog
from flask import jsonify, render_template, request, url_for

from cmsblog.cms import BlockedURLError
from cmsblog.extensions import limiter
from cmsblog.repositories.posts import fetch_next_page, fetch_posts_page, get_client
from cmsblog.schemas import PostPagination

from cmsblog.blueprints.blog import bp

log = structlog.get_logger(__name__)


def load_home_pagination() -> PostPagination:
    return PostPagination.from_response(fetch_posts_page(), public_url=get_client().public_url)


def render_home(pagination: PostPagination, static_export: bool = False) -> str:
    # Exported pages have no server to proxy through; the script then fetches next_page directly
    return render_template(
        "home.html",
        posts=pagination.results,
        next_page=pagination.next_page,
        load_more_endpoint="" if static_export else url_for("blog.load_more"),
    )


@bp.get("/")
@limiter.limit("120 per minute")
def home():
    pagination = load_home_pagination()
    if request.args.get("format") == "json":
        return jsonify(pagination.model_dump(mode="json"))
    return render_home(pagination)


@bp.get("/posts/more", endpoint="load_more")
@limiter.limit("120 per minute")
def load_more():
    """Next listing page for the "load more" button."""
    next_page = (request.args.get("next_page") or "").strip()
    if not next_page:
        return jsonify({"error": "bad_request", "message": "next_page is required"}), 400

    try:
        response = fetch_next_page(next_page)
    except BlockedURLError as e:
        log.warning("load_more_blocked", next_page=next_page, reason=str(e))
        return jsonify({"error": "bad_request", "message": "next_page is not a content API page"}), 400

    pagination = PostPagination.from_response(response, public_url=get_client().public_url)
    return jsonify(pagination.model_dump(mode="json"))
