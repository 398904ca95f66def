from __future__ import annotations

from flask import abort, jsonify, render_template, request

from cmsblog.extensions import limiter
from cmsblog.repositories.posts import fetch_post
from cmsblog.schemas import Post

from cmsblog.blueprints.blog import bp


def render_post(post: Post) -> str:
    return render_template("post.html", post=post)


@bp.get("/post/<slug>", endpoint="post")
@limiter.limit("120 per minute")
def post_detail(slug: str):
    doc = fetch_post(slug)
    if not doc:
        if request.args.get("format") == "json":
            return jsonify({"error": "not_found"}), 404
        abort(404)

    post = Post.from_document(doc)
    if request.args.get("format") == "json":
        return jsonify(post.model_dump(mode="json"))
    return render_post(post)
