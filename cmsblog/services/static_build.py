"""Pre-generate the listing and every post page as static files.

Layout of the export::

    index.html              listing, first page
    index.json              listing data (next_page + results)
    post/<uid>/index.html   post page
    post/<uid>.json         post data
    static/...              css, js and images
"""
from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
from flask import current_app
from werkzeug.utils import secure_filename

from cmsblog.blueprints.view.home import load_home_pagination, render_home
from cmsblog.blueprints.view.post import render_post
from cmsblog.repositories.posts import fetch_post, iter_post_uids
from cmsblog.schemas import Post

log = structlog.get_logger(__name__)


@dataclass
class BuildReport:
    output_dir: Path
    pages: list[str] = field(default_factory=list)
    data_files: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def collect_post_paths() -> list[str]:
    """Every post path to pre-render, e.g. ``/post/my-first-post``."""
    return [f"/post/{uid}" for uid in iter_post_uids()]


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _write_json(path: Path, data: Any) -> None:
    _write_text(path, json.dumps(data, ensure_ascii=False, indent=2))


def build_site(output_dir: str | Path) -> BuildReport:
    """Render the site into ``output_dir``. Must run inside an app context."""
    app = current_app._get_current_object()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    report = BuildReport(output_dir=output_dir)

    with app.test_request_context("/"):
        pagination = load_home_pagination()
        _write_text(output_dir / "index.html", render_home(pagination, static_export=True))
    _write_json(output_dir / "index.json", pagination.model_dump(mode="json"))
    report.pages.append("/")
    report.data_files.append("index.json")

    for uid in iter_post_uids():
        path = f"/post/{uid}"
        if secure_filename(uid) != uid:
            log.warning("static_build_unsafe_uid", uid=uid)
            report.skipped.append(path)
            continue

        with app.test_request_context(path):
            doc = fetch_post(uid)
            if not doc:
                # Unpublished between listing and fetch
                log.warning("static_build_post_missing", uid=uid)
                report.skipped.append(path)
                continue
            post = Post.from_document(doc)
            _write_text(output_dir / "post" / uid / "index.html", render_post(post))
        _write_json(output_dir / "post" / f"{uid}.json", post.model_dump(mode="json"))
        report.pages.append(path)
        report.data_files.append(f"post/{uid}.json")

    if app.static_folder and Path(app.static_folder).is_dir():
        shutil.copytree(app.static_folder, output_dir / "static", dirs_exist_ok=True)

    log.info(
        "static_build_done",
        output_dir=str(output_dir),
        pages=len(report.pages),
        skipped=len(report.skipped),
    )
    return report
