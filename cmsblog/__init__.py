from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import click
from flask import Flask, current_app, g, jsonify, render_template, request
from markupsafe import Markup

from cmsblog.cms import BlockedURLError, CMSError
from cmsblog.config import Config
from cmsblog.extensions import cache, limiter
from cmsblog.logging_config import configure_logging
from cmsblog.security import apply_security_headers
from cmsblog.utils.html_sanitizer import sanitize_html
from cmsblog.utils.richtext import as_html


def _wants_json() -> bool:
    if request.args.get("format") == "json" or request.path.startswith("/posts/more"):
        return True
    return request.accept_mimetypes.best == "application/json"


def create_app(config_overrides: Dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=False)

    # Load config
    app.config.from_object(Config())
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging()

    # Init extensions
    cache.init_app(app)
    limiter.init_app(app)

    @app.context_processor
    def template_context() -> dict:
        return {
            "site_name": app.config.get("SITE_NAME"),
            "script_nonce": getattr(g, "script_nonce", ""),
        }

    @app.template_filter("rich_text")
    def rich_text_filter(blocks: list[dict] | None) -> Markup:
        """Render a rich text field to sanitized HTML."""
        return Markup(sanitize_html(as_html(blocks)))

    # Request context enrichment for logging
    @app.before_request
    def add_request_context() -> None:
        g.request_id = request.headers.get("X-Request-ID") or os.urandom(8).hex()
        # Per-request script nonce for CSP-compliant script tags
        g.script_nonce = os.urandom(16).hex()

    # Security headers
    @app.after_request
    def set_headers(resp):
        return apply_security_headers(resp)

    # Blueprints
    from cmsblog.blueprints.blog import bp as blog_bp

    app.register_blueprint(blog_bp)

    # Health route
    @app.get("/health")
    def health():
        from cmsblog.repositories.posts import get_client

        try:
            get_client().get_api()
            cms_ok = "reachable"
        except (CMSError, BlockedURLError) as e:
            current_app.logger.warning(f"Content API health check failed: {e}")
            cms_ok = "error"
        return jsonify({"status": "ok", "cms": cms_ok}), 200

    # Error handlers: JSON for API-style requests, pages otherwise
    @app.errorhandler(400)
    def bad_request(e):
        if _wants_json():
            return jsonify({"error": "bad_request", "message": str(e)}), 400
        return render_template("errors/400.html"), 400

    @app.errorhandler(404)
    def not_found(e):
        if _wants_json():
            return jsonify({"error": "not_found", "message": "resource not found"}), 404
        return render_template("errors/404.html"), 404

    @app.errorhandler(429)
    def rate_limited(e):
        if _wants_json():
            return jsonify({"error": "rate_limited", "message": "too many requests"}), 429
        return render_template("errors/429.html"), 429

    @app.errorhandler(CMSError)
    def cms_unavailable(e: CMSError):
        app.logger.error(f"Content API failure on {request.path}: {e}")
        if _wants_json():
            return jsonify({"error": "cms_unavailable", "message": "content service unavailable"}), 502
        return render_template("errors/500.html"), 502

    @app.errorhandler(500)
    def server_error(e):
        if _wants_json():
            return jsonify({"error": "server_error", "message": "internal server error"}), 500
        return render_template("errors/500.html"), 500

    # CLI: static export
    @app.cli.command("build-static")
    @click.option("--output", "-o", default=None, help="Output directory (defaults to STATIC_EXPORT_DIR).")
    def build_static(output: str | None) -> None:
        """Pre-render the listing and every post page."""
        from cmsblog.services.static_build import build_site

        report = build_site(Path(output or app.config["STATIC_EXPORT_DIR"]))
        click.echo(f"Built {len(report.pages)} pages into {report.output_dir}")
        for path in report.skipped:
            click.echo(f"Skipped {path}", err=True)

    @app.cli.command("list-paths")
    def list_paths() -> None:
        """Print every post path the static export would render."""
        from cmsblog.services.static_build import collect_post_paths

        for path in collect_post_paths():
            click.echo(path)

    return app
