from __future__ import annotations

from flask import Blueprint

bp = Blueprint("blog", __name__)

# Register the page and JSON routes
import cmsblog.blueprints.view  # noqa: E402,F401
