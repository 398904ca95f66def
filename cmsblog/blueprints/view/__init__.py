from __future__ import annotations

from cmsblog.blueprints.view import home, post  # noqa: F401
