"""Query predicates for the Prismic search endpoint."""
from __future__ import annotations

import json
from typing import Any, Iterable


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_format_value(v) for v in value) + "]"
    return json.dumps(str(value), ensure_ascii=False)


def at(path: str, value: Any) -> str:
    """Match documents whose ``path`` equals ``value``.

    >>> at("document.type", "posts")
    '[at(document.type, "posts")]'
    """
    return f"[at({path}, {_format_value(value)})]"


def build_query(predicates: Iterable[str]) -> str:
    """Combine predicates into the ``q`` parameter value."""
    return "[" + "".join(predicates) + "]"
