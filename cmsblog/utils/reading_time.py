from __future__ import annotations

import math
import re
from typing import Iterable

from cmsblog.utils.richtext import as_text

WORD_RE = re.compile(r"\S+")


def count_words(text: str | None) -> int:
    return len(WORD_RE.findall(text or ""))


def estimate_reading_time(content: Iterable[dict], words_per_minute: int = 200) -> int:
    """Minutes needed to read every section heading and body, rounded up."""
    words = 0
    for section in content or []:
        words += count_words(section.get("heading"))
        words += count_words(as_text(section.get("body")))
    return math.ceil(words / max(1, words_per_minute))
