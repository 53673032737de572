"""Post-processing of summarisation answers."""
from __future__ import annotations

import re
from typing import List

_KEY_POINTS_RE = re.compile(r"##\s*Key Points[^\n]*\n(.*?)(?=\n##|\Z)", re.DOTALL | re.IGNORECASE)
_BULLET_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+(.*\S)\s*$")


def extract_key_points(summary: str) -> List[str]:
    """Return the bullet lines of the ``## Key Points`` section.

    A missing section yields an empty list.
    """

    match = _KEY_POINTS_RE.search(summary)
    if not match:
        return []
    points: List[str] = []
    for line in match.group(1).splitlines():
        bullet = _BULLET_RE.match(line)
        if bullet:
            points.append(bullet.group(1).strip())
    return points
