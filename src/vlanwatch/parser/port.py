"""Port label derivation from VLAN display names."""

from __future__ import annotations

import re
from collections.abc import Iterable

# Label for names that carry no recognisable port token ("general").
GENERIC_PORT: str = "عام"

# Ordered: the first pattern that matches wins.
_PORT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"E([0-9]+)", re.IGNORECASE),
    re.compile(r"ether([0-9]+)", re.IGNORECASE),
)


def classify_port(name: str | None) -> str:
    """Return the port label for a VLAN name.

    ``"Office E3"`` → ``"E3"``; ``"ether12-uplink"`` → ``"E12"``; anything
    else → :data:`GENERIC_PORT`.
    """
    if not name:
        return GENERIC_PORT
    for pattern in _PORT_PATTERNS:
        m = pattern.search(name)
        if m:
            return f"E{m.group(1)}"
    return GENERIC_PORT


def port_labels(names: Iterable[str | None]) -> list[str]:
    """Return the sorted, de-duplicated port labels for *names*."""
    return sorted({classify_port(name) for name in names})
