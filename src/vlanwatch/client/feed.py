"""Report feed: assembles a network's raw report text from the realtime database.

Each network publishes one message per color category.  A message is either
plain report text (already in the line format the parser understands) or a
single-line "router summary" such as::

    Router: R1 | Time: 06:00 | Purple (2) | V10: 500 MB - Office | V11: 20 MB - Lab | Green (0) |

which is rewritten into one report line per VLAN.
"""

from __future__ import annotations

import logging
import re

from vlanwatch.client.errors import VlanWatchError
from vlanwatch.client.http import FeedHTTP
from vlanwatch.vendor.feed.endpoints import DEFAULT_FEED_URL, MESSAGE_LEAF, MESSAGES_NODE
from vlanwatch.vendor.feed.mappings import FEED_COLORS, FEED_PLACEHOLDERS, STATUS_GLYPHS

logger = logging.getLogger(__name__)

_COLOR_HEADERS: str = "|".join(c.capitalize() for c in FEED_COLORS)
_ENTRY_SPLIT_RE = re.compile(r"\s*\|\s*(?=V[0-9]+:)", re.IGNORECASE)
_ENTRY_RE = re.compile(r"V([0-9]+)[:\s]+([0-9]+)\s*MB\s*[-\s]+(.+)", re.IGNORECASE | re.DOTALL)


def is_router_summary(message: str) -> bool:
    return "Router:" in message and "Time:" in message


def reformat_router_summary(message: str, color: str) -> str:
    """Rewrite the *color* section of a router summary as report lines.

    Args:
        message: Router summary message.
        color: Feed color key (``purple``, ``green``, ``orange``, ``red``).

    Returns:
        Newline-joined ``<glyph> V<n>: <mb> MB - <name>`` lines; ``""`` when
        the section is missing or has no VLAN entries.
    """
    section_re = re.compile(
        rf"{color.capitalize()}\s*\([0-9]+\)\s*\|\s*(.+?)(?=\s*\|\s*(?:{_COLOR_HEADERS}|$)|$)",
        re.IGNORECASE | re.DOTALL,
    )
    m = section_re.search(message)
    if m is None:
        return ""

    glyph = STATUS_GLYPHS[FEED_COLORS[color]]
    lines: list[str] = []
    for part in _ENTRY_SPLIT_RE.split(m.group(1).strip()):
        entry = _ENTRY_RE.search(part.strip())
        if entry:
            number, megabytes, name = entry.groups()
            lines.append(f"{glyph} V{number}: {megabytes} MB - {name.strip()}")
    return "\n".join(lines)


class ReportFeed:
    """Fetches raw report text for a network label.

    Args:
        base_url: Database root URL (default :data:`DEFAULT_FEED_URL`).
        timeout_s: Per-request timeout in seconds.
        verify_tls: Whether to verify TLS certificates.
        http: Pre-built :class:`~vlanwatch.client.http.FeedHTTP` (overrides
            the other arguments).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_FEED_URL,
        timeout_s: float = 30.0,
        verify_tls: bool = True,
        http: FeedHTTP | None = None,
    ) -> None:
        self._http: FeedHTTP = http or FeedHTTP(
            base_url=base_url,
            timeout_s=timeout_s,
            verify_tls=verify_tls,
        )

    def fetch_message(self, network_label: str, color: str) -> str | None:
        """Return the usable message for one color, or ``None``.

        Raises:
            VlanWatchError: On transport, HTTP or decoding failures.
        """
        data = self._http.read(network_label, MESSAGES_NODE, color, MESSAGE_LEAF)
        if not isinstance(data, str) or not data.strip():
            return None
        if any(p in data for p in FEED_PLACEHOLDERS):
            return None
        return data.strip()

    def fetch_raw_report_text(self, network_label: str) -> str:
        """Assemble the report text for *network_label* across all colors.

        A color that cannot be fetched is logged and skipped; the others are
        still collected.

        Returns:
            The assembled text, possibly empty.
        """
        chunks: list[str] = []
        for color in FEED_COLORS:
            try:
                message = self.fetch_message(network_label, color)
            except VlanWatchError as exc:
                logger.warning("Skipping %s/%s: %s", network_label, color, exc)
                continue
            if message is None:
                continue
            if is_router_summary(message):
                message = reformat_router_summary(message, color)
            if message:
                chunks.append(message)
        text = "\n".join(chunks).strip()
        logger.debug("Fetched %d character(s) for %s", len(text), network_label)
        return text

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ReportFeed:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
