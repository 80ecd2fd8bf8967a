"""Parser for free-text VLAN usage reports.

A report is a blob of lines, most of them of the form::

    🟣 V123: 500 MB - Office ether3

Headers, blank separators, placeholders and malformed fragments are mixed in
and are skipped silently.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator

from vlanwatch.model.reading import ParseResult, ParseStats, VlanReading
from vlanwatch.vendor.feed.mappings import GLYPH_ALIASES

logger = logging.getLogger(__name__)

# Lines shorter than this (after trimming) are never readings.
MIN_LINE_LENGTH: int = 5

# Upper bound for VLAN numbers and MB values (32-bit signed).
MAX_FIELD_VALUE: int = 2**31 - 1

# Line terminators a report may use; other Unicode separators stay inside names.
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")

_GLYPH_CLASS: str = "".join(re.escape(g) for g in GLYPH_ALIASES)

# <status> [\s\-:]* V<digits> [\s\-:]* <digits> \s* MB [\s\-]* <name>
READING_RE = re.compile(
    rf"(?P<glyph>[{_GLYPH_CLASS}])\ufe0f?"
    r"[\s\-:]*V(?P<number>[0-9]+)"
    r"[\s\-:]*(?P<megabytes>[0-9]+)\s*MB"
    r"[\s\-]*(?P<name>.*)$",
    re.IGNORECASE,
)


def parse_line(line: str) -> VlanReading | None:
    """Parse a single report line.

    Args:
        line: One line of report text (surrounding whitespace allowed).

    Returns:
        A :class:`~vlanwatch.model.reading.VlanReading`, or ``None`` when the
        line is too short, does not match :data:`READING_RE`, or carries a
        VLAN number / MB value outside the accepted range.
    """
    line = line.strip()
    if len(line) < MIN_LINE_LENGTH:
        return None

    m = READING_RE.search(line)
    if m is None:
        return None

    try:
        number = int(m.group("number"), 10)
        megabytes = int(m.group("megabytes"), 10)
    except ValueError:
        return None
    if not 0 < number <= MAX_FIELD_VALUE or megabytes > MAX_FIELD_VALUE:
        logger.debug("Skipping out-of-range reading: %r", line)
        return None

    return VlanReading(
        number=number,
        name=m.group("name").strip(),
        status=GLYPH_ALIASES[m.group("glyph")],  # type: ignore[arg-type]
        megabytes=megabytes,
    )


def iter_readings(lines: Iterable[str]) -> Iterator[VlanReading]:
    """Yield a reading for every line that parses, preserving order."""
    attempts = (parse_line(line) for line in lines)
    return (reading for reading in attempts if reading is not None)


def parse_report(text: str) -> ParseResult:
    """Extract every VLAN reading from a report blob.

    Duplicated VLAN numbers are kept as-is; the caller decides how to merge
    them.

    Args:
        text: Raw report text; CRLF, CR and LF all end a line.

    Returns:
        A :class:`~vlanwatch.model.reading.ParseResult`.  ``stats.success`` is
        ``False`` when nothing was recognised; such a result must not be
        saved.  ``stats.total_lines`` counts the pieces between line
        breaks, so ``""`` is one line and a trailing newline adds an empty
        one.
    """
    lines = _LINE_BREAK_RE.split(text or "")
    readings = tuple(iter_readings(lines))
    stats = ParseStats(
        total_lines=len(lines),
        parsed_count=len(readings),
        success=bool(readings),
        count=len(readings),
    )
    logger.debug("Parsed %d reading(s) from %d line(s)", stats.count, stats.total_lines)
    return ParseResult(readings=readings, stats=stats)
