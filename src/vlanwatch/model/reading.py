"""Typed model for parsed report lines."""

from __future__ import annotations

from dataclasses import dataclass, field

from vlanwatch.vendor.feed.mappings import STATUS_GLYPHS, StatusTag


@dataclass(frozen=True)
class VlanReading:
    """One VLAN usage reading extracted from a report line.

    Attributes:
        number: VLAN identifier (positive integer).
        name: Free-text label that followed the reading; may be empty.
        status: Canonical status tag (``down``, ``purple``, ``green``, ``orange``).
        megabytes: Reported usage in MB (non-negative).
    """

    number: int
    name: str
    status: StatusTag
    megabytes: int

    @property
    def glyph(self) -> str:
        """Canonical display glyph for :attr:`status`."""
        return STATUS_GLYPHS[self.status]

    @property
    def display(self) -> str:
        return f"{self.glyph} {self.megabytes}MB"

    @property
    def short_display(self) -> str:
        return f"{self.glyph}{self.megabytes}"

    @property
    def is_down(self) -> bool:
        return self.status == "down"


@dataclass(frozen=True)
class ParseStats:
    """Counters describing one :func:`~vlanwatch.parser.report.parse_report` run.

    Attributes:
        total_lines: Lines scanned, including noise, short and empty lines.
        parsed_count: Lines that produced a reading.
        success: ``True`` when at least one reading was extracted.
        count: Number of readings returned.
    """

    total_lines: int = 0
    parsed_count: int = 0
    success: bool = False
    count: int = 0


@dataclass(frozen=True)
class ParseResult:
    """Readings extracted from a report, in input order, plus statistics."""

    readings: tuple[VlanReading, ...] = ()
    stats: ParseStats = field(default_factory=ParseStats)
