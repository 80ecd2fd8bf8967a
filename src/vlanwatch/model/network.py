"""Typed model for per-network VLAN history and daily snapshots.

All classes are frozen: a change to a network is expressed by building a new
:class:`Network` (see :mod:`vlanwatch.utils.store`), never by mutating one
in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from vlanwatch.model.reading import VlanReading
from vlanwatch.vendor.feed.mappings import StatusTag


@dataclass(frozen=True)
class VlanDay:
    """A VLAN's reading on one report date, as kept in its history.

    Attributes:
        status: Canonical status tag on that day.
        megabytes: Usage in MB on that day.
        display: Long display string (e.g. ``"🟣 500MB"``).
        short_display: Compact display string (e.g. ``"🟣500"``).
        reported_name: Label the report carried for the VLAN that day.
        report_date: The ``YYYY-MM-DD`` date this reading belongs to.
        source: Optional origin label (e.g. ``"feed"``).
    """

    status: StatusTag
    megabytes: int
    display: str = ""
    short_display: str = ""
    reported_name: str = ""
    report_date: str = ""
    source: str | None = None

    @classmethod
    def from_reading(
        cls,
        reading: VlanReading,
        date: str,
        source: str | None = None,
    ) -> VlanDay:
        return cls(
            status=reading.status,
            megabytes=reading.megabytes,
            display=reading.display,
            short_display=reading.short_display,
            reported_name=reading.name,
            report_date=date,
            source=source,
        )


@dataclass(frozen=True)
class VlanHistory:
    """Everything known about one VLAN of a network, across all dates.

    Attributes:
        number: VLAN identifier.
        name: Current display name (operator rename or latest report label).
        original_name: Label from the report the VLAN was first seen in.
        last_reported_name: Label from the most recent report.
        first_seen: Date the VLAN first appeared.
        days: Mapping of ``YYYY-MM-DD`` date to :class:`VlanDay`.
    """

    number: int
    name: str
    original_name: str = ""
    last_reported_name: str = ""
    first_seen: str = ""
    days: dict[str, VlanDay] = field(default_factory=dict)


@dataclass(frozen=True)
class DailySnapshot:
    """All readings captured for one network on one date.

    Attributes:
        date: ``YYYY-MM-DD`` report date.
        readings: Readings in report order (duplicates preserved).
        down_numbers: VLAN numbers reported down, first-occurrence order.
        parsed_at: ISO timestamp of the save that produced the snapshot.
        source: Optional origin label.
    """

    date: str
    readings: tuple[VlanReading, ...] = ()
    down_numbers: tuple[int, ...] = ()
    parsed_at: str = ""
    source: str | None = None


@dataclass(frozen=True)
class Network:
    """A monitored network: its snapshots by date and VLAN histories by number.

    Attributes:
        id: Stable identifier (e.g. ``"network_1"``).
        name: Display name, also the feed label (e.g. ``"R1"``).
        daily_reports: Mapping of date to :class:`DailySnapshot`.
        vlans: Mapping of VLAN number to :class:`VlanHistory`.
        dates: Ascending list of dates; always the sorted keys of
            :attr:`daily_reports`.
        created: ISO timestamp of creation.
        last_modified: ISO timestamp of the last change.
    """

    id: str
    name: str
    daily_reports: dict[str, DailySnapshot] = field(default_factory=dict)
    vlans: dict[int, VlanHistory] = field(default_factory=dict)
    dates: tuple[str, ...] = ()
    created: str = ""
    last_modified: str = ""
