"""Pure update functions for :class:`~vlanwatch.model.network.Network`.

Every update function takes a network and returns a new one; the argument is never
mutated, so a caller can persist the result as a single unit.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import date as date_cls
from datetime import datetime, timezone

from vlanwatch.client.errors import InvalidReportDateError
from vlanwatch.model.network import DailySnapshot, Network, VlanDay, VlanHistory
from vlanwatch.model.reading import VlanReading

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_report_date(value: str) -> str:
    """Return *value* if it is a calendar date written exactly as ``YYYY-MM-DD``.

    Dates are compared as strings throughout, so only the zero-padded ISO
    form keeps lexicographic order chronological.

    Raises:
        InvalidReportDateError: For any other spelling or an impossible date.
    """
    try:
        parsed = date_cls.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise InvalidReportDateError(str(value)) from exc
    if parsed.isoformat() != value:
        raise InvalidReportDateError(value)
    return value


def new_network(network_id: str, name: str, now: str | None = None) -> Network:
    """Return an empty network."""
    ts = now or utc_now_iso()
    return Network(id=network_id, name=name, created=ts, last_modified=ts)


def save_snapshot(
    network: Network,
    date: str,
    readings: Sequence[VlanReading],
    *,
    now: str | None = None,
    source: str | None = None,
) -> Network | None:
    """Merge a freshly parsed report for *date* into *network*.

    The snapshot for *date* is replaced wholesale, so VLANs missing from
    *readings* lose their reading for *date* (and their history, if that was
    their only day).  Each reading upserts its
    VLAN history: a new VLAN starts with ``first_seen=date``; a known VLAN
    takes the reading's label as its current and last-reported name.  When
    a VLAN repeats within *readings*, its last reading is the one recorded
    in the history for that day.

    Args:
        network: Current network state.
        date: ``YYYY-MM-DD`` report date.
        readings: Parsed readings, report order.
        now: ISO timestamp to stamp the change with (default: current UTC).
        source: Optional origin label stored with the snapshot and days.

    Returns:
        The updated network, or ``None`` when *readings* is empty (nothing is
        saved).
    """
    if not readings:
        return None
    ts = now or utc_now_iso()

    down: list[int] = []
    for r in readings:
        if r.is_down and r.number not in down:
            down.append(r.number)
    snapshot = DailySnapshot(
        date=date,
        readings=tuple(readings),
        down_numbers=tuple(down),
        parsed_at=ts,
        source=source,
    )

    # A replaced snapshot takes its VLAN days with it.
    reported = {r.number for r in readings}
    vlans: dict[int, VlanHistory] = {}
    for number, history in network.vlans.items():
        if number in reported or date not in history.days:
            vlans[number] = history
            continue
        days = {d: v for d, v in history.days.items() if d != date}
        if days:
            vlans[number] = replace(history, days=days)

    for r in readings:
        day = VlanDay.from_reading(r, date, source=source)
        existing = vlans.get(r.number)
        if existing is None:
            vlans[r.number] = VlanHistory(
                number=r.number,
                name=r.name,
                original_name=r.name,
                last_reported_name=r.name,
                first_seen=date,
                days={date: day},
            )
        else:
            vlans[r.number] = replace(
                existing,
                name=r.name,
                last_reported_name=r.name,
                days={**existing.days, date: day},
            )

    reports = {**network.daily_reports, date: snapshot}
    return replace(
        network,
        daily_reports=reports,
        vlans=vlans,
        dates=tuple(sorted(set(network.dates) | {date})),
        last_modified=ts,
    )


def delete_vlan(network: Network, number: int, *, now: str | None = None) -> Network:
    """Remove VLAN *number* from the history and from every snapshot."""
    if number not in network.vlans and not any(
        r.number == number for s in network.daily_reports.values() for r in s.readings
    ):
        return network

    vlans = {n: h for n, h in network.vlans.items() if n != number}
    reports = {
        date: replace(
            snap,
            readings=tuple(r for r in snap.readings if r.number != number),
            down_numbers=tuple(n for n in snap.down_numbers if n != number),
        )
        for date, snap in network.daily_reports.items()
    }
    return replace(
        network,
        vlans=vlans,
        daily_reports=reports,
        last_modified=now or utc_now_iso(),
    )


def delete_report(network: Network, date: str, *, now: str | None = None) -> Network:
    """Remove the snapshot for *date*.

    The date's reading is removed from every VLAN history as well, and
    VLANs that have no remaining days are dropped.
    """
    if date not in network.daily_reports and date not in network.dates:
        return network

    vlans: dict[int, VlanHistory] = {}
    for number, history in network.vlans.items():
        days = {d: v for d, v in history.days.items() if d != date}
        if days:
            vlans[number] = replace(history, days=days)

    reports = {d: s for d, s in network.daily_reports.items() if d != date}
    return replace(
        network,
        daily_reports=reports,
        vlans=vlans,
        dates=tuple(sorted(reports)),
        last_modified=now or utc_now_iso(),
    )


def delete_all_reports(network: Network, *, now: str | None = None) -> Network:
    """Drop every snapshot, VLAN history and date of *network*."""
    return replace(
        network,
        daily_reports={},
        vlans={},
        dates=(),
        last_modified=now or utc_now_iso(),
    )


def rename_vlan(
    network: Network,
    number: int,
    new_name: str,
    *,
    now: str | None = None,
) -> Network:
    """Set the display name of VLAN *number*.

    Blank names and unknown VLANs leave *network* unchanged.
    """
    new_name = (new_name or "").strip()
    history = network.vlans.get(number)
    if history is None or not new_name:
        return network
    return replace(
        network,
        vlans={**network.vlans, number: replace(history, name=new_name)},
        last_modified=now or utc_now_iso(),
    )


def check_consistency(network: Network) -> list[str]:
    """Return a description of every broken invariant of *network*.

    An empty list means the network is consistent.
    """
    problems: list[str] = []
    if list(network.dates) != sorted(network.daily_reports):
        problems.append(
            f"dates {list(network.dates)} differ from snapshot dates "
            f"{sorted(network.daily_reports)}"
        )
    seen: set[int] = set()
    for date, snap in network.daily_reports.items():
        for r in snap.readings:
            seen.add(r.number)
            history = network.vlans.get(r.number)
            if history is None:
                problems.append(f"V{r.number} in {date} snapshot has no history")
            elif date not in history.days:
                problems.append(f"V{r.number} history has no reading for {date}")
    for number in sorted(set(network.vlans) - seen):
        problems.append(f"V{number} has history but appears in no snapshot")
    return problems
