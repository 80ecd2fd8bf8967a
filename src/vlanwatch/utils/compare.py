"""Per-cell day-over-day consumption deltas for tabular views."""

from __future__ import annotations

from collections.abc import Iterable

from vlanwatch.model.alert import ConsumptionDelta
from vlanwatch.model.network import VlanHistory

# Changes smaller than this (absolute MB) are shown as "no change".
NOISE_FLOOR_MB: float = 1


def compare_consumption(
    vlan: VlanHistory,
    date: str,
    known_dates: Iterable[str],
) -> ConsumptionDelta | None:
    """Compare *vlan*'s usage on *date* with the previous known date.

    Args:
        vlan: VLAN history holding the per-day readings.
        date: ``YYYY-MM-DD`` date of the cell being annotated.
        known_dates: All dates of the network, any order.

    Returns:
        A :class:`~vlanwatch.model.alert.ConsumptionDelta`, or ``None`` when
        *date* is the first (or an unknown) date, either day has no reading
        for the VLAN, or the change is below :data:`NOISE_FLOOR_MB`.
    """
    ordered = sorted(known_dates)
    if date not in ordered:
        return None
    idx = ordered.index(date)
    if idx == 0:
        return None

    current = vlan.days.get(date)
    previous = vlan.days.get(ordered[idx - 1])
    if current is None or previous is None:
        return None

    current_mb = current.megabytes or 0
    previous_mb = previous.megabytes or 0
    difference = current_mb - previous_mb
    if abs(difference) < NOISE_FLOOR_MB:
        return None

    if previous_mb > 0:
        percentage = round(abs(difference) / previous_mb * 100, 1)
    else:
        percentage = 100.0
    return ConsumptionDelta(
        difference=round(difference, 1),
        percentage=percentage,
        direction="up" if difference > 0 else "down",
    )
