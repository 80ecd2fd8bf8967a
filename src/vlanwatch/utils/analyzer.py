"""Day-over-day change detection.

Compares a network's readings on a saved date against the nearest earlier
date that has data and classifies each VLAN's change into an alert bucket.

Classification is an ordered tuple of rules (:data:`RULES`).  For each VLAN
the rules are tried in order and the first one that returns a verdict wins,
so at most one :class:`~vlanwatch.model.alert.AlertItem` is emitted per VLAN:

1. new outage: down on the saved date, not down before;
2. big drop: big VLAN, drop above 50 % (urgent) or 20 % (warning);
3. medium drop: medium VLAN, drop above 70 %;
4. big increase: big VLAN, increase above 100 %.

Small VLANs only ever alert through rule 1.
"""

from __future__ import annotations

import bisect
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from vlanwatch.model.alert import AlertItem, AlertKind, AlertRecord, Bucket, SizeTier
from vlanwatch.model.network import Network, VlanDay, VlanHistory
from vlanwatch.parser.port import classify_port

logger = logging.getLogger(__name__)

BIG_VLAN_MB: int = 3000
MEDIUM_VLAN_MB: int = 1000

BIG_DROP_CRITICAL_PCT: float = 50
BIG_DROP_SIGNIFICANT_PCT: float = 20
MEDIUM_DROP_PCT: float = 70
BIG_INCREASE_PCT: float = 100

_NEW_FLOAT: dict[SizeTier, tuple[Bucket, AlertKind]] = {
    "big": ("urgent", "new_float_big"),
    "medium": ("warning", "new_float_medium"),
    "small": ("info", "new_float_small"),
}


def size_tier(megabytes: float) -> SizeTier:
    """Classify usage into ``big`` (≥ 3000), ``medium`` (≥ 1000) or ``small``."""
    if megabytes >= BIG_VLAN_MB:
        return "big"
    if megabytes >= MEDIUM_VLAN_MB:
        return "medium"
    return "small"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class VlanChange:
    """One VLAN's readings on the comparison date and the analysed date."""

    vlan: VlanHistory
    before: VlanDay
    after: VlanDay

    @property
    def delta(self) -> int:
        return self.after.megabytes - self.before.megabytes

    @property
    def percent(self) -> float:
        return abs(self.delta) / (self.before.megabytes or 1) * 100

    @property
    def size(self) -> SizeTier:
        return size_tier(self.before.megabytes)

    def item(self, kind: AlertKind, **extra: int) -> AlertItem:
        percent = extra.pop("percent", round_half_up(self.percent))
        return AlertItem(
            kind=kind,
            vlan=self.vlan.number,
            name=self.vlan.name,
            port=classify_port(self.vlan.name),
            from_mb=self.before.megabytes,
            to_mb=self.after.megabytes,
            percent=percent,
            size=self.size,
            original_size=self.before.megabytes,
            **extra,
        )


Verdict = tuple[Bucket, AlertItem]
Rule = Callable[[VlanChange], "Verdict | None"]


def _new_float(change: VlanChange) -> Verdict | None:
    if change.after.status != "down" or change.before.status == "down":
        return None
    bucket, kind = _NEW_FLOAT[change.size]
    return bucket, change.item(kind, percent=100)


def _big_drop(change: VlanChange) -> Verdict | None:
    if change.delta >= 0 or change.size != "big":
        return None
    if change.percent > BIG_DROP_CRITICAL_PCT:
        return "urgent", change.item("big_drop_critical", drop_amount=abs(change.delta))
    if change.percent > BIG_DROP_SIGNIFICANT_PCT:
        return "warning", change.item("big_drop_significant", drop_amount=abs(change.delta))
    return None


def _medium_drop(change: VlanChange) -> Verdict | None:
    if change.delta >= 0 or change.size != "medium" or change.percent <= MEDIUM_DROP_PCT:
        return None
    return "warning", change.item("medium_drop", drop_amount=abs(change.delta))


def _big_increase(change: VlanChange) -> Verdict | None:
    if change.delta <= 0 or change.size != "big" or change.percent <= BIG_INCREASE_PCT:
        return None
    return "info", change.item("big_increase", increase_amount=change.delta)


# Priority order; the first rule returning a verdict decides the VLAN.
RULES: tuple[Rule, ...] = (_new_float, _big_drop, _medium_drop, _big_increase)


def classify_change(change: VlanChange, rules: tuple[Rule, ...] = RULES) -> Verdict | None:
    """Return the verdict of the first matching rule, or ``None``."""
    for rule in rules:
        verdict = rule(change)
        if verdict is not None:
            return verdict
    return None


def previous_date(dates: list[str] | tuple[str, ...], date: str) -> str | None:
    """Return the nearest known date strictly before *date*, or ``None``."""
    ordered = sorted(dates)
    if date not in ordered:
        return None
    idx = bisect.bisect_left(ordered, date)
    return ordered[idx - 1] if idx > 0 else None


def next_date(dates: list[str] | tuple[str, ...], date: str) -> str | None:
    """Return the nearest known date strictly after *date*, or ``None``."""
    ordered = sorted(dates)
    idx = bisect.bisect_right(ordered, date)
    return ordered[idx] if idx < len(ordered) else None


def analyze(network: Network, saved_date: str, *, now: str | None = None) -> AlertRecord | None:
    """Compare *saved_date* with the nearest earlier date and build alerts.

    Args:
        network: Network state that already contains *saved_date*.
        saved_date: ``YYYY-MM-DD`` date that was just saved.
        now: ISO timestamp for the record (default: current UTC).

    Returns:
        An :class:`~vlanwatch.model.alert.AlertRecord` (possibly with empty
        buckets), or ``None`` when the network has fewer than two dates or
        no date earlier than *saved_date*.
    """
    if len(network.dates) < 2:
        return None
    compared_with = previous_date(network.dates, saved_date)
    if compared_with is None:
        return None

    buckets: dict[Bucket, list[AlertItem]] = {"urgent": [], "warning": [], "info": []}
    for vlan in network.vlans.values():
        after = vlan.days.get(saved_date)
        before = vlan.days.get(compared_with)
        if after is None or before is None:
            continue
        verdict = classify_change(VlanChange(vlan=vlan, before=before, after=after))
        if verdict is not None:
            bucket, item = verdict
            buckets[bucket].append(item)

    record = AlertRecord(
        date=saved_date,
        compared_with=compared_with,
        timestamp=now or datetime.now(timezone.utc).isoformat(),
        urgent=tuple(buckets["urgent"]),
        warning=tuple(buckets["warning"]),
        info=tuple(buckets["info"]),
    )
    logger.debug(
        "Analysed %s against %s: %d urgent, %d warning, %d info",
        saved_date,
        compared_with,
        len(record.urgent),
        len(record.warning),
        len(record.info),
    )
    return record
