"""Typed model for day-over-day alerts and consumption deltas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SizeTier = Literal["big", "medium", "small"]
Bucket = Literal["urgent", "warning", "info"]
AlertKind = Literal[
    "new_float_big",
    "new_float_medium",
    "new_float_small",
    "big_drop_critical",
    "big_drop_significant",
    "medium_drop",
    "big_increase",
]
Direction = Literal["up", "down"]


@dataclass(frozen=True)
class AlertItem:
    """A single classified change for one VLAN.

    Attributes:
        kind: Alert subtype.
        vlan: VLAN number.
        name: VLAN display name at analysis time.
        port: Port label derived from the name.
        from_mb: Usage on the comparison date.
        to_mb: Usage on the analysed date.
        percent: Rounded percentage change (always 100 for new outages).
        size: Size tier of the comparison-date usage.
        original_size: Comparison-date usage the tier was derived from.
        drop_amount: Absolute decrease, drop subtypes only.
        increase_amount: Absolute increase, ``big_increase`` only.
    """

    kind: AlertKind
    vlan: int
    name: str
    port: str
    from_mb: int
    to_mb: int
    percent: int
    size: SizeTier
    original_size: int
    drop_amount: int | None = None
    increase_amount: int | None = None


@dataclass(frozen=True)
class AlertRecord:
    """Alerts produced by one analysis, grouped by severity bucket.

    Attributes:
        date: The analysed (saved) date.
        compared_with: The earlier date actually compared against.
        timestamp: ISO timestamp of generation.
        urgent: Items in the urgent bucket, VLAN order.
        warning: Items in the warning bucket, VLAN order.
        info: Items in the info bucket, VLAN order.
    """

    date: str
    compared_with: str
    timestamp: str
    urgent: tuple[AlertItem, ...] = ()
    warning: tuple[AlertItem, ...] = ()
    info: tuple[AlertItem, ...] = ()

    @property
    def total(self) -> int:
        return len(self.urgent) + len(self.warning) + len(self.info)


@dataclass(frozen=True)
class ConsumptionDelta:
    """Day-over-day change of one VLAN, for per-cell annotations.

    Attributes:
        difference: Current minus previous usage, one decimal.
        percentage: Absolute change relative to previous usage, one decimal
            (``100.0`` when the previous usage was zero).
        direction: ``"up"`` or ``"down"``.
    """

    difference: float
    percentage: float
    direction: Direction
