"""Row-per-VLAN / column-per-date projection of a network, and xlsx output."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from vlanwatch.model.network import Network, VlanHistory
from vlanwatch.parser.port import classify_port, port_labels

logger = logging.getLogger(__name__)

# A VLAN whose newest reading is below this is listed by ``down_only``.
WEAK_THRESHOLD_MB: int = 5

MISSING_CELL: str = "-"

_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_HEADER_FONT = Font(bold=True, color="FFFFFF")
_TOTAL_FONT = Font(bold=True)
_THIN = Side(style="thin", color="D9D9D9")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


@dataclass
class UsageTable:
    """Tabular view of a network's usage.

    Attributes:
        columns: Header labels: ``#``, ``VLAN``, ``Name``, dates (newest
            first), ``Total GB``.
        rows: One dict per VLAN keyed by column label.
        totals: Per-date MB sums plus ``Total GB`` for all listed VLANs.
    """

    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    totals: dict[str, Any] = field(default_factory=dict)


def list_ports(network: Network) -> list[str]:
    """Return the sorted port labels present in *network*."""
    return port_labels(h.name for h in network.vlans.values())


def list_down_vlans(network: Network) -> list[VlanHistory]:
    """Return VLANs reported down on at least one day, by number."""
    return sorted(
        (h for h in network.vlans.values() if any(d.status == "down" for d in h.days.values())),
        key=lambda h: h.number,
    )


def build_usage_table(
    network: Network,
    *,
    port: str | None = None,
    down_only: bool = False,
) -> UsageTable:
    """Project *network* into a :class:`UsageTable`.

    Args:
        network: Network to project.
        port: Keep only VLANs whose port label equals this value.
        down_only: Keep only VLANs whose newest-date reading is below
            :data:`WEAK_THRESHOLD_MB`.

    Returns:
        The table, rows sorted by VLAN number.
    """
    dates = sorted(network.dates, reverse=True)
    vlans = sorted(network.vlans.values(), key=lambda h: h.number)
    if port is not None:
        vlans = [h for h in vlans if classify_port(h.name) == port]
    if down_only and dates:
        latest = dates[0]
        vlans = [
            h for h in vlans
            if latest in h.days and h.days[latest].megabytes < WEAK_THRESHOLD_MB
        ]

    rows: list[dict[str, Any]] = []
    for idx, h in enumerate(vlans, start=1):
        row: dict[str, Any] = {"#": idx, "VLAN": f"V{h.number}", "Name": h.name}
        for date in dates:
            day = h.days.get(date)
            row[date] = day.megabytes if day is not None else MISSING_CELL
        row["Total GB"] = _to_gb(sum(d.megabytes for d in h.days.values()))
        rows.append(row)

    totals: dict[str, Any] = {"#": "", "VLAN": "", "Name": "Total"}
    grand = 0
    for date in dates:
        day_total = sum(h.days[date].megabytes for h in vlans if date in h.days)
        totals[date] = day_total
        grand += day_total
    totals["Total GB"] = _to_gb(grand)

    columns = ["#", "VLAN", "Name", *dates, "Total GB"]
    return UsageTable(columns=columns, rows=rows, totals=totals)


def write_usage_xlsx(table: UsageTable, path: str | Path, title: str = "Report") -> Path:
    """Write *table* to an xlsx workbook at *path* and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    for col_idx, column in enumerate(table.columns, start=1):
        cell = ws.cell(row=1, column=col_idx, value=column)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = _BORDER

    for row_idx, row in enumerate([*table.rows, table.totals], start=2):
        for col_idx, column in enumerate(table.columns, start=1):
            cell = ws.cell(row=row_idx, column=col_idx, value=row.get(column, ""))
            cell.border = _BORDER
            if row is table.totals:
                cell.font = _TOTAL_FONT

    ws.auto_filter.ref = ws.dimensions
    ws.freeze_panes = "A2"
    wb.save(path)
    logger.debug("Wrote %d row(s) to %s", len(table.rows), path)
    return path


def _to_gb(megabytes: float) -> float:
    return round(megabytes / 1024, 2)
