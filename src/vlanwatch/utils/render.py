"""Serialization of the model to and from JSON-compatible dicts.

The dict shapes are what the state store persists and what backups contain.
Readers are lenient about missing optional keys (older documents) but raise
:class:`~vlanwatch.client.errors.VlanWatchStorageError` when a required key
is absent or has the wrong type.
"""

from __future__ import annotations

from typing import Any

from vlanwatch.client.errors import VlanWatchStorageError
from vlanwatch.model.alert import AlertItem, AlertRecord
from vlanwatch.model.network import DailySnapshot, Network, VlanDay, VlanHistory
from vlanwatch.model.reading import VlanReading
from vlanwatch.vendor.feed.mappings import STATUS_GLYPHS


def reading_to_dict(r: VlanReading) -> dict[str, Any]:
    return {"number": r.number, "name": r.name, "status": r.status, "megabytes": r.megabytes}


def reading_from_dict(d: dict[str, Any]) -> VlanReading:
    return VlanReading(
        number=int(d["number"]),
        name=str(d.get("name", "")),
        status=_status(d.get("status")),
        megabytes=int(d.get("megabytes") or 0),
    )


def day_to_dict(day: VlanDay) -> dict[str, Any]:
    return {
        "status": day.status,
        "megabytes": day.megabytes,
        "display": day.display,
        "short_display": day.short_display,
        "reported_name": day.reported_name,
        "report_date": day.report_date,
        "source": day.source,
    }


def day_from_dict(d: dict[str, Any]) -> VlanDay:
    return VlanDay(
        status=_status(d.get("status")),
        megabytes=int(d.get("megabytes") or 0),
        display=str(d.get("display", "")),
        short_display=str(d.get("short_display", "")),
        reported_name=str(d.get("reported_name", "")),
        report_date=str(d.get("report_date", "")),
        source=d.get("source"),
    )


def history_to_dict(h: VlanHistory) -> dict[str, Any]:
    return {
        "number": h.number,
        "name": h.name,
        "original_name": h.original_name,
        "last_reported_name": h.last_reported_name,
        "first_seen": h.first_seen,
        "days": {date: day_to_dict(day) for date, day in h.days.items()},
    }


def history_from_dict(d: dict[str, Any]) -> VlanHistory:
    return VlanHistory(
        number=int(d["number"]),
        name=str(d.get("name", "")),
        original_name=str(d.get("original_name", "")),
        last_reported_name=str(d.get("last_reported_name", "")),
        first_seen=str(d.get("first_seen", "")),
        days={str(date): day_from_dict(day) for date, day in (d.get("days") or {}).items()},
    )


def snapshot_to_dict(s: DailySnapshot) -> dict[str, Any]:
    return {
        "date": s.date,
        "readings": [reading_to_dict(r) for r in s.readings],
        "down_numbers": list(s.down_numbers),
        "parsed_at": s.parsed_at,
        "source": s.source,
    }


def snapshot_from_dict(d: dict[str, Any]) -> DailySnapshot:
    return DailySnapshot(
        date=str(d["date"]),
        readings=tuple(reading_from_dict(r) for r in d.get("readings") or []),
        down_numbers=tuple(int(n) for n in d.get("down_numbers") or []),
        parsed_at=str(d.get("parsed_at", "")),
        source=d.get("source"),
    )


def network_to_dict(n: Network) -> dict[str, Any]:
    """Serialize *n*; VLAN numbers become string keys (JSON objects)."""
    return {
        "id": n.id,
        "name": n.name,
        "daily_reports": {date: snapshot_to_dict(s) for date, s in n.daily_reports.items()},
        "vlans": {str(num): history_to_dict(h) for num, h in n.vlans.items()},
        "dates": list(n.dates),
        "created": n.created,
        "last_modified": n.last_modified,
    }


def network_from_dict(d: dict[str, Any]) -> Network:
    """Rebuild a :class:`~vlanwatch.model.network.Network`.

    ``dates`` is recomputed from the snapshot keys so a hand-edited document
    cannot break the date invariant.

    Raises:
        VlanWatchStorageError: If a required key is missing or malformed.
    """
    try:
        reports = {
            str(date): snapshot_from_dict(s) for date, s in (d.get("daily_reports") or {}).items()
        }
        vlans = {int(num): history_from_dict(h) for num, h in (d.get("vlans") or {}).items()}
        return Network(
            id=str(d["id"]),
            name=str(d.get("name", d["id"])),
            daily_reports=reports,
            vlans=vlans,
            dates=tuple(sorted(reports)),
            created=str(d.get("created", "")),
            last_modified=str(d.get("last_modified", "")),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise VlanWatchStorageError(f"Malformed network document: {exc}") from exc


def alert_item_to_dict(item: AlertItem) -> dict[str, Any]:
    d: dict[str, Any] = {
        "kind": item.kind,
        "vlan": item.vlan,
        "name": item.name,
        "port": item.port,
        "from_mb": item.from_mb,
        "to_mb": item.to_mb,
        "percent": item.percent,
        "size": item.size,
        "original_size": item.original_size,
    }
    if item.drop_amount is not None:
        d["drop_amount"] = item.drop_amount
    if item.increase_amount is not None:
        d["increase_amount"] = item.increase_amount
    return d


def alert_item_from_dict(d: dict[str, Any]) -> AlertItem:
    return AlertItem(
        kind=d["kind"],
        vlan=int(d["vlan"]),
        name=str(d.get("name", "")),
        port=str(d.get("port", "")),
        from_mb=int(d.get("from_mb") or 0),
        to_mb=int(d.get("to_mb") or 0),
        percent=int(d.get("percent") or 0),
        size=d.get("size", "small"),
        original_size=int(d.get("original_size") or 0),
        drop_amount=d.get("drop_amount"),
        increase_amount=d.get("increase_amount"),
    )


def alert_record_to_dict(record: AlertRecord) -> dict[str, Any]:
    return {
        "date": record.date,
        "compared_with": record.compared_with,
        "timestamp": record.timestamp,
        "urgent": [alert_item_to_dict(i) for i in record.urgent],
        "warning": [alert_item_to_dict(i) for i in record.warning],
        "info": [alert_item_to_dict(i) for i in record.info],
    }


def alert_record_from_dict(d: dict[str, Any]) -> AlertRecord:
    """Rebuild an :class:`~vlanwatch.model.alert.AlertRecord`.

    Raises:
        VlanWatchStorageError: If a required key is missing or malformed.
    """
    try:
        return AlertRecord(
            date=str(d["date"]),
            compared_with=str(d["compared_with"]),
            timestamp=str(d.get("timestamp", "")),
            urgent=tuple(alert_item_from_dict(i) for i in d.get("urgent") or []),
            warning=tuple(alert_item_from_dict(i) for i in d.get("warning") or []),
            info=tuple(alert_item_from_dict(i) for i in d.get("info") or []),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise VlanWatchStorageError(f"Malformed alert record: {exc}") from exc


def _status(value: Any) -> Any:
    if value not in STATUS_GLYPHS:
        raise VlanWatchStorageError(f"Unknown status {value!r}")
    return value
