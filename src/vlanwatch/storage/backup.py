"""JSON backup export and import of the full tracker state."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from vlanwatch.client.errors import VlanWatchStorageError
from vlanwatch.storage.state import StateStore
from vlanwatch.utils.render import (
    alert_record_from_dict,
    alert_record_to_dict,
    network_from_dict,
    network_to_dict,
)

logger = logging.getLogger(__name__)


def export_backup(store: StateStore, path: str | Path) -> Path:
    """Write networks and alert history from *store* to *path*."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "networks": {nid: network_to_dict(n) for nid, n in store.load_networks().items()},
        "alert_history": {
            nid: {date: alert_record_to_dict(r) for date, r in by_date.items()}
            for nid, by_date in store.load_alert_history().items()
        },
    }
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Backup written to %s", path)
    return path


def import_backup(store: StateStore, path: str | Path) -> int:
    """Replace the state in *store* with the backup at *path*.

    Nothing is written unless the whole file validates.

    Returns:
        Number of networks imported.

    Raises:
        VlanWatchStorageError: If the file cannot be read or is malformed.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise VlanWatchStorageError(f"Cannot read backup {str(path)!r}: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("networks"), dict):
        raise VlanWatchStorageError(f"Backup {str(path)!r} has no 'networks' object")

    networks = {nid: network_from_dict(doc) for nid, doc in data["networks"].items()}
    raw_history = data.get("alert_history") or {}
    if not isinstance(raw_history, dict):
        raise VlanWatchStorageError(f"Backup {str(path)!r} has a malformed 'alert_history'")
    try:
        history = {
            nid: {date: alert_record_from_dict(doc) for date, doc in by_date.items()}
            for nid, by_date in raw_history.items()
        }
    except AttributeError as exc:
        raise VlanWatchStorageError(
            f"Backup {str(path)!r} has a malformed 'alert_history'"
        ) from exc

    store.save_networks(networks)
    store.save_alert_history(history)
    logger.info("Imported %d network(s) from %s", len(networks), path)
    return len(networks)
