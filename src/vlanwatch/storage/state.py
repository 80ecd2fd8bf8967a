"""Persistence port: load and save the whole tracker state."""

from __future__ import annotations

import logging
from typing import Any

from vlanwatch.model.alert import AlertRecord
from vlanwatch.model.network import Network
from vlanwatch.storage.db import KeyValueDatabase
from vlanwatch.utils.render import (
    alert_record_from_dict,
    alert_record_to_dict,
    network_from_dict,
    network_to_dict,
)
from vlanwatch.utils.store import check_consistency, new_network

logger = logging.getLogger(__name__)

NETWORKS_KEY: str = "networks"
CURRENT_NETWORK_KEY: str = "current_network"
ALERT_HISTORY_KEY: str = "alert_history"
LAST_AUTO_FETCH_KEY: str = "last_auto_fetch"

DEFAULT_NETWORK_ID: str = "network_1"
# Networks created on first use: id → display name / feed label.
DEFAULT_NETWORKS: dict[str, str] = {"network_1": "R1", "network_2": "R2"}

AlertHistory = dict[str, dict[str, AlertRecord]]


class StateStore:
    """Whole-value load/save of networks, alert history and UI selection.

    Args:
        db: Backing key-value database.
    """

    def __init__(self, db: KeyValueDatabase) -> None:
        self.db = db

    def load_networks(self) -> dict[str, Network]:
        """Return networks by id; seeds :data:`DEFAULT_NETWORKS` when empty."""
        raw = self.db.get(NETWORKS_KEY)
        if not raw:
            return {nid: new_network(nid, name) for nid, name in DEFAULT_NETWORKS.items()}
        networks = {nid: network_from_dict(doc) for nid, doc in raw.items()}
        for nid, network in networks.items():
            for problem in check_consistency(network):
                logger.warning("Network %s: %s", nid, problem)
        return networks

    def save_networks(self, networks: dict[str, Network]) -> None:
        self.db.put(NETWORKS_KEY, {nid: network_to_dict(n) for nid, n in networks.items()})

    def load_alert_history(self) -> AlertHistory:
        """Return alert records keyed by network id, then by analysed date."""
        raw: dict[str, dict[str, Any]] = self.db.get(ALERT_HISTORY_KEY) or {}
        return {
            nid: {date: alert_record_from_dict(doc) for date, doc in by_date.items()}
            for nid, by_date in raw.items()
        }

    def save_alert_history(self, history: AlertHistory) -> None:
        self.db.put(
            ALERT_HISTORY_KEY,
            {
                nid: {date: alert_record_to_dict(r) for date, r in by_date.items()}
                for nid, by_date in history.items()
            },
        )

    def load_current_network_id(self) -> str:
        return self.db.get(CURRENT_NETWORK_KEY) or DEFAULT_NETWORK_ID

    def save_current_network_id(self, network_id: str) -> None:
        self.db.put(CURRENT_NETWORK_KEY, network_id)

    def load_last_auto_fetch(self) -> dict[str, str]:
        """Return ``{"date": ..., "at": ...}`` of the last automatic fetch, or ``{}``."""
        return self.db.get(LAST_AUTO_FETCH_KEY) or {}

    def save_last_auto_fetch(self, date: str, at: str) -> None:
        self.db.put(LAST_AUTO_FETCH_KEY, {"date": date, "at": at})
