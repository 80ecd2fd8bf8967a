"""ReportTracker: the save-report pathway and operator actions.

Loads state through a :class:`~vlanwatch.storage.state.StateStore`, applies
the pure model updates from :mod:`vlanwatch.utils.store`, runs the analyzer
after each save and persists the results as whole values.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from vlanwatch.client.errors import UnknownNetworkError, VlanWatchError
from vlanwatch.client.feed import ReportFeed
from vlanwatch.model.alert import AlertRecord, ConsumptionDelta
from vlanwatch.model.network import Network
from vlanwatch.parser.report import parse_report
from vlanwatch.storage.state import StateStore
from vlanwatch.utils.analyzer import analyze, next_date
from vlanwatch.utils.compare import compare_consumption
from vlanwatch.utils.store import (
    check_report_date,
    delete_all_reports,
    delete_report,
    delete_vlan,
    rename_vlan,
    save_snapshot,
)

logger = logging.getLogger(__name__)


def should_auto_fetch(now: datetime, last_fetch_date: str | None, fetch_hour: int = 6) -> bool:
    """Return ``True`` when the daily fetch is due.

    The fetch is due once per calendar day, from *fetch_hour* onwards.
    """
    if now.hour < fetch_hour:
        return False
    return last_fetch_date != now.date().isoformat()


class ReportTracker:
    """Operator-facing actions over all networks.

    Args:
        store: Persistence port.
        clock: Returns the current time (injectable for tests).
    """

    def __init__(
        self,
        store: StateStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self._clock: Callable[[], datetime] = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Networks
    # ------------------------------------------------------------------

    def networks(self) -> dict[str, Network]:
        return self.store.load_networks()

    def get_network(self, network_id: str | None = None) -> Network:
        """Return the network *network_id* (default: the selected one).

        Raises:
            UnknownNetworkError: If the id is not known.
        """
        nid = network_id or self.store.load_current_network_id()
        network = self.store.load_networks().get(nid)
        if network is None:
            raise UnknownNetworkError(nid)
        return network

    def find_network_id(self, label: str) -> str:
        """Return the id of the network whose display name is *label*.

        Raises:
            UnknownNetworkError: If no network carries that name.
        """
        for nid, network in self.store.load_networks().items():
            if network.name == label:
                return nid
        raise UnknownNetworkError(label)

    def select_network(self, network_id: str) -> None:
        self.get_network(network_id)
        self.store.save_current_network_id(network_id)

    # ------------------------------------------------------------------
    # Saving reports
    # ------------------------------------------------------------------

    def save_report(
        self,
        text: str,
        date: str,
        network_id: str | None = None,
        source: str | None = None,
    ) -> int:
        """Parse *text* and save it as *date*'s snapshot.

        The alert records of *date* and of the next saved date are
        recomputed, since both comparisons may have changed; a date left
        without an earlier date loses its record.

        Returns:
            Number of readings saved; ``0`` when the text contained no
            recognisable line (nothing is persisted then).

        Raises:
            UnknownNetworkError: If *network_id* is not known.
            InvalidReportDateError: If *date* is not ``YYYY-MM-DD``.
        """
        check_report_date(date)
        nid = network_id or self.store.load_current_network_id()
        networks = self.store.load_networks()
        network = networks.get(nid)
        if network is None:
            raise UnknownNetworkError(nid)

        result = parse_report(text)
        if not result.stats.success:
            logger.info("No readings recognised for %s on %s; nothing saved", nid, date)
            return 0

        now = self._now_iso()
        updated = save_snapshot(network, date, result.readings, now=now, source=source)
        if updated is None:
            return 0
        self.store.save_networks({**networks, nid: updated})
        logger.info("Saved %d reading(s) for %s on %s", result.stats.count, nid, date)

        self._refresh_alerts(nid, updated, (date, next_date(updated.dates, date)))
        return result.stats.count

    def run_daily_fetch(
        self,
        feed: ReportFeed,
        date: str | None = None,
        labels: Iterable[str] = ("R1", "R2"),
        pause_s: float = 0.0,
    ) -> dict[str, int]:
        """Fetch and save today's report for each network label, in order.

        A label whose fetch fails or whose network is unknown is logged and
        counted as ``0``; the remaining labels are still processed.

        Returns:
            Saved reading count per label.

        Raises:
            InvalidReportDateError: If *date* is not ``YYYY-MM-DD``.
        """
        day = check_report_date(date or self._today())
        counts: dict[str, int] = {}
        for idx, label in enumerate(labels):
            if idx and pause_s:
                time.sleep(pause_s)
            try:
                nid = self.find_network_id(label)
                text = feed.fetch_raw_report_text(label)
            except VlanWatchError as exc:
                logger.warning("Fetch for %s failed: %s", label, exc)
                counts[label] = 0
                continue
            counts[label] = self.save_report(text, day, nid, source="feed") if text else 0
            logger.info("Fetched %s: %d reading(s) saved", label, counts[label])

        if sum(counts.values()) > 0:
            self.store.save_last_auto_fetch(day, self._now_iso())
        return counts

    def auto_fetch_due(self, fetch_hour: int = 6) -> bool:
        last = self.store.load_last_auto_fetch().get("date")
        return should_auto_fetch(self._clock(), last, fetch_hour)

    # ------------------------------------------------------------------
    # Operator edits
    # ------------------------------------------------------------------

    def rename_vlan(self, number: int, new_name: str, network_id: str | None = None) -> bool:
        """Rename a VLAN; returns ``False`` when nothing changed."""
        return self._apply(
            network_id, lambda n: rename_vlan(n, number, new_name, now=self._now_iso())
        )

    def delete_vlan(self, number: int, network_id: str | None = None) -> bool:
        """Delete a VLAN and all its readings; returns ``False`` if unknown."""
        return self._apply(network_id, lambda n: delete_vlan(n, number, now=self._now_iso()))

    def delete_report(self, date: str, network_id: str | None = None) -> bool:
        """Delete one day's snapshot; returns ``False`` if absent.

        The day's alerts are dropped and the next day is compared again.
        """
        nid = network_id or self.store.load_current_network_id()
        changed = self._apply(nid, lambda n: delete_report(n, date, now=self._now_iso()))
        if changed:
            network = self.get_network(nid)
            self._refresh_alerts(nid, network, (date, next_date(network.dates, date)))
        return changed

    def delete_all_reports(self, network_id: str | None = None) -> bool:
        """Wipe every snapshot and VLAN of a network, and its alerts."""
        nid = network_id or self.store.load_current_network_id()
        changed = self._apply(nid, lambda n: delete_all_reports(n, now=self._now_iso()))
        history = self.store.load_alert_history()
        if history.pop(nid, None) is not None:
            self.store.save_alert_history(history)
        return changed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def alerts(self, date: str | None = None, network_id: str | None = None) -> AlertRecord | None:
        """Return the stored alerts for *date* (default: newest date)."""
        nid = network_id or self.store.load_current_network_id()
        by_date = self.store.load_alert_history().get(nid, {})
        if not by_date:
            return None
        return by_date.get(date or max(by_date))

    def consumption_deltas(
        self,
        date: str,
        network_id: str | None = None,
    ) -> dict[int, ConsumptionDelta]:
        """Return per-VLAN deltas of *date* against the previous date."""
        network = self.get_network(network_id)
        deltas: dict[int, ConsumptionDelta] = {}
        for number, vlan in sorted(network.vlans.items()):
            delta = compare_consumption(vlan, date, network.dates)
            if delta is not None:
                deltas[number] = delta
        return deltas

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply(self, network_id: str | None, change: Callable[[Network], Network]) -> bool:
        nid = network_id or self.store.load_current_network_id()
        networks = self.store.load_networks()
        network = networks.get(nid)
        if network is None:
            raise UnknownNetworkError(nid)
        updated = change(network)
        if updated is network:
            return False
        self.store.save_networks({**networks, nid: updated})
        return True

    def _refresh_alerts(
        self,
        nid: str,
        network: Network,
        dates: Iterable[str | None],
    ) -> None:
        """Recompute the stored alert record of each of *dates* from *network*."""
        history = self.store.load_alert_history()
        by_date = history.setdefault(nid, {})
        changed = False
        now = self._now_iso()
        for day in dates:
            if day is None:
                continue
            record = analyze(network, day, now=now)
            if record is None:
                if by_date.pop(day, None) is not None:
                    logger.info("Dropped stale alerts for %s on %s", nid, day)
                    changed = True
                continue
            by_date[day] = record
            changed = True
            logger.info(
                "Alerts for %s on %s vs %s: %d urgent, %d warning, %d info",
                nid,
                day,
                record.compared_with,
                len(record.urgent),
                len(record.warning),
                len(record.info),
            )
        if not by_date:
            del history[nid]
        if changed:
            self.store.save_alert_history(history)

    def _now_iso(self) -> str:
        return self._clock().isoformat()

    def _today(self) -> str:
        return self._clock().date().isoformat()
