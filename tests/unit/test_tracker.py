"""Unit tests for vlanwatch.tracker."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from vlanwatch.client.errors import (
    InvalidReportDateError,
    UnknownNetworkError,
    VlanWatchResponseError,
)
from vlanwatch.storage.db import KeyValueDatabase
from vlanwatch.storage.state import StateStore
from vlanwatch.tracker import ReportTracker, should_auto_fetch

PURPLE = "\U0001f7e3"
GREEN = "\U0001f7e2"
CROSS = "\u274c"

DAY1 = f"{PURPLE} V10: 4000 MB - Office E3\n{GREEN} V20: 500 MB - Lab ether2\n"
DAY2 = f"{PURPLE} V10: 1800 MB - Office E3\n{CROSS} V20: 0 MB - Lab ether2\n"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeFeed:
    """Stands in for ReportFeed; maps label → text or exception."""

    def __init__(self, **by_label: object) -> None:
        self.by_label = by_label
        self.calls: list[str] = []

    def fetch_raw_report_text(self, label: str) -> str:
        self.calls.append(label)
        value = self.by_label.get(label, "")
        if isinstance(value, Exception):
            raise value
        return str(value)


def at(hour: int, day: int = 2) -> datetime:
    return datetime(2024, 1, day, hour, 0, tzinfo=timezone.utc)


@pytest.fixture()
def store(tmp_path: Path):
    db = KeyValueDatabase(tmp_path / "vlanwatch.db")
    yield StateStore(db)
    db.close()


@pytest.fixture()
def tracker(store: StateStore) -> ReportTracker:
    return ReportTracker(store, clock=lambda: at(7))


# ---------------------------------------------------------------------------
# should_auto_fetch
# ---------------------------------------------------------------------------

class TestShouldAutoFetch:
    def test_before_fetch_hour(self) -> None:
        assert not should_auto_fetch(at(5), None)

    def test_due_once_per_day(self) -> None:
        assert should_auto_fetch(at(6), None)
        assert should_auto_fetch(at(9), "2024-01-01")
        assert not should_auto_fetch(at(9), "2024-01-02")

    def test_custom_hour(self) -> None:
        assert not should_auto_fetch(at(7), None, fetch_hour=8)


# ---------------------------------------------------------------------------
# save_report
# ---------------------------------------------------------------------------

class TestSaveReport:
    def test_unparseable_text_saves_nothing(
        self, tracker: ReportTracker, store: StateStore
    ) -> None:
        assert tracker.save_report("hello\nno readings here", "2024-01-01") == 0
        assert store.db.get("networks") is None
        assert store.load_alert_history() == {}

    def test_saves_into_selected_network(self, tracker: ReportTracker, store: StateStore) -> None:
        store.save_current_network_id("network_2")
        assert tracker.save_report(DAY1, "2024-01-01") == 2
        networks = tracker.networks()
        assert networks["network_2"].dates == ("2024-01-01",)
        assert networks["network_1"].dates == ()

    def test_first_day_has_no_alerts(self, tracker: ReportTracker) -> None:
        tracker.save_report(DAY1, "2024-01-01")
        assert tracker.alerts() is None

    def test_second_day_stores_alerts(self, tracker: ReportTracker) -> None:
        tracker.save_report(DAY1, "2024-01-01")
        tracker.save_report(DAY2, "2024-01-02")
        record = tracker.alerts()
        assert record is not None
        assert record.date == "2024-01-02"
        assert record.compared_with == "2024-01-01"
        assert [i.kind for i in record.urgent] == ["big_drop_critical"]
        assert [i.kind for i in record.info] == ["new_float_small"]
        assert record.timestamp == at(7).isoformat()

    def test_alerts_kept_per_network(self, tracker: ReportTracker) -> None:
        tracker.save_report(DAY1, "2024-01-01", "network_1")
        tracker.save_report(DAY2, "2024-01-02", "network_1")
        assert tracker.alerts(network_id="network_2") is None
        assert tracker.alerts("2024-01-02", "network_1") is not None

    def test_unknown_network(self, tracker: ReportTracker) -> None:
        with pytest.raises(UnknownNetworkError):
            tracker.save_report(DAY1, "2024-01-01", "network_9")

    def test_source_recorded(self, tracker: ReportTracker) -> None:
        tracker.save_report(DAY1, "2024-01-01", source="feed")
        net = tracker.get_network()
        assert net.daily_reports["2024-01-01"].source == "feed"
        assert net.vlans[10].days["2024-01-01"].source == "feed"


# ---------------------------------------------------------------------------
# Daily fetch
# ---------------------------------------------------------------------------

class TestRunDailyFetch:
    def test_fetches_each_label(self, tracker: ReportTracker, store: StateStore) -> None:
        feed = FakeFeed(R1=DAY1, R2=DAY2)
        counts = tracker.run_daily_fetch(feed, labels=("R1", "R2"))  # type: ignore[arg-type]
        assert counts == {"R1": 2, "R2": 2}
        assert feed.calls == ["R1", "R2"]
        assert tracker.get_network("network_2").dates == ("2024-01-02",)
        assert store.load_last_auto_fetch()["date"] == "2024-01-02"
        assert not tracker.auto_fetch_due()

    def test_failure_on_one_label_continues(self, tracker: ReportTracker) -> None:
        feed = FakeFeed(R1=VlanWatchResponseError(500, "http://x"), R2=DAY1)
        counts = tracker.run_daily_fetch(feed, date="2024-01-05")  # type: ignore[arg-type]
        assert counts == {"R1": 0, "R2": 2}
        assert tracker.get_network("network_2").dates == ("2024-01-05",)

    def test_unknown_label_counts_zero(self, tracker: ReportTracker) -> None:
        counts = tracker.run_daily_fetch(FakeFeed(), labels=("R9",))  # type: ignore[arg-type]
        assert counts == {"R9": 0}

    def test_nothing_saved_keeps_fetch_due(self, tracker: ReportTracker, store: StateStore) -> None:
        tracker.run_daily_fetch(FakeFeed(R1="", R2="garbage"))  # type: ignore[arg-type]
        assert store.load_last_auto_fetch() == {}
        assert tracker.auto_fetch_due()


# ---------------------------------------------------------------------------
# Operator edits and queries
# ---------------------------------------------------------------------------

class TestOperatorEdits:
    def test_rename(self, tracker: ReportTracker) -> None:
        tracker.save_report(DAY1, "2024-01-01")
        assert tracker.rename_vlan(10, "Front desk E4")
        assert tracker.get_network().vlans[10].name == "Front desk E4"
        assert not tracker.rename_vlan(10, "   ")
        assert not tracker.rename_vlan(99, "x")

    def test_delete_vlan(self, tracker: ReportTracker) -> None:
        tracker.save_report(DAY1, "2024-01-01")
        assert tracker.delete_vlan(20)
        net = tracker.get_network()
        assert 20 not in net.vlans
        assert [r.number for r in net.daily_reports["2024-01-01"].readings] == [10]
        assert not tracker.delete_vlan(20)

    def test_delete_report_drops_its_alerts(self, tracker: ReportTracker) -> None:
        tracker.save_report(DAY1, "2024-01-01")
        tracker.save_report(DAY2, "2024-01-02")
        assert tracker.delete_report("2024-01-02")
        assert tracker.alerts("2024-01-02") is None
        assert tracker.get_network().dates == ("2024-01-01",)
        assert not tracker.delete_report("2024-01-02")

    def test_delete_all_reports(self, tracker: ReportTracker) -> None:
        tracker.save_report(DAY1, "2024-01-01")
        tracker.save_report(DAY2, "2024-01-02")
        assert tracker.delete_all_reports()
        net = tracker.get_network()
        assert (net.dates, net.vlans, net.daily_reports) == ((), {}, {})
        assert tracker.alerts() is None

    def test_select_network(self, tracker: ReportTracker, store: StateStore) -> None:
        tracker.select_network("network_2")
        assert store.load_current_network_id() == "network_2"
        with pytest.raises(UnknownNetworkError):
            tracker.select_network("missing")

    def test_find_network_id(self, tracker: ReportTracker) -> None:
        assert tracker.find_network_id("R2") == "network_2"
        with pytest.raises(UnknownNetworkError):
            tracker.find_network_id("R3")

    def test_consumption_deltas(self, tracker: ReportTracker) -> None:
        tracker.save_report(DAY1, "2024-01-01")
        tracker.save_report(DAY2, "2024-01-02")
        deltas = tracker.consumption_deltas("2024-01-02")
        assert sorted(deltas) == [10, 20]
        assert deltas[10].difference == -2200
        assert deltas[10].direction == "down"
        assert deltas[20].percentage == 100.0


# ---------------------------------------------------------------------------
# Stored alerts follow the saved dates
# ---------------------------------------------------------------------------

class TestAlertUpkeep:
    def test_resave_without_earlier_date_drops_record(self, tracker: ReportTracker) -> None:
        tracker.save_report(f"{PURPLE} V10: 4000 MB - a", "2024-01-01")
        tracker.save_report(f"{PURPLE} V10: 1000 MB - a", "2024-01-02")
        tracker.delete_report("2024-01-01")
        tracker.save_report(f"{PURPLE} V10: 3900 MB - a", "2024-01-02")
        assert tracker.get_network().dates == ("2024-01-02",)
        assert tracker.alerts("2024-01-02") is None

    def test_delete_report_drops_record_of_following_day(
        self, tracker: ReportTracker, store: StateStore
    ) -> None:
        tracker.save_report(f"{PURPLE} V10: 4000 MB - a", "2024-01-01")
        tracker.save_report(f"{PURPLE} V10: 1000 MB - a", "2024-01-02")
        assert tracker.delete_report("2024-01-01")
        assert tracker.alerts("2024-01-02") is None
        assert "network_1" not in store.load_alert_history()

    def test_delete_report_recompares_following_day(self, tracker: ReportTracker) -> None:
        tracker.save_report(f"{PURPLE} V10: 4000 MB - a", "2024-01-01")
        tracker.save_report(f"{PURPLE} V10: 4000 MB - a", "2024-01-02")
        tracker.save_report(f"{PURPLE} V10: 1000 MB - a", "2024-01-03")
        assert tracker.delete_report("2024-01-02")
        record = tracker.alerts("2024-01-03")
        assert record is not None
        assert record.compared_with == "2024-01-01"
        assert [i.kind for i in record.urgent] == ["big_drop_critical"]

    def test_resave_earlier_date_recompares_following_day(self, tracker: ReportTracker) -> None:
        tracker.save_report(f"{PURPLE} V10: 4000 MB - a", "2024-01-01")
        tracker.save_report(f"{PURPLE} V10: 1000 MB - a", "2024-01-02")
        tracker.save_report(f"{PURPLE} V10: 1100 MB - a", "2024-01-01")
        record = tracker.alerts("2024-01-02")
        assert record is not None
        assert record.total == 0

    def test_inserted_date_becomes_comparison_base(self, tracker: ReportTracker) -> None:
        tracker.save_report(f"{PURPLE} V10: 4000 MB - a", "2024-01-01")
        tracker.save_report(f"{PURPLE} V10: 4000 MB - a", "2024-01-05")
        tracker.save_report(f"{PURPLE} V10: 6000 MB - a", "2024-01-03")
        record = tracker.alerts("2024-01-05")
        assert record is not None
        assert record.compared_with == "2024-01-03"
        assert [i.kind for i in record.warning] == ["big_drop_significant"]


# ---------------------------------------------------------------------------
# Report dates
# ---------------------------------------------------------------------------

class TestReportDates:
    @pytest.mark.parametrize("bad", ["2024-1-9", "2024-02-30", "20240102", "yesterday", ""])
    def test_save_report_rejects_bad_date(
        self, tracker: ReportTracker, store: StateStore, bad: str
    ) -> None:
        with pytest.raises(InvalidReportDateError):
            tracker.save_report(DAY1, bad)
        assert store.db.get("networks") is None

    def test_daily_fetch_rejects_bad_date(self, tracker: ReportTracker) -> None:
        feed = FakeFeed(R1=DAY1)
        with pytest.raises(InvalidReportDateError):
            tracker.run_daily_fetch(feed, date="2024-1-10")  # type: ignore[arg-type]
        assert feed.calls == []
