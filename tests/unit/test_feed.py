"""Unit tests for vlanwatch.client.feed and vlanwatch.client.http."""

from __future__ import annotations

import json

import pytest
import requests
import responses as rsps_lib

from vlanwatch.client.errors import (
    VlanWatchFeedError,
    VlanWatchRequestError,
    VlanWatchResponseError,
)
from vlanwatch.client.feed import ReportFeed, is_router_summary, reformat_router_summary
from vlanwatch.client.http import FeedHTTP, database_root, node_url
from vlanwatch.parser.report import parse_report

BASE_URL = "https://feed.example.com"
PURPLE = "\U0001f7e3"
GREEN = "\U0001f7e2"
CROSS = "\u274c"

SUMMARY = (
    "Router: R1 | Time: 06:00 | Purple (2) | V10: 500 MB - Office E3 | "
    "V11: 20 MB - Lab | Green (1) | V12: 7 MB - Guest | Red (0) |"
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _url(label: str, color: str) -> str:
    return f"{BASE_URL}/{label}/messages/{color}/message.json"


def _feed() -> ReportFeed:
    return ReportFeed(base_url=BASE_URL, timeout_s=5)


def _mock_colors(label: str, **messages: object) -> None:
    for color in ("purple", "green", "orange", "red"):
        value = messages.get(color)
        if isinstance(value, int):
            rsps_lib.add(rsps_lib.GET, _url(label, color), status=value)
        else:
            rsps_lib.add(rsps_lib.GET, _url(label, color), body=json.dumps(value))


# ---------------------------------------------------------------------------
# http.py
# ---------------------------------------------------------------------------

def test_database_root() -> None:
    assert database_root("feed.example.com/") == "https://feed.example.com"
    assert database_root("http://10.0.0.1") == "http://10.0.0.1"


def test_node_url_encodes_segments() -> None:
    assert node_url(BASE_URL, ("Main Site", "messages", "a/b")) == (
        f"{BASE_URL}/Main%20Site/messages/a%2Fb.json"
    )


@rsps_lib.activate
def test_read_empty_node() -> None:
    rsps_lib.add(rsps_lib.GET, f"{BASE_URL}/x.json", body="null")
    assert FeedHTTP(BASE_URL).read("x") is None


@rsps_lib.activate
def test_read_sends_headers() -> None:
    rsps_lib.add(rsps_lib.GET, f"{BASE_URL}/a/b.json", json={"k": 1})
    assert FeedHTTP(BASE_URL).read("a", "b") == {"k": 1}
    headers = rsps_lib.calls[0].request.headers
    assert headers["User-Agent"].startswith("vlanwatch/")
    assert headers["Accept"] == "application/json"


@rsps_lib.activate
def test_read_invalid_body() -> None:
    rsps_lib.add(rsps_lib.GET, f"{BASE_URL}/x.json", body="<html>")
    with pytest.raises(VlanWatchFeedError):
        FeedHTTP(BASE_URL).read("x")


@rsps_lib.activate
def test_http_error_status() -> None:
    rsps_lib.add(rsps_lib.GET, f"{BASE_URL}/x.json", status=503)
    with pytest.raises(VlanWatchResponseError) as exc_info:
        FeedHTTP(BASE_URL).read("x")
    assert exc_info.value.status_code == 503


@rsps_lib.activate
def test_transport_error_wrapped() -> None:
    rsps_lib.add(
        rsps_lib.GET,
        f"{BASE_URL}/x.json",
        body=requests.exceptions.ConnectionError("refused"),
    )
    with pytest.raises(VlanWatchRequestError) as exc_info:
        FeedHTTP(BASE_URL).read("x")
    assert isinstance(exc_info.value.cause, requests.exceptions.ConnectionError)


# ---------------------------------------------------------------------------
# Router summaries
# ---------------------------------------------------------------------------

class TestRouterSummary:
    def test_detection(self) -> None:
        assert is_router_summary(SUMMARY)
        assert not is_router_summary(f"{PURPLE} V10: 500 MB - Office")

    def test_reformat_section(self) -> None:
        text = reformat_router_summary(SUMMARY, "purple")
        assert text.splitlines() == [
            f"{PURPLE} V10: 500 MB - Office E3",
            f"{PURPLE} V11: 20 MB - Lab",
        ]

    def test_red_maps_to_down_glyph(self) -> None:
        text = reformat_router_summary("Router: R1 | Time: 1 | Red (1) | V5: 0 MB - Dead", "red")
        assert text == f"{CROSS} V5: 0 MB - Dead"

    def test_empty_or_missing_section(self) -> None:
        assert reformat_router_summary(SUMMARY, "red") == ""
        assert reformat_router_summary(SUMMARY, "orange") == ""

    def test_reformatted_lines_parse(self) -> None:
        result = parse_report(reformat_router_summary(SUMMARY, "green"))
        assert [(r.number, r.status, r.megabytes, r.name) for r in result.readings] == [
            (12, "green", 7, "Guest")
        ]


# ---------------------------------------------------------------------------
# ReportFeed
# ---------------------------------------------------------------------------

class TestReportFeed:
    @rsps_lib.activate
    def test_assembles_colors_in_order(self) -> None:
        _mock_colors(
            "R1",
            purple=f"{PURPLE} V10: 500 MB - Office",
            green=f"{GREEN} V11: 40 MB - Lab",
            orange=None,
            red="",
        )
        with _feed() as feed:
            text = feed.fetch_raw_report_text("R1")
        assert text == f"{PURPLE} V10: 500 MB - Office\n{GREEN} V11: 40 MB - Lab"

    @rsps_lib.activate
    def test_placeholder_is_ignored(self) -> None:
        _mock_colors("R1", purple="لا يوجد تقرير", green="جاري التحميل...")
        assert _feed().fetch_raw_report_text("R1") == ""

    @rsps_lib.activate
    def test_failed_color_is_skipped(self) -> None:
        _mock_colors(
            "R1",
            purple=500,
            green=f"{GREEN} V11: 40 MB - Lab",
        )
        assert _feed().fetch_raw_report_text("R1") == f"{GREEN} V11: 40 MB - Lab"

    @rsps_lib.activate
    def test_router_summary_is_reformatted(self) -> None:
        _mock_colors("R1", purple=SUMMARY)
        text = _feed().fetch_raw_report_text("R1")
        assert text.splitlines() == [
            f"{PURPLE} V10: 500 MB - Office E3",
            f"{PURPLE} V11: 20 MB - Lab",
        ]

    @rsps_lib.activate
    def test_non_string_payload(self) -> None:
        rsps_lib.add(rsps_lib.GET, _url("R2", "purple"), json={"not": "text"})
        assert _feed().fetch_message("R2", "purple") is None

    @rsps_lib.activate
    def test_label_is_quoted(self) -> None:
        rsps_lib.add(rsps_lib.GET, _url("Main%20Site", "green"), body='"x"')
        assert _feed().fetch_message("Main Site", "green") == "x"
