#!/usr/bin/env python3
"""Example: fetch today's reports from the feed and print the new alerts."""

from __future__ import annotations

import json
import logging

from vlanwatch.client.feed import ReportFeed
from vlanwatch.config import load_settings
from vlanwatch.storage.db import KeyValueDatabase
from vlanwatch.storage.state import StateStore
from vlanwatch.tracker import ReportTracker
from vlanwatch.utils.render import alert_record_to_dict

logging.basicConfig(level=logging.INFO)

settings = load_settings()
db = KeyValueDatabase(settings.db_path)
tracker = ReportTracker(StateStore(db))

with ReportFeed(settings.feed_url, settings.timeout_s, settings.verify_tls) as feed:
    counts = tracker.run_daily_fetch(feed, labels=settings.network_labels)

for label, count in counts.items():
    record = tracker.alerts(network_id=tracker.find_network_id(label)) if count else None
    print(label, count, json.dumps(alert_record_to_dict(record) if record else None, indent=2))

db.close()
