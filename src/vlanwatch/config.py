"""Runtime settings read from environment variables.

Environment variables:
    VLANWATCH_DB           SQLite state file (default: ~/.vlanwatch/vlanwatch.db).
    VLANWATCH_FEED_URL     Realtime database root URL.
    VLANWATCH_TIMEOUT      Feed request timeout in seconds (default: 30).
    VLANWATCH_VERIFY_TLS   Set to "false" to skip TLS verification (default: true).
    VLANWATCH_FETCH_HOUR   Hour of day after which the daily fetch may run (default: 6).
    VLANWATCH_NETWORKS     Comma-separated feed labels to fetch (default: R1,R2).
    VLANWATCH_FETCH_PAUSE  Seconds to wait between networks (default: 1.0).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from vlanwatch.vendor.feed.endpoints import DEFAULT_FEED_URL

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH: Path = Path.home() / ".vlanwatch" / "vlanwatch.db"
DEFAULT_NETWORK_LABELS: tuple[str, ...] = ("R1", "R2")


@dataclass(frozen=True)
class Settings:
    db_path: Path = DEFAULT_DB_PATH
    feed_url: str = DEFAULT_FEED_URL
    timeout_s: float = 30.0
    verify_tls: bool = True
    fetch_hour: int = 6
    network_labels: tuple[str, ...] = DEFAULT_NETWORK_LABELS
    fetch_pause_s: float = 1.0


def _number(env: Mapping[str, str], key: str, default: float, cast: type = float) -> float:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %r", key, raw, default)
        return default


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from *environ* (default: ``os.environ``)."""
    env = os.environ if environ is None else environ
    labels = tuple(
        label.strip() for label in env.get("VLANWATCH_NETWORKS", "").split(",") if label.strip()
    )
    db = env.get("VLANWATCH_DB", "").strip()
    return Settings(
        db_path=Path(db).expanduser() if db else DEFAULT_DB_PATH,
        feed_url=env.get("VLANWATCH_FEED_URL", "").strip() or DEFAULT_FEED_URL,
        timeout_s=_number(env, "VLANWATCH_TIMEOUT", 30.0),
        verify_tls=env.get("VLANWATCH_VERIFY_TLS", "true").strip().lower()
        not in {"0", "false", "no", "off"},
        fetch_hour=int(_number(env, "VLANWATCH_FETCH_HOUR", 6, cast=int)),
        network_labels=labels or DEFAULT_NETWORK_LABELS,
        fetch_pause_s=_number(env, "VLANWATCH_FETCH_PAUSE", 1.0),
    )
