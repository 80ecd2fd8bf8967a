"""Unit tests for vlanwatch.utils.compare."""

from __future__ import annotations

from vlanwatch.model.network import VlanDay, VlanHistory
from vlanwatch.utils.compare import compare_consumption

DATES = ["2024-01-03", "2024-01-01", "2024-01-02"]


def history(**days: float) -> VlanHistory:
    return VlanHistory(
        number=10,
        name="x",
        days={
            d.replace("_", "-"): VlanDay(status="purple", megabytes=mb)  # type: ignore[arg-type]
            for d, mb in days.items()
        },
    )


class TestCompareConsumption:
    def test_first_date_has_no_comparison(self) -> None:
        h = history(**{"2024_01_01": 100, "2024_01_02": 200})
        assert compare_consumption(h, "2024-01-01", DATES) is None

    def test_unknown_date(self) -> None:
        h = history(**{"2024_01_01": 100})
        assert compare_consumption(h, "2024-02-01", DATES) is None

    def test_missing_previous_reading(self) -> None:
        h = history(**{"2024_01_03": 100, "2024_01_01": 50})
        # previous known date is 2024-01-02, which has no reading
        assert compare_consumption(h, "2024-01-03", DATES) is None

    def test_increase(self) -> None:
        h = history(**{"2024_01_01": 200, "2024_01_02": 250})
        delta = compare_consumption(h, "2024-01-02", DATES)
        assert delta is not None
        assert delta.difference == 50
        assert delta.percentage == 25.0
        assert delta.direction == "up"

    def test_decrease_percentage_one_decimal(self) -> None:
        h = history(**{"2024_01_02": 300, "2024_01_03": 200})
        delta = compare_consumption(h, "2024-01-03", DATES)
        assert delta is not None
        assert delta.difference == -100
        assert delta.percentage == 33.3
        assert delta.direction == "down"

    def test_from_zero_is_fixed_hundred(self) -> None:
        h = history(**{"2024_01_01": 0, "2024_01_02": 40})
        delta = compare_consumption(h, "2024-01-02", DATES)
        assert delta is not None
        assert delta.percentage == 100.0
        assert delta.direction == "up"

    def test_noise_floor(self) -> None:
        quiet = history(**{"2024_01_01": 10.0, "2024_01_02": 10.9})
        assert compare_consumption(quiet, "2024-01-02", DATES) is None
        loud = history(**{"2024_01_01": 10, "2024_01_02": 11})
        delta = compare_consumption(loud, "2024-01-02", DATES)
        assert delta is not None
        assert delta.difference == 1

    def test_no_change(self) -> None:
        h = history(**{"2024_01_01": 10, "2024_01_02": 10})
        assert compare_consumption(h, "2024-01-02", DATES) is None
