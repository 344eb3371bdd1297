"""
Tests for Module 05 — Category classifier.
Breakpoints for all six pollutants, boundaries and fallbacks.
"""
import math

import pytest

from aire_pipeline.aggregation.aggregator import HourlyAverage
from aire_pipeline.classification.categories import (
    BREAKPOINTS,
    UNKNOWN,
    Category,
    breakpoints_for,
    classify,
    classify_hourly_averages,
)

GOOD = Category("Good", "#00e400")
MODERATE = Category("Moderate", "#ffff00")
USG = Category("Unhealthy for Sensitive Groups", "#ff7e00")
UNHEALTHY = Category("Unhealthy", "#ff0000")
VERY_UNHEALTHY = Category("Very Unhealthy", "#99004c")
HAZARDOUS = Category("Hazardous", "#7e0023")


class TestO3:
    def test_upper_bound_is_inclusive(self):
        assert classify("o3", 70) == GOOD

    def test_just_above_good(self):
        assert classify("o3", 70.1) == MODERATE

    @pytest.mark.parametrize("value, expected", [
        (0, GOOD), (95, MODERATE), (154, USG), (204, UNHEALTHY),
        (404, VERY_UNHEALTHY), (404.1, HAZARDOUS), (10_000, HAZARDOUS),
    ])
    def test_tiers(self, value, expected):
        assert classify("o3", value) == expected


class TestOtherPollutants:
    @pytest.mark.parametrize("parameter, value, expected", [
        ("pm10", 54, GOOD), ("pm10", 55, MODERATE), ("pm10", 424, VERY_UNHEALTHY), ("pm10", 425, HAZARDOUS),
        ("pm25", 12, GOOD), ("pm25", 12.1, MODERATE), ("pm25", 55.4, USG), ("pm25", 250.5, HAZARDOUS),
        ("nox", 53, GOOD), ("nox", 360, USG), ("nox", 649, UNHEALTHY), ("nox", 1250, HAZARDOUS),
        ("co", 4.4, GOOD), ("co", 9.4, MODERATE), ("co", 15.4, UNHEALTHY), ("co", 30.5, HAZARDOUS),
        ("so2", 35, GOOD), ("so2", 185, USG), ("so2", 604, VERY_UNHEALTHY), ("so2", 605, HAZARDOUS),
    ])
    def test_breakpoints(self, parameter, value, expected):
        assert classify(parameter, value) == expected

    def test_wire_code_is_not_a_known_pollutant(self):
        assert classify("pm2", 13) == GOOD
        assert classify("pm2", 71) == MODERATE
        assert breakpoints_for("pm2") == BREAKPOINTS["o3"]

    def test_code_is_case_insensitive(self):
        assert classify("PM10", 100) == MODERATE


class TestFallbacks:
    def test_unknown_pollutant_uses_o3(self):
        assert classify("unknownpollutant", 50) == GOOD
        assert classify("unknownpollutant", 100) == USG
        assert breakpoints_for("benzene") is BREAKPOINTS["o3"]

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, None, "12"])
    def test_non_finite_is_unknown(self, value):
        assert classify("o3", value) == UNKNOWN
        assert UNKNOWN.to_dict() == {"category": "Unknown", "color": "#808080"}


class TestBreakpointTables:
    def test_bounds_strictly_increase_and_end_unbounded(self):
        for tiers in BREAKPOINTS.values():
            bounds = [t.upper_bound for t in tiers]
            assert bounds == sorted(bounds)
            assert len(set(bounds)) == len(bounds)
            assert math.isinf(bounds[-1])
            assert tiers[-1].category == "Hazardous"

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            BREAKPOINTS["o3"] = ()


class TestClassifyHourlyAverages:
    def test_adds_category_to_each_average(self):
        averages = [HourlyAverage("2025-03-01", "08", 15.0, 2), HourlyAverage("2025-03-01", "09", 120.0, 3)]
        rows = classify_hourly_averages("o3", averages)
        assert rows[0]["category"] == "Good"
        assert rows[1]["category"] == "Unhealthy for Sensitive Groups"
        assert rows[1]["stationCount"] == 3
