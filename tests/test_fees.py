"""Tests for the Kalshi fee model and price conversions."""

import math
import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from prediction_arb.fees import kalshi_fee_cents
from prediction_arb.models import cents_to_price, price_to_cents


class TestKalshiFee:
    """Fee table: ceil(0.07 * P * (1-P)) in cents, minimum 1 cent."""

    def test_known_values(self):
        # At 50 cents: ceil(7 * 50 * 50 / 10000) = ceil(1.75) = 2
        assert kalshi_fee_cents(50) == 2
        # At 10 cents: ceil(7 * 10 * 90 / 10000) = ceil(0.63) = 1
        assert kalshi_fee_cents(10) == 1
        # At 40 cents: ceil(1.68) = 2
        assert kalshi_fee_cents(40) == 2

    def test_no_fee_without_price_or_at_settlement(self):
        assert kalshi_fee_cents(0) == 0
        assert kalshi_fee_cents(100) == 0
        assert kalshi_fee_cents(150) == 0

    def test_minimum_one_cent_on_valid_prices(self):
        for p in range(1, 100):
            assert kalshi_fee_cents(p) >= 1

    def test_matches_float_ceiling(self):
        for p in range(1, 100):
            expected = max(1, math.ceil(0.07 * (p / 100) * (1 - p / 100) * 100))
            assert kalshi_fee_cents(p) == expected, p

    def test_symmetric_around_midpoint(self):
        for p in range(1, 50):
            assert kalshi_fee_cents(p) == kalshi_fee_cents(100 - p)


class TestPriceConversion:

    def test_price_to_cents(self):
        assert price_to_cents(0.50) == 50
        assert price_to_cents(0.01) == 1
        assert price_to_cents(0.99) == 99

    def test_price_to_cents_clamps(self):
        assert price_to_cents(1.0) == 99
        assert price_to_cents(-0.2) == 0
        assert price_to_cents(0.0) == 0

    def test_halves_round_up(self):
        assert price_to_cents(0.005) == 1
        assert price_to_cents(0.125) == 13
        assert price_to_cents(0.025) == 3
        assert price_to_cents(0.454) == 45

    def test_non_finite_price_is_sentinel(self):
        assert price_to_cents(float("nan")) == 0
        assert price_to_cents(float("inf")) == 0

    def test_cents_to_price(self):
        assert cents_to_price(50) == pytest.approx(0.50)

    def test_round_trip_within_one_cent(self):
        for i in range(1, 100):
            price = i / 100
            assert abs(cents_to_price(price_to_cents(price)) - price) <= 0.01
