"""
Tests for route deduplication and best-route selection.
"""
import pytest

from services.route_models import SafeRoute
from services.route_selection import (
    combined_score,
    efficiency_score,
    is_duplicate_route,
    remove_duplicate_routes,
    select_best_route,
)


def make_route(route_id, safety, minutes, distance=10000, risk_level='low'):
    return SafeRoute(
        id=route_id,
        geometry=[(101.6869, 3.139), (101.6559, 2.9213)],
        risk_level=risk_level,
        safety_score=safety,
        route_type=route_id,
        distance_meters=distance,
        duration_seconds=minutes * 60
    )


class TestDeduplication:
    """Tests for near-duplicate detection"""

    def test_near_identical_routes(self):
        """1 km / 2 min / 5 point thresholds: 50 m, 1 min and 2 points apart is a duplicate"""
        first = make_route('a', safety=80, minutes=20, distance=10000)
        second = make_route('b', safety=82, minutes=21, distance=10050)

        assert remove_duplicate_routes([first, second]) == [first]

    def test_thresholds_are_strict(self):
        base = make_route('a', safety=80, minutes=20, distance=10000)

        assert not is_duplicate_route(make_route('b', 80, 20, distance=11000), [base])
        assert not is_duplicate_route(make_route('c', 80, 22, distance=10000), [base])
        assert not is_duplicate_route(make_route('d', 85, 20, distance=10000), [base])
        assert is_duplicate_route(make_route('e', 84.9, 21, distance=10999), [base])

    def test_duration_compared_in_whole_minutes(self):
        base = make_route('a', safety=80, minutes=20)
        # 21.4 min rounds to 21; 21.6 min rounds to 22
        assert is_duplicate_route(make_route('b', 80, 21.4), [base])
        assert not is_duplicate_route(make_route('c', 80, 21.6), [base])

    def test_distinct_routes_kept_in_order(self):
        routes = [
            make_route('fastest', 65, 30, distance=25000),
            make_route('shortest', 65, 35, distance=22000),
            make_route('avoidance', 100, 37, distance=29000),
        ]

        assert remove_duplicate_routes(routes) == routes

    def test_idempotent(self):
        routes = [
            make_route('a', 80, 20, 10000),
            make_route('b', 82, 21, 10500),
            make_route('c', 60, 20, 10000),
            make_route('d', 64, 21, 10900),
            make_route('e', 90, 40, 30000),
        ]

        once = remove_duplicate_routes(routes)

        assert remove_duplicate_routes(once) == once
        assert [r.id for r in once] == ['a', 'c', 'e']

    def test_empty_input(self):
        assert remove_duplicate_routes([]) == []


class TestEfficiency:
    """Tests for the balanced-mode scoring"""

    def test_efficiency_relative_to_slowest(self):
        slow = make_route('a', 90, 40)
        fast = make_route('b', 70, 20)

        assert efficiency_score(slow, 40 * 60) == 0.0
        assert efficiency_score(fast, 40 * 60) == 50.0

    def test_zero_max_duration(self):
        assert efficiency_score(make_route('a', 90, 0), 0) == 0.0

    def test_combined_weights(self):
        route = make_route('b', 70, 20)
        assert combined_score(route, 40 * 60) == pytest.approx(62.0)


class TestSelectBestRoute:
    """Tests for the safety-first and balanced selection policies"""

    def test_empty_input(self):
        assert select_best_route([], True) is None
        assert select_best_route([], False) is None

    def test_single_route(self):
        only = make_route('a', 10, 30, risk_level='extreme')
        assert select_best_route([only], True) is only
        assert select_best_route([only], False) is only

    def test_safety_first_skips_high_risk(self):
        risky = make_route('fastest', 90, 20, risk_level='high')
        safe = make_route('avoidance', 70, 35, risk_level='medium')

        assert select_best_route([risky, safe], True) is safe

    def test_safety_first_all_high_risk(self):
        high = make_route('fastest', 65, 20, risk_level='high')
        extreme = make_route('shortest', 45, 25, risk_level='extreme')

        assert select_best_route([extreme, high], True) is high

    def test_safety_first_never_returns_high_risk_when_alternative_exists(self):
        routes = [
            make_route('a', 99, 20, risk_level='extreme'),
            make_route('b', 95, 20, risk_level='high'),
            make_route('c', 5, 90, risk_level='low'),
        ]

        assert not select_best_route(routes, True).is_high_risk

    def test_balanced_mode(self):
        """A(safety 90, 40 min) vs B(safety 70, 20 min): 54 vs 62, B wins"""
        route_a = make_route('a', 90, 40)
        route_b = make_route('b', 70, 20)

        assert select_best_route([route_a, route_b], False) is route_b

    def test_balanced_mode_ignores_risk_level(self):
        risky_fast = make_route('a', 70, 10, risk_level='high')
        safe_slow = make_route('b', 80, 40)

        assert select_best_route([safe_slow, risky_fast], False) is risky_fast

    def test_ties_keep_earliest(self):
        first = make_route('a', 80, 20, distance=10000)
        second = make_route('b', 80, 20, distance=20000)

        assert select_best_route([first, second], True) is first
        assert select_best_route([first, second], False) is first
