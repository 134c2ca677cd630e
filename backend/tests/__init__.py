"""
Test suite for the risk-aware routing backend.

This package contains:
- test_route_calculation_service.py: Candidate generation, bonuses, partial failure
- test_avoidance_waypoints.py: Perpendicular and reflected detour heuristics
- test_route_safety_analyzer.py: Encounter detection and safety scoring
- test_route_selection.py: Deduplication and best-route selection
- test_mapbox_routing_service.py: Directions requests and error mapping (HTTP mocked)
- test_routing_session.py: Caller-owned routing state and invalidation
- test_routes_api.py: Flask endpoints

Run tests:
    cd backend
    source venv/bin/activate
    python -m pytest tests/
"""
