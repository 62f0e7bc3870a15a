"""Slip banding, ordering, minimums, warnings and id determinism."""

import asyncio
from datetime import datetime, timezone

import pytest

from conftest import make_event
from slipsmith.engine.slip import MOCK_DATA_WARNING, SlipConfig, SlipService, band, effective_probability, select_events
from slipsmith.engine.slip_builder import (
    build_event_id,
    build_slip,
    build_slip_id,
    format_probability,
    is_valid_tier,
    normalize_tier,
    to_slip_event,
)
from slipsmith.errors import InvalidDateFormat, UnknownLeague
from slipsmith.providers.base import ProviderSet
from slipsmith.providers.mock import MockDataProvider


def test_slip_id_format():
    assert build_slip_id("NBA", "2025-01-15", "starter") == "NBA_2025_01_15_STARTER"
    assert build_slip_id("nfl", "2025-09-07", "vip") == "NFL_2025_09_07_VIP"


def test_event_id_is_deterministic_and_slugged():
    args = ("NBA", "NBA_20250115_1", "Jalen Reed", "POINTS", 25.5, "over", "2025-01-15")
    assert build_event_id(*args) == build_event_id(*args)
    assert build_event_id(*args) == "nba_nba_20250115_1_jalen_reed_points25_5_over_20250115"


def test_event_id_changes_with_line_and_direction():
    base = build_event_id("NBA", "g1", "Jalen Reed", "POINTS", 25.5, "over", "2025-01-15")
    assert base != build_event_id("NBA", "g1", "Jalen Reed", "POINTS", 26.5, "over", "2025-01-15")
    assert base != build_event_id("NBA", "g1", "Jalen Reed", "POINTS", 25.5, "under", "2025-01-15")


def test_format_probability():
    assert format_probability(0.834) == "83%"
    assert format_probability(0.6) == "60%"


def test_tier_normalization():
    assert normalize_tier("VIP") == "vip"
    assert normalize_tier("gold") == "starter"
    assert normalize_tier(None) == "starter"
    assert is_valid_tier("pro")
    assert not is_valid_tier("gold")


def test_effective_probability_default_reliability():
    assert effective_probability(make_event(probability=0.8)) == pytest.approx(0.8 * 0.95)
    assert effective_probability(make_event(probability=0.8, reliability=1.0)) == pytest.approx(0.8)
    assert effective_probability(make_event(probability=0.8, reliability=0.0)) == pytest.approx(0.72)


def test_bands():
    assert band(make_event(probability=0.9, reliability=1.0)) == "GREEN"
    assert band(make_event(probability=0.7)) == "YELLOW"
    # 0.62 * 0.95 = 0.589
    assert band(make_event(probability=0.62)) == "RED"


def test_selection_order_green_then_yellow_and_no_red():
    events = [
        make_event(event_id="y1", probability=0.70),
        make_event(event_id="g1", probability=0.85),
        make_event(event_id="r1", probability=0.61),
        make_event(event_id="y2", probability=0.75),
        make_event(event_id="g2", probability=0.95),
    ]
    config = SlipConfig(league_minimums={}, default_minimum=2)
    selected, warning = select_events(events, "NBA", limit=10, config=config)
    assert [e.event_id for e in selected] == ["g2", "g1", "y2", "y1"]
    assert warning is None


def test_limit_is_raised_to_league_minimum():
    events = [make_event(event_id=f"e{i}", probability=0.9 - i * 0.005) for i in range(40)]
    selected, warning = select_events(events, "NBA", limit=5)
    assert len(selected) == 30
    assert warning is None
    selected, _ = select_events(events, "NFL", limit=5)
    assert len(selected) == 15
    selected, _ = select_events(events, "EPL", limit=25)
    assert len(selected) == 25


def test_small_pool_produces_warning():
    events = [make_event(event_id=f"e{i}", probability=0.85) for i in range(3)]
    selected, warning = select_events(events, "NBA")
    assert len(selected) == 3
    assert "minimum is 30" in warning


def test_export_shape_omits_absent_warning():
    event = make_event(probability=0.834)
    event = event.model_copy(update={"game_time": datetime(2025, 1, 16, 0, 30, tzinfo=timezone.utc)})
    slip = build_slip([event], "nba", "2025-01-15", "pro")
    data = slip.to_export()
    assert set(data) == {"slip_id", "date", "sport", "tier", "events"}
    assert data["slip_id"] == "NBA_2025_01_15_PRO"
    assert set(data["events"][0]) == {
        "event_id", "game_id", "time", "player", "team", "market", "line", "direction", "probability", "reasoning",
    }
    assert data["events"][0]["probability"] == "83%"
    assert data["events"][0]["market"] == "points"
    assert build_slip([event], "NBA", "2025-01-15", "pro", warning="thin").to_export()["warning"] == "thin"


def test_slip_event_without_game_time():
    assert to_slip_event(make_event()).time == "TBD"


def _mock_service(conn, mock_mode=True):
    p = MockDataProvider(seed=7)
    providers = ProviderSet(schedule=p, roster=p, stats=p, injury=p, odds=p, box_score=p, name="mock")
    return SlipService(providers, conn, mock_mode=mock_mode)


def test_service_builds_and_stores_slip(temp_db):
    service = _mock_service(temp_db)
    slip = asyncio.run(service.get_top_events("2025-01-15", "nba", tier="vip"))
    assert slip.slip_id == "NBA_2025_01_15_VIP"
    assert slip.events
    assert all(int(e.probability.rstrip("%")) >= 60 for e in slip.events)
    assert MOCK_DATA_WARNING in slip.warning
    stored = service.ledger.pending_events("2025-01-15")
    assert {e.event_id for e in stored} == {e.event_id for e in slip.events}


def test_service_is_deterministic(temp_db):
    service = _mock_service(temp_db, mock_mode=False)
    first = asyncio.run(service.get_top_events("2025-01-15", "NBA"))
    second = asyncio.run(service.get_top_events("2025-01-15", "NBA"))
    assert first.to_export() == second.to_export()
    # Re-storing the same ids does not duplicate events
    assert len(service.ledger.pending_events("2025-01-15")) == len(first.events)


def test_service_min_probability_clamped(temp_db):
    service = _mock_service(temp_db)
    low = asyncio.run(service.get_top_events("2025-01-15", "NBA", min_probability=0.1))
    assert all(int(e.probability.rstrip("%")) >= 60 for e in low.events)


def test_service_rejects_bad_input(temp_db):
    service = _mock_service(temp_db)
    with pytest.raises(InvalidDateFormat):
        asyncio.run(service.get_top_events("01/15/2025", "NBA"))
    with pytest.raises(UnknownLeague):
        asyncio.run(service.get_top_events("2025-01-15", "CRICKET"))


def test_supported_sports_lists_leagues():
    sports = SlipService.supported_sports()
    assert "NBA" in sports["basketball"]
    assert "LOL" in sports["esports"]
