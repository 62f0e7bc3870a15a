"""Edge probability model, scoring and ranking."""

from datetime import datetime, timezone

import pytest

from slipsmith.engine.edge import (
    EdgeConfig,
    EdgeDetector,
    build_reasoning,
    edge_probability,
    erf,
    normal_cdf,
    regress_to_mean,
    uncertainty_factor,
)
from slipsmith.engine.slip_builder import to_slip_event
from slipsmith.models import (
    ConsensusLine,
    GameProjection,
    PlayerProjection,
    ProjectionAdjustment,
    TeamProjection,
)


def _team(team_id, score):
    return TeamProjection(
        team_id=team_id,
        team_name=f"Team {team_id}",
        game_id="NBA_20250115_1",
        sport="basketball",
        league="NBA",
        projected_score=score,
    )


def _player(pid, confidence=0.8, adjustments=None, **stats):
    return PlayerProjection(
        player_id=pid,
        player_name=f"Player {pid}",
        team_id="H",
        game_id="NBA_20250115_1",
        sport="basketball",
        league="NBA",
        projected_stats=stats,
        confidence=confidence,
        adjustments=adjustments or [],
    )


def _game(*players, home=113.3, away=106.7):
    return GameProjection(
        game_id="NBA_20250115_1",
        sport="basketball",
        league="NBA",
        date="2025-01-15",
        scheduled_time=datetime(2025, 1, 16, 0, 30, tzinfo=timezone.utc),
        home_team=_team("H", home),
        away_team=_team("A", away),
        players=list(players),
        generated_at=datetime(2025, 1, 15, tzinfo=timezone.utc),
    )


def _prop(pid, market, line):
    return ConsensusLine(
        game_id="NBA_20250115_1",
        sport="NBA",
        player_id=pid,
        player_name=f"Player {pid}",
        team_id="H",
        team_name="Team H",
        market=market,
        line=line,
    )


def test_erf_and_cdf_basics():
    assert erf(0) == pytest.approx(0, abs=1e-7)
    assert erf(-1.0) == pytest.approx(-erf(1.0))
    assert erf(1.0) == pytest.approx(0.8427008, abs=1e-6)
    assert normal_cdf(0) == pytest.approx(0.5, abs=1e-7)
    assert normal_cdf(1.96) == pytest.approx(0.975, abs=1e-3)


def test_uncertainty_factor_clamped():
    assert uncertainty_factor(1.0) == 1.0
    assert uncertainty_factor(0.75) == 1.25
    assert uncertainty_factor(0.2) == 1.5
    assert uncertainty_factor(1.4) == 1.0


def test_regression_only_at_extremes():
    assert regress_to_mean(0.95) == pytest.approx(0.8825)
    assert regress_to_mean(0.05) == pytest.approx(0.1175)
    assert regress_to_mean(0.7) == 0.7


def test_zero_edge_is_coin_flip():
    assert edge_probability(0.0, 4.0, 0.8) == 0.5


def test_lower_confidence_lowers_probability():
    assert edge_probability(3.0, 4.0, 1.0) > edge_probability(3.0, 4.0, 0.5)


def test_negative_edge_falls_below_half():
    assert edge_probability(-5.5, 4.0, 0.8) < 0.5
    assert edge_probability(-5.5, 4.0, 0.8) == pytest.approx(1 - edge_probability(5.5, 4.0, 0.8), abs=0.011)


def test_low_tail_regressed_toward_half():
    # Phi(-3) ~ 0.0013, softened to 0.5 - 0.4987 * 0.85
    assert edge_probability(-12.0, 4.0, 1.0) == 0.08


def test_projection_above_line_is_over():
    detector = EdgeDetector()
    events = detector.find_edges([_game(_player("H-P0", points=30.0))], [_prop("H-P0", "points", 25.5)])
    assert len(events) == 1
    e = events[0]
    assert e.direction == "over"
    assert e.model_projection - e.line == pytest.approx(4.5)
    assert 0.5 < e.probability <= 1.0
    assert e.market == "POINTS"
    assert "Strong over opportunity with 4.5 unit edge" in e.reasoning


def test_projection_below_line_is_under():
    detector = EdgeDetector()
    events = detector.find_edges([_game(_player("H-P0", points=20.0))], [_prop("H-P0", "points", 25.5)])
    e = events[0]
    assert e.direction == "under"
    assert e.probability < 0.5
    assert e.probability == edge_probability(e.model_projection - e.line, 4.0, 0.8)
    assert detector.rank(events, min_probability=0.6) == []


def test_zero_edge_discarded_with_high_min_edge():
    detector = EdgeDetector(EdgeConfig(min_edge=5.0))
    events = detector.find_edges([_game(_player("H-P0", points=25.5))], [_prop("H-P0", "points", 25.5)])
    assert events == []


def test_edge_below_min_edge_discarded():
    detector = EdgeDetector()
    events = detector.find_edges([_game(_player("H-P0", points=25.8))], [_prop("H-P0", "points", 25.5)])
    assert events == []


def test_larger_edge_ranked_first():
    detector = EdgeDetector()
    game = _game(_player("H-P0", points=35.0), _player("H-P1", points=28.0))
    events = detector.find_edges([game], [_prop("H-P1", "points", 25.5), _prop("H-P0", "points", 25.5)])
    assert [e.player_id for e in events] == ["H-P0", "H-P1"]
    assert events[0].edge_score > events[1].edge_score


def test_edge_score_weights():
    detector = EdgeDetector()
    # |edge| 4 over threshold 4 -> normalized 1.0
    assert detector.edge_score(4.0, 4.0, 0.8, 0.5) == pytest.approx((0.5 + 0.24 + 0.1) * 10)


def test_reliability_feeds_edge_score():
    detector = EdgeDetector()
    game = _game(_player("H-P0", points=30.0))
    lines = [_prop("H-P0", "points", 25.5)]
    base = detector.find_edges([game], lines)[0]
    boosted = detector.find_edges([game], lines, {("H-P0", "POINTS"): 1.0})[0]
    assert base.reliability == 0.5
    assert boosted.reliability == 1.0
    assert boosted.edge_score == pytest.approx(base.edge_score + 1.0, abs=0.011)


def test_combo_market_alias():
    detector = EdgeDetector()
    game = _game(_player("H-P0", points=25.0, rebounds=10.0, pr=35.0))
    events = detector.find_edges([game], [_prop("H-P0", "points+rebounds", 30.5)])
    assert events[0].market == "PR"
    assert "points+rebounds" in events[0].reasoning


def test_unmodelled_market_and_unknown_player_skipped():
    detector = EdgeDetector()
    game = _game(_player("H-P0", points=30.0))
    lines = [_prop("H-P0", "double_double", 0.5), _prop("ghost", "points", 10.5)]
    assert detector.find_edges([game], lines) == []


def test_team_total_and_game_total():
    detector = EdgeDetector()
    game = _game(home=113.3, away=106.7)
    lines = [
        ConsensusLine(game_id=game.game_id, sport="NBA", team_id="H", team_name="Team H", market="team_total", line=105.5),
        ConsensusLine(game_id=game.game_id, sport="NBA", market="game_total", line=232.5),
    ]
    events = detector.find_edges([game], lines)
    by_market = {e.market: e for e in events}
    assert by_market["TEAM_TOTAL"].direction == "over"
    assert by_market["TEAM_TOTAL"].subject_id == "H"
    assert by_market["GAME_TOTAL"].direction == "under"
    assert by_market["GAME_TOTAL"].model_projection == 220.0
    assert by_market["GAME_TOTAL"].subject_id == game.game_id


def test_injury_note_in_reasoning():
    injury = ProjectionAdjustment(kind="injury", factor=0.65, description="Injury status: questionable")
    detector = EdgeDetector()
    game = _game(_player("H-P0", confidence=0.52, adjustments=[injury], points=18.0))
    e = detector.find_edges([game], [_prop("H-P0", "points", 22.5)])[0]
    assert "Note: Injury status: questionable." in e.reasoning


def test_event_ids_are_deterministic():
    detector = EdgeDetector()
    game = _game(_player("H-P0", points=30.0))
    lines = [_prop("H-P0", "points", 25.5)]
    assert detector.find_edges([game], lines)[0].event_id == detector.find_edges([game], lines)[0].event_id


def test_reasoning_descriptors():
    assert build_reasoning("X", "POINTS", 27.0, 25.5, "over").startswith("X projected for 27.0 points, line set at 25.5.")
    assert "Moderate over value" in build_reasoning("X", "POINTS", 27.0, 25.5, "over")
    assert "Slight under lean" in build_reasoning("X", "POINTS", 24.5, 25.5, "under")


def test_rank_filters():
    detector = EdgeDetector()
    game = _game(_player("H-P0", points=35.0), _player("H-P1", points=26.5))
    events = detector.find_edges([game], [_prop("H-P0", "points", 25.5), _prop("H-P1", "points", 25.5)])
    strong = detector.rank(events, min_probability=0.8)
    assert [e.player_id for e in strong] == ["H-P0"]
    assert detector.rank(events, league="WNBA") == []
    assert len(detector.rank(events, sport="basketball", limit=1)) == 1


def test_player_name_falls_back_to_projection():
    detector = EdgeDetector()
    line = ConsensusLine(game_id="NBA_20250115_1", sport="NBA", player_id="H-P0", market="points", line=25.5)
    e = detector.find_edges([_game(_player("H-P0", points=30.0))], [line])[0]
    assert e.player_name == "Player H-P0"
    assert to_slip_event(e).player == "Player H-P0"


def test_direction_follows_rounded_projection():
    detector = EdgeDetector(EdgeConfig(min_edge=0.0))
    e = detector.find_edges([_game(_player("H-P0", points=25.54))], [_prop("H-P0", "points", 25.5)])[0]
    assert e.model_projection == 25.5
    assert e.direction == "under"
