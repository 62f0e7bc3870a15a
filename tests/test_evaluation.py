"""Evaluation classification, deferral, idempotency and reliability accumulation."""

import asyncio

import pytest

from conftest import make_event
from slipsmith.errors import PersistenceFailure, ProviderUnavailable
from slipsmith.evaluation import EvaluationEngine, classify_result, resolve_actual
from slipsmith.models import BoxScore
from slipsmith.storage.db import get_connection, init_schema

GAME = "NBA_20250115_1"


def _box(status="final", **player_stats):
    return BoxScore(
        game_id=GAME,
        status=status,
        home_team_id="H",
        away_team_id="A",
        home_score=112,
        away_score=104,
        player_stats=player_stats,
    )


@pytest.mark.parametrize(
    "direction,actual,expected",
    [
        ("over", 30, "hit"),
        ("over", 20, "miss"),
        ("over", 25.5, "push"),
        ("under", 20, "hit"),
        ("under", 30, "miss"),
        ("under", 25.5, "push"),
    ],
)
def test_classify_result(direction, actual, expected):
    assert classify_result(direction, 25.5, actual) == expected


def test_resolve_actual_player_team_game_and_combo():
    box = _box(**{"H-P0": {"points": 28, "rebounds": 7, "assists": 5}})
    assert resolve_actual(make_event(), box) == 28
    assert resolve_actual(make_event(market="PRA", line=39.5), box) == 40
    assert resolve_actual(make_event(market="points+rebounds", line=34.5), box) == 35
    team = make_event(player_id=None, player_name=None, team_id="A", market="TEAM_TOTAL", line=100.5)
    assert resolve_actual(team, box) == 104
    game = make_event(player_id=None, player_name=None, team_id=None, market="GAME_TOTAL", line=220.5)
    assert resolve_actual(game, box) == 216


def test_resolve_actual_undeterminable():
    box = _box(**{"H-P0": {"points": 28}})
    assert resolve_actual(make_event(player_id="ghost"), box) is None
    assert resolve_actual(make_event(market="PRA"), box) is None
    assert resolve_actual(make_event(market="REBOUNDS"), box) is None


def test_evaluate_date_scores_and_records(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    engine.store_events([
        make_event(event_id="e1", line=25.5, direction="over", edge_score=6.0),
        make_event(event_id="e2", player_id="H-P1", line=10.5, direction="over", edge_score=4.0),
    ])
    scripted.box_scores[GAME] = _box(**{"H-P0": {"points": 30}, "H-P1": {"points": 8}})

    evaluated = asyncio.run(engine.evaluate_date("2025-01-15"))
    results = {e.event_id: (e.result, e.actual_value) for e in evaluated}
    assert results == {"e1": ("hit", 30), "e2": ("miss", 8)}
    assert engine.pending_events("2025-01-15") == []
    assert {e.event_id for e in engine.get_evaluations("2025-01-15")} == {"e1", "e2"}

    report = engine.get_reliability_report()
    assert [(r.subject_id, r.hit_rate) for r in report] == [("H-P0", 1.0), ("H-P1", 0.0)]
    assert report[0].total_bets == 1
    assert report[0].average_edge == 6.0


def test_evaluation_is_idempotent(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    engine.store_events([make_event(event_id="e1")])
    scripted.box_scores[GAME] = _box(**{"H-P0": {"points": 30}})
    assert len(asyncio.run(engine.evaluate_date("2025-01-15"))) == 1
    assert asyncio.run(engine.evaluate_date("2025-01-15")) == []
    # Re-storing an evaluated event does not make it pending again
    engine.store_events([make_event(event_id="e1")])
    assert asyncio.run(engine.evaluate_date("2025-01-15")) == []
    assert engine.get_reliability_report()[0].total_bets == 1


def test_unfinished_game_stays_pending(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    engine.store_events([make_event(event_id="e1")])
    scripted.box_scores[GAME] = _box(status="in_progress", **{"H-P0": {"points": 30}})
    assert asyncio.run(engine.evaluate_date("2025-01-15")) == []
    assert [e.event_id for e in engine.pending_events("2025-01-15")] == ["e1"]

    scripted.box_scores[GAME] = None
    assert asyncio.run(engine.evaluate_date("2025-01-15")) == []
    assert len(engine.pending_events("2025-01-15")) == 1


def test_provider_error_defers_game(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    engine.store_events([make_event(event_id="e1")])
    scripted.box_score_error = ProviderUnavailable("boxscore down")
    assert asyncio.run(engine.evaluate_date("2025-01-15")) == []
    assert len(engine.pending_events("2025-01-15")) == 1

    scripted.box_score_error = None
    scripted.box_scores[GAME] = _box(**{"H-P0": {"points": 30}})
    assert [e.result for e in asyncio.run(engine.evaluate_date("2025-01-15"))] == ["hit"]


def test_box_score_fetched_once_per_game(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    engine.store_events([make_event(event_id=f"e{i}", line=20.5 + i) for i in range(3)])
    scripted.box_scores[GAME] = _box(**{"H-P0": {"points": 30}})
    asyncio.run(engine.evaluate_date("2025-01-15"))
    assert scripted.box_score_calls == [GAME]


def test_void_when_value_missing(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    engine.store_events([make_event(event_id="e1", player_id="ghost")])
    scripted.box_scores[GAME] = _box(**{"H-P0": {"points": 30}})
    evaluated = asyncio.run(engine.evaluate_date("2025-01-15"))
    assert evaluated[0].result == "void"
    assert evaluated[0].actual_value is None
    score = engine.get_reliability_report()[0]
    assert (score.total_bets, score.voids, score.hit_rate) == (0, 1, 0.0)


def test_reliability_accumulates_across_dates(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    days = [("2025-01-15", 30, 6.0), ("2025-01-16", 20, 4.0), ("2025-01-17", 25.5, 2.0)]
    for date, points, edge in days:
        engine.store_events([make_event(event_id=f"e-{date}", date=date, edge_score=edge)])
        scripted.box_scores[GAME] = _box(**{"H-P0": {"points": points}})
        asyncio.run(engine.evaluate_date(date))

    score = engine.get_reliability_report("NBA")[0]
    assert (score.hits, score.misses, score.pushes) == (1, 1, 1)
    assert score.total_bets == 3
    assert score.hit_rate == 0.5
    assert score.average_edge == pytest.approx(4.0)
    assert score.subject_kind == "player"

    summary = engine.get_summary("2025-01-15", "2025-01-16")
    assert (summary.total, summary.hits, summary.misses, summary.pushes) == (2, 1, 1, 0)
    assert summary.hit_rate == 0.5
    assert summary.average_edge == pytest.approx(5.0)


def test_reliability_scores_map_only_decided_keys(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    engine.store_events([
        make_event(event_id="e1", line=25.5),
        make_event(event_id="e2", player_id="H-P1", line=30),
    ])
    scripted.box_scores[GAME] = _box(**{"H-P0": {"points": 30}, "H-P1": {"points": 30}})
    asyncio.run(engine.evaluate_date("2025-01-15"))
    # e2 pushed: counted as a bet but not a decided one
    assert engine.get_reliability_scores("basketball", "NBA") == {("H-P0", "POINTS"): 1.0}


def test_report_ordering_and_sport_filter(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    engine.store_events([
        make_event(event_id="a", player_id="P-A", line=20.5),
        make_event(event_id="b", player_id="P-B", line=40.5),
        make_event(event_id="c", player_id="P-C", line=20.5, market="REBOUNDS"),
    ])
    scripted.box_scores[GAME] = _box(
        **{"P-A": {"points": 30}, "P-B": {"points": 30}, "P-C": {"rebounds": 25}}
    )
    asyncio.run(engine.evaluate_date("2025-01-15"))
    report = engine.get_reliability_report("basketball")
    assert [r.hit_rate for r in report] == [1.0, 1.0, 0.0]
    assert report[-1].subject_id == "P-B"
    assert engine.get_reliability_report("EPL") == []


def test_team_events_recorded_under_team_subject(temp_db, scripted):
    engine = EvaluationEngine(temp_db, scripted)
    engine.store_events([
        make_event(event_id="t1", player_id=None, player_name=None, team_id="H", market="TEAM_TOTAL", line=108.5),
        make_event(event_id="g1", player_id=None, player_name=None, team_id=None, market="GAME_TOTAL", line=210.5),
    ])
    scripted.box_scores[GAME] = _box()
    evaluated = {e.event_id: e.result for e in asyncio.run(engine.evaluate_date("2025-01-15"))}
    assert evaluated == {"t1": "hit", "g1": "hit"}
    kinds = {r.subject_id: r.subject_kind for r in engine.get_reliability_report()}
    assert kinds == {"H": "team", GAME: "game"}


def test_persistence_failure_propagates(tmp_path, scripted):
    conn = get_connection(tmp_path / "closed.duckdb")
    init_schema(conn)
    engine = EvaluationEngine(conn, scripted)
    conn.close()
    with pytest.raises(PersistenceFailure):
        engine.store_events([make_event()])
