import pytest

from core.data import build_frame
from core.filters import FilterCriteria, filter_records
from core.metrics_overview import compute_dashboard, data_preview, empty_dashboard, score_level, stat_progress, summary_stats
from core.metrics_regions import region_distribution
from core.metrics_sectors import sector_intensity, sector_rollup
from core.metrics_topics import topic_rollup
from core.metrics_trend import year_trend


def test_sector_intensity_sorted_descending():
    df = build_frame([{"sector": "Power", "intensity": 8}, {"sector": "Power", "intensity": 6}, {"sector": "IT", "intensity": 9}])

    assert sector_intensity(df) == [{"sector": "IT", "avgIntensity": 9.0}, {"sector": "Power", "avgIntensity": 7.0}]


def test_sector_intensity_ties_keep_first_appearance():
    df = build_frame([{"sector": "B", "intensity": 5}, {"sector": "A", "intensity": 5}, {"sector": "C", "intensity": 7}])

    assert [r["sector"] for r in sector_intensity(df)] == ["C", "B", "A"]


def test_region_distribution_counts_and_percentages():
    df = build_frame([{"region": "Asia"}, {"region": "Asia"}, {"region": "Europe"}])

    assert region_distribution(df) == [
        {"region": "Asia", "count": 2, "percentage": "66.7"},
        {"region": "Europe", "count": 1, "percentage": "33.3"},
    ]


def test_region_percentages_use_all_filtered_records(sample_frame):
    rows = region_distribution(sample_frame)

    assert sum(r["count"] for r in rows) == 5
    assert [r["percentage"] for r in rows] == ["33.3", "33.3", "16.7"]


def test_region_counts_sum_to_total_when_every_record_has_region(sample_frame):
    df = sample_frame[sample_frame["region"].notna()]
    rows = region_distribution(df)

    assert sum(r["count"] for r in rows) == len(df)
    assert sum(float(r["percentage"]) for r in rows) == pytest.approx(100.0, abs=0.2)


def test_sector_rollup_sorted_by_count(sample_frame):
    rows = sector_rollup(sample_frame)

    assert rows[0] == {"sector": "Power", "count": 2, "avgIntensity": 7.0, "avgRelevance": 5.0, "avgLikelihood": 4.0}
    assert [r["count"] for r in rows] == [2, 1, 1, 1, 1]
    assert [r["sector"] for r in rows[1:]] == ["IT", "Environment", "Banking", "Medical"]


def test_topic_rollup_truncates_to_top_ten():
    rows = [{"topic": f"t{i}", "relevance": i, "likelihood": 1} for i in range(12) for _ in range(i + 1)]
    out = topic_rollup(build_frame(rows))

    assert len(out) == 10
    assert out[0] == {"topic": "t11", "avgRelevance": 11.0, "avgLikelihood": 1.0, "count": 12}
    assert [r["count"] for r in out] == list(range(12, 2, -1))


def test_topic_rollup_limit(sample_frame):
    out = topic_rollup(sample_frame, limit=1)

    assert out == [{"topic": "Energy", "avgRelevance": 5.0, "avgLikelihood": 4.0, "count": 2}]


def test_year_trend_falls_back_to_start_year_then_default(sample_frame):
    rows = year_trend(sample_frame)

    assert [r["year"] for r in rows] == ["2022", "2024", "2025", "2027"]
    by_year = {r["year"]: r for r in rows}
    assert by_year["2025"]["count"] == 2
    assert by_year["2025"]["avgIntensity"] == 7.0
    # Technology (end 2024) plus Healthcare (no years -> 2024)
    assert by_year["2024"]["count"] == 2
    assert by_year["2024"]["avgRelevance"] == 8.5


def test_year_trend_sorts_numerically():
    df = build_frame([{"end_year": 2100}, {"end_year": 999}, {"end_year": 2030}])

    assert [r["year"] for r in year_trend(df)] == ["999", "2030", "2100"]


def test_summary_stats(sample_frame):
    stats = summary_stats(sample_frame)

    assert stats == {"total": 6, "avgIntensity": 7.33, "avgRelevance": 6.67, "avgLikelihood": 5.83}


def test_empty_input_degrades_gracefully(sample_frame):
    empty = filter_records(sample_frame, FilterCriteria(topic="nothing-matches"))
    payload = compute_dashboard(empty)

    assert payload["summary"] == {"total": 0, "avgIntensity": 0, "avgRelevance": 0, "avgLikelihood": 0}
    for key in ("sector_intensity", "region_distribution", "sector_rollup", "topic_rollup", "year_trend", "preview"):
        assert payload[key] == []


def test_aggregation_is_idempotent(sample_frame):
    first = compute_dashboard(sample_frame, FilterCriteria(pestle="e"))
    second = compute_dashboard(sample_frame, FilterCriteria(pestle="e"))

    assert first == second


def test_missing_scores_count_as_zero():
    df = build_frame([{"sector": "Power", "intensity": 10}, {"sector": "Power"}])

    assert sector_intensity(df) == [{"sector": "Power", "avgIntensity": 5.0}]


def test_data_preview_marks_missing_text_and_levels(sample_frame):
    preview = data_preview(sample_frame)

    assert len(preview) == 5
    assert preview[0]["intensity_level"] == "high"
    assert preview[0]["likelihood_level"] == "medium"

    last = data_preview(sample_frame.iloc[5:])[0]
    assert last["region"] == "N/A"
    assert last["likelihood_level"] == "low"


def test_score_level_bands():
    assert score_level(8) == "high"
    assert score_level(7) == "medium"
    assert score_level(4) == "low"
    assert score_level(None) == "low"


def test_stat_progress_is_capped():
    assert stat_progress(5) == 50.0
    assert stat_progress(42) == 100.0
    assert stat_progress(0) == 0.0


def test_dashboard_charts_are_optional(sample_frame):
    assert compute_dashboard(sample_frame)["charts"] == {}

    charts = compute_dashboard(sample_frame, include_charts=True)["charts"]
    assert set(charts) == {"sector_intensity", "sector_rollup", "region_distribution", "topic_rollup", "year_trend"}
    assert "$schema" in charts["sector_intensity"]


def test_empty_dashboard_keeps_filters():
    payload = empty_dashboard(FilterCriteria(topic="oil"))

    assert payload["filters"]["topic"] == "oil"
    assert payload["summary"]["total"] == 0


def test_averages_round_the_float_scaled_by_100():
    df = build_frame([{"sector": "Power", "topic": "Oil", "intensity": 1.0, "relevance": 1.0},
                      {"sector": "Power", "topic": "Oil", "intensity": 1.01, "relevance": 1.01}])

    assert sector_intensity(df) == [{"sector": "Power", "avgIntensity": 1.0}]
    assert topic_rollup(df)[0]["avgRelevance"] == 1.0
    assert summary_stats(df)["avgIntensity"] == 1.0
