import pandas as pd

from core.aggregate import (
    AggregationSettings,
    aggregate_by_country,
    aggregate_by_scale,
    aggregate_by_type,
    compute_aggregates,
    normalize_scale,
    to_records,
)
from tests.conftest import make_records


def _pairs(df):
    return [(r["category"], r["count"]) for r in to_records(df)]


def _types(counts):
    rows = []
    for name, n in counts:
        rows.extend({"Type of Innovation / Technology/ Tool": name} for _ in range(n))
    return make_records(rows)


def test_type_counts_sorted_descending_with_unknown(records):
    assert _pairs(aggregate_by_type(records)) == [
        ("Technical", 2),
        ("Socio-technical", 1),
        ("Socio-economic", 1),
        ("Unknown", 1),
    ]


def test_small_types_fold_into_other():
    # 8 distinct types over 100 records; threshold is 5.
    df = _types([("A", 40), ("B", 20), ("C", 15), ("D", 10), ("E", 6), ("F", 5), ("G", 3), ("H", 1)])
    out = _pairs(aggregate_by_type(df))
    assert out == [("A", 40), ("B", 20), ("C", 15), ("D", 10), ("E", 6), ("F", 5), ("Other", 4)]
    assert sum(n for _, n in out) == 100


def test_no_folding_with_six_or_fewer_types():
    df = _types([("A", 95), ("B", 1), ("C", 1), ("D", 1), ("E", 1), ("F", 1)])
    out = _pairs(aggregate_by_type(df))
    assert ("Other", 5) not in out
    assert len(out) == 6


def test_existing_other_category_absorbs_folded_types():
    df = _types([("A", 50), ("Other", 30), ("B", 10), ("C", 5), ("D", 1), ("E", 1), ("F", 1), ("G", 2)])
    out = dict(_pairs(aggregate_by_type(df)))
    assert out["Other"] == 35
    assert sum(out.values()) == 100


def test_country_counts_split_multi_valued(records):
    out = _pairs(aggregate_by_country(records))
    assert out[0] == ("Kenya", 2)
    assert dict(out) == {"Kenya": 2, "Tanzania": 1, "Zimbabwe": 1, "Ethiopia": 1, "Bangladesh": 1, "Unknown": 1}


def test_country_top_ten_cutoff():
    df = make_records([{"Country": f"Country {i:02d}"} for i in range(15)] + [{"Country": "Country 14"}])
    out = aggregate_by_country(df)
    assert len(out) == 10
    assert out.loc[0, "category"] == "Country 14"
    assert out.loc[0, "count"] == 2


def test_country_top_n_is_configurable(records):
    assert len(aggregate_by_country(records, AggregationSettings(top_countries=2))) == 2


def test_scale_normalization():
    assert normalize_scale("  FARM ") == "Farm"
    assert normalize_scale("") == "Unknown"
    assert normalize_scale(None) == "Unknown"
    assert normalize_scale("sub-NATIONAL") == "Sub-national"
    assert normalize_scale("unknown") == "Unknown"


def test_scale_semantic_order_ignores_counts():
    df = make_records([{"Scale": "National"}] * 2 + [{"Scale": "plot"}] * 5 + [{"Scale": "Community"}])
    assert [c for c, _ in _pairs(aggregate_by_scale(df))] == ["Plot", "Community", "National"]


def test_scale_unranked_between_known_and_unknown():
    df = make_records(
        [{"Scale": ""}, {"Scale": "Regional"}, {"Scale": "Global"}, {"Scale": "Global"}, {"Scale": "National"}]
    )
    assert _pairs(aggregate_by_scale(df)) == [("National", 1), ("Global", 2), ("Regional", 1), ("Unknown", 1)]


def test_totals_match_filtered_records(records):
    aggs = compute_aggregates(records)
    assert aggs["by_type"]["count"].sum() == len(records)
    assert aggs["by_scale"]["count"].sum() == len(records)
    assert aggs["by_country"]["count"].sum() >= len(records)


def test_empty_input_gives_empty_aggregates():
    empty = make_records([])
    for df in compute_aggregates(empty).values():
        assert df.empty
        assert list(df.columns) == ["category", "count"]


def test_aggregation_is_idempotent(records):
    first = compute_aggregates(records)
    second = compute_aggregates(records)
    for key in first:
        pd.testing.assert_frame_equal(first[key], second[key])
