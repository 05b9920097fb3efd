import pandas as pd

from core.filters import (
    ALL,
    FACETS,
    DashboardFilters,
    extract_facet_options,
    filter_records,
    normalize_filters,
)
from tests.conftest import make_records


def test_facet_options_sorted_with_sentinel_first(records):
    options = extract_facet_options(records)
    assert options["centres_involved"] == ["All", "CIAT", "CIMMYT", "ILRI", "IRRI", "IWMI"]
    assert options["country"] == ["All", "Bangladesh", "Ethiopia", "Kenya", "Tanzania", "Zimbabwe"]
    assert options["scale"] == ["All", "Community", "Landscape", "Plot", "farm"]
    assert options["climate_classification"] == ["All", "Semi-arid", "Tropical monsoon", "Tropical savanna"]
    assert set(options) == {f.field for f in FACETS}


def test_facet_options_single_valued_values_are_trimmed():
    df = make_records([{"Scale": "  Farm "}, {"Scale": "Farm"}, {"Scale": "   "}])
    assert extract_facet_options(df)["scale"] == ["All", "Farm"]


def test_facet_options_empty_records():
    options = extract_facet_options(make_records([]))
    assert all(values == [ALL] for values in options.values())


def test_facet_options_are_stable(records):
    assert extract_facet_options(records) == extract_facet_options(records)


def test_normalize_filters_defaults_and_cleanup():
    filters = normalize_filters({"scale": "Plot", "country": "  ", "bogus": "x", "centres_involved": None})
    assert filters.selections == {
        "centres_involved": "All",
        "type_of_innovation": "All",
        "scale": "Plot",
        "climate_classification": "All",
        "country": "All",
    }
    assert filters.active == {"scale": "Plot"}


def test_normalize_filters_drops_values_not_offered(records):
    options = extract_facet_options(records)
    filters = normalize_filters({"scale": "Plot", "country": "Atlantis"}, options=options)
    assert filters.selected("scale") == "Plot"
    assert filters.selected("country") == "All"


def test_all_filters_return_everything_in_order(records):
    out = filter_records(records, normalize_filters({}))
    assert out["innovation"].tolist() == records["innovation"].tolist()


def test_multi_valued_country_matching(records):
    def names(country):
        return filter_records(records, normalize_filters({"country": country}))["innovation"].tolist()

    assert "Climate-smart village" in names("Kenya")
    assert "Climate-smart village" in names("Tanzania")
    assert "Climate-smart village" in names("All")
    assert "Climate-smart village" not in names("Zimbabwe")
    assert "Climate-smart village" not in names("Bangladesh")


def test_multi_valued_centres_matching_is_exact_and_case_sensitive(records):
    out = filter_records(records, normalize_filters({"centres_involved": "ILRI"}))
    assert out["innovation"].tolist() == ["Climate-smart village", "Livestock insurance"]
    assert filter_records(records, normalize_filters({"centres_involved": "ilri"})).empty
    assert filter_records(records, normalize_filters({"centres_involved": "IRRI; IWMI"})).empty


def test_single_valued_match_is_exact(records):
    assert filter_records(records, normalize_filters({"scale": "farm"}))["innovation"].tolist() == [
        "Drought-tolerant maize"
    ]
    assert filter_records(records, normalize_filters({"scale": "Farm"})).empty


def test_facets_are_anded(records):
    out = filter_records(records, normalize_filters({"country": "Kenya", "centres_involved": "CIAT"}))
    assert out["innovation"].tolist() == ["Climate-smart village"]


def test_filter_monotonicity(records):
    loose = filter_records(records, normalize_filters({"country": "Kenya"}))
    strict = filter_records(records, normalize_filters({"country": "Kenya", "scale": "Landscape"}))
    assert set(strict["innovation"]) <= set(loose["innovation"])
    assert len(strict) == 1


def test_selection_does_not_change_other_facet_options(records):
    before = extract_facet_options(records)
    filter_records(records, normalize_filters({"country": "Kenya"}))
    after = extract_facet_options(records)
    assert before == after


def test_filter_empty_result_and_empty_input(records):
    out = filter_records(records, DashboardFilters({"country": "Kenya", "scale": "Plot"}))
    assert out.empty
    assert list(out.columns) == list(records.columns)
    assert filter_records(make_records([]), normalize_filters({"scale": "Plot"})).empty


def test_filter_is_idempotent(records):
    filters = normalize_filters({"centres_involved": "ILRI"})
    pd.testing.assert_frame_equal(filter_records(records, filters), filter_records(records, filters))
