from core.records import (
    CANONICAL_COLUMNS,
    NO_DESCRIPTION,
    normalize_record,
    records_frame,
    split_multi_value,
)


def test_description_joins_available_parts():
    record = normalize_record(
        {
            "Challenge it was addressing": "Drought",
            "Data collected": "Yields",
            "Site": "Nyando",
        }
    )
    assert record["description"] == "Challenge: Drought. Data: Yields. Site: Nyando"


def test_description_skips_missing_parts():
    record = normalize_record({"Challenge it was addressing": "Drought", "Site": "Nyando"})
    assert record["description"] == "Challenge: Drought. Site: Nyando"


def test_description_falls_back_to_name_then_literal():
    assert normalize_record({"Innovation/ Technology/ Tool": "AWD"})["description"] == "AWD"
    assert normalize_record({})["description"] == NO_DESCRIPTION


def test_native_description_is_kept():
    record = normalize_record({"Description": "Already written", "Site": "Nyando"})
    assert record["description"] == "Already written"


def test_centres_prefers_trailing_space_key():
    record = normalize_record({"Centre (s) involved ": "ILRI", "Centre (s) involved": "CIAT"})
    assert record["centres_involved"] == "ILRI"
    assert normalize_record({"Centre (s) involved": "CIAT"})["centres_involved"] == "CIAT"
    assert normalize_record({})["centres_involved"] == ""


def test_missing_fields_become_empty_strings():
    record = normalize_record({"Country": None, "Scale": 3})
    for col in CANONICAL_COLUMNS:
        assert isinstance(record[col], str)
    assert record["country"] == ""
    assert record["scale"] == "3"


def test_passthrough_fields_survive_but_canonical_wins():
    record = normalize_record({"Focal Point": "J. Doe", "country": "raw", "Country": "Kenya"})
    assert record["Focal Point"] == "J. Doe"
    assert record["country"] == "Kenya"


def test_split_multi_value_drops_empty_segments():
    assert split_multi_value("Kenya; Tanzania,, ;Uganda ") == ["Kenya", "Tanzania", "Uganda"]
    assert split_multi_value("") == []
    assert split_multi_value(None) == []


def test_records_frame_fills_canonical_columns(records):
    assert list(records.columns[: len(CANONICAL_COLUMNS)]) == CANONICAL_COLUMNS
    assert "Focal Point" in records.columns
    for col in CANONICAL_COLUMNS:
        assert records[col].map(lambda v: isinstance(v, str)).all()


def test_records_frame_empty():
    df = records_frame([])
    assert df.empty
    assert list(df.columns) == CANONICAL_COLUMNS
