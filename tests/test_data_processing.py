import numpy as np
import pandas as pd
import pytest

from ad_analysis.data_processing import (
    load_csv,
    clean_column_name,
    clean_columns,
    find_response_column,
    normalize_labels,
    normalize_gender,
    normalize_genotype,
    load_biomarker_data,
    split_columns,
    validate_dataset
)


def test_load_csv_encoding(tmp_path):
    data = "\ufeffcol1,col2\n1,2\n"
    file = tmp_path / "bom.csv"
    file.write_text(data, encoding="utf-8")
    df = load_csv(str(file))
    assert list(df.columns) == ["col1", "col2"]
    assert df.loc[0, "col1"] == 1


def test_load_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_csv(str(tmp_path / "nope.csv"))


def test_clean_column_name():
    assert clean_column_name("ACE (CD143)") == "ace_cd143"
    assert clean_column_name("  Ab_42 ") == "ab_42"
    assert clean_column_name("Marker.1") == "marker_1"
    assert clean_column_name("") == "unnamed"


def test_clean_columns_dedupes_and_drops_row_names():
    df = pd.DataFrame([[1, 2, 3, 4]], columns=["Unnamed: 0", "Tau", "tau", "p-tau"])
    cleaned = clean_columns(df)
    assert list(cleaned.columns) == ["tau", "tau_2", "p_tau"]
    assert cleaned.loc[0, "tau_2"] == 3


def test_find_response_column():
    df = pd.DataFrame({"age": [1], "diagnosis": ["Impaired"]})
    assert find_response_column(df) == "diagnosis"
    with pytest.raises(ValueError):
        find_response_column(pd.DataFrame({"age": [1]}))


def test_normalize_labels_casing_and_synonyms():
    labels = pd.Series(["impaired", " IMPAIRED", "Control", "not impaired", "Normal"])
    result = normalize_labels(labels)
    assert result.tolist() == ["Impaired", "Impaired", "Control", "Control", "Control"]


def test_normalize_labels_drops_missing():
    labels = pd.Series(["Impaired", None, "Control"])
    result = normalize_labels(labels)
    assert result.tolist() == ["Impaired", "Control"]
    assert list(result.index) == [0, 2]


def test_normalize_labels_requires_two_classes():
    with pytest.raises(ValueError):
        normalize_labels(pd.Series(["Impaired", "impaired"]))
    with pytest.raises(ValueError):
        normalize_labels(pd.Series(["Impaired", "Control", "Unsure"]))


@pytest.mark.parametrize("values", [
    [1, 0, 1],
    ["M", "F", "m"],
    ["Male", "female", "MALE"],
    [True, False, True],
])
def test_normalize_gender_encodings(values):
    df = pd.DataFrame({"gender": values})
    result = normalize_gender(df)
    assert "gender" not in result.columns
    assert result["male"].tolist() == [1, 0, 1]


def test_normalize_gender_missing_value_raises():
    df = pd.DataFrame({"male": [1, np.nan, 0]})
    with pytest.raises(ValueError, match="missing"):
        normalize_gender(df)


def test_normalize_gender_unknown_value_raises():
    df = pd.DataFrame({"sex": ["M", "X"]})
    with pytest.raises(ValueError, match="Unrecognized"):
        normalize_gender(df)


def test_normalize_genotype_counts_alleles():
    df = pd.DataFrame({"genotype": ["e3/e4", "E4E4", "E2E3", None]})
    result = normalize_genotype(df)
    assert result["genotype"].astype(object).tolist()[:3] == ["E3E4", "E4E4", "E2E3"]
    assert result["e4_count"].tolist()[:3] == [1, 2, 0]
    assert result["e2_count"].tolist()[:3] == [0, 0, 1]
    assert np.isnan(result.loc[3, "e4_count"])


def test_load_biomarker_data(biomarker_csv, raw_frame):
    df = load_biomarker_data(biomarker_csv)
    assert len(df) == len(raw_frame)
    assert set(df["response"]) == {"Impaired", "Control"}
    assert df["male"].isin([0, 1]).all()
    assert "gender" not in df.columns
    assert "ace_cd143" in df.columns
    assert "marker_1" in df.columns
    assert set(df["genotype"].cat.categories) <= {"E2E3", "E3E3", "E3E4", "E4E4"}


def test_split_columns(biomarker_data):
    groups = split_columns(biomarker_data)
    assert groups["response"] == "response"
    assert groups["demographics"] == ["age", "male", "genotype", "e4_count", "e2_count"]
    assert "tau" in groups["biomarkers"]
    assert "age" not in groups["biomarkers"]
    assert "response" not in groups["biomarkers"]


def test_validate_dataset_accepts_loaded_data(biomarker_data):
    assert validate_dataset(biomarker_data)


def test_validate_dataset_lists_violations():
    df = pd.DataFrame({
        "response": ["Impaired", "Maybe"],
        "male": [1, np.nan],
    })
    with pytest.raises(ValueError) as excinfo:
        validate_dataset(df)
    message = str(excinfo.value)
    assert "response labels" in message
    assert "missing gender" in message
    assert "no biomarker columns" in message


def test_load_biomarker_data_keeps_identifier_as_text(raw_frame, tmp_path):
    raw = raw_frame.copy()
    raw.insert(0, "Patient ID", [f"P{i}" for i in range(len(raw))])
    path = tmp_path / "with_ids.csv"
    raw.to_csv(path, index=False)

    df = load_biomarker_data(str(path))
    assert df["patient_id"].tolist()[:3] == ["P0", "P1", "P2"]
    groups = split_columns(df)
    assert "patient_id" not in groups["biomarkers"]
    assert "tau" in groups["biomarkers"]
