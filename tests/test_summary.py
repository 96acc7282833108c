import numpy as np
import pandas as pd
import pytest

from ad_analysis.analysis import (
    class_balance,
    describe_by_response,
    compare_biomarkers,
    genotype_association,
    correlated_pairs,
    find_correlated_features
)
from ad_analysis.data_processing import split_columns


def test_class_balance(biomarker_data):
    balance = class_balance(biomarker_data)
    assert set(balance.index) == {"Impaired", "Control"}
    assert balance["count"].sum() == len(biomarker_data)
    assert balance["proportion"].sum() == pytest.approx(1.0)


def test_describe_by_response(biomarker_data):
    described = describe_by_response(biomarker_data, ["tau", "age"])
    assert ("tau", "mean") in described.index
    assert ("age", "median") in described.index
    impaired = biomarker_data[biomarker_data["response"] == "Impaired"]
    assert described.loc[("tau", "mean"), "Impaired"] == pytest.approx(impaired["tau"].mean())


def test_compare_biomarkers_ttest(biomarker_data):
    biomarkers = split_columns(biomarker_data)["biomarkers"]
    tests = compare_biomarkers(biomarker_data, biomarkers)
    assert len(tests) == len(biomarkers)
    assert tests["p_value"].is_monotonic_increasing
    assert (tests["fdr"] >= tests["p_value"] - 1e-12).all()
    tau = tests.set_index("biomarker").loc["tau"]
    assert tau["diff"] > 0
    assert tau["fdr"] < 0.05
    assert tests.set_index("biomarker").loc["ab_42", "diff"] < 0


def test_compare_biomarkers_mannwhitney(biomarker_data):
    tests = compare_biomarkers(biomarker_data, ["tau", "marker_1"], test="mannwhitney")
    assert tests.iloc[0]["biomarker"] == "tau"
    assert tests.iloc[0]["impaired_n"] + tests.iloc[0]["control_n"] == len(biomarker_data)


def test_compare_biomarkers_unknown_test(biomarker_data):
    with pytest.raises(ValueError):
        compare_biomarkers(biomarker_data, ["tau"], test="anova")


def test_compare_biomarkers_too_few_observations():
    df = pd.DataFrame({
        "response": ["Impaired", "Control", "Control", "Control"],
        "marker": [1.0, 2.0, 2.5, 3.0],
    })
    tests = compare_biomarkers(df, ["marker"])
    assert np.isnan(tests.loc[0, "p_value"])
    assert np.isnan(tests.loc[0, "fdr"])


def test_genotype_association(biomarker_data):
    result = genotype_association(biomarker_data)
    assert result["table"].values.sum() == len(biomarker_data)
    assert 0.0 <= result["p_value"] <= 1.0
    assert result["dof"] == (result["table"].shape[0] - 1) * (result["table"].shape[1] - 1)


def test_genotype_association_without_genotype():
    df = pd.DataFrame({"response": ["Impaired", "Control"]})
    assert genotype_association(df) is None


def test_correlated_pairs(biomarker_data):
    pairs = correlated_pairs(biomarker_data, ["tau", "tau_copy", "marker_1"], threshold=0.9)
    assert len(pairs) == 1
    assert set(pairs.loc[0, ["feature_a", "feature_b"]]) == {"tau", "tau_copy"}
    assert pairs.loc[0, "r"] > 0.99


def test_find_correlated_features_removes_hub():
    corr = pd.DataFrame(
        [[1.0, 0.95, 0.92, 0.1],
         [0.95, 1.0, 0.5, 0.1],
         [0.92, 0.5, 1.0, 0.1],
         [0.1, 0.1, 0.1, 1.0]],
        index=list("abcd"), columns=list("abcd"),
    )
    # 'a' is strongly correlated with both b and c and has the highest mean |r|
    assert find_correlated_features(corr, cutoff=0.9) == ["a"]
    assert find_correlated_features(corr, cutoff=0.99) == []


def test_find_correlated_features_recomputes_means_after_removal():
    corr = pd.DataFrame(
        [[1.0, 0.95, 0.6, 0.0],
         [0.95, 1.0, 0.0, 0.85],
         [0.6, 0.0, 1.0, 0.99],
         [0.0, 0.85, 0.99, 1.0]],
        index=list("abcx"), columns=list("abcx"),
    )
    # once x is gone, a has the larger mean |r| among the kept columns
    assert find_correlated_features(corr, cutoff=0.9) == ["x", "a"]
