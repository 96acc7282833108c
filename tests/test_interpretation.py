import numpy as np
import pytest

from ad_analysis.data_processing import split_columns
from ad_analysis.modeling import (
    MODEL_SPECS,
    TrainedModel,
    build_design_matrix,
    variable_importance,
    partial_dependence_table
)


@pytest.fixture
def design(biomarker_data):
    biomarkers = split_columns(biomarker_data)["biomarkers"]
    return build_design_matrix(biomarker_data, biomarkers)


def fit_directly(name, X, y, **params):
    factory, _ = MODEL_SPECS[name]
    estimator = factory(0)
    if params:
        estimator.set_params(**params)
    estimator.fit(X, y)
    return TrainedModel(name, estimator, params, [0.8, 0.9], X.columns)


def test_variable_importance_tree_model(design):
    X, y = design
    trained = fit_directly("random_forest", X, y, clf__n_estimators=50)
    importance = variable_importance(trained, X, y)
    assert importance["method"].unique().tolist() == ["impurity"]
    assert len(importance) == X.shape[1]
    assert importance["importance"].max() == pytest.approx(100.0)
    assert importance["importance"].min() == pytest.approx(0.0)
    assert importance["importance"].is_monotonic_decreasing
    assert {"tau", "tau_copy", "ab_42"} & set(importance["feature"].head(3))


def test_variable_importance_linear_model(design):
    X, y = design
    trained = fit_directly("elastic_net", X, y, clf__C=0.1, clf__l1_ratio=0.5)
    importance = variable_importance(trained, X, y)
    assert importance["method"].iloc[0] == "coefficient"
    assert (importance["raw_importance"] >= 0).all()


def test_variable_importance_permutation_fallback(design):
    X, y = design
    trained = fit_directly("knn", X, y)
    importance = variable_importance(trained, X, y, n_repeats=3, seed=0)
    assert importance["method"].iloc[0] == "permutation"
    assert importance["importance"].max() == pytest.approx(100.0)


def test_partial_dependence_table(design):
    X, y = design
    X = X.drop(columns=["tau_copy"])
    trained = fit_directly("elastic_net", X, y, clf__C=1.0, clf__l1_ratio=0.1)
    table = partial_dependence_table(trained, X, ["tau", "male", "not_a_feature"], grid_resolution=10)
    assert list(table.columns) == ["feature", "value", "average"]
    assert table["feature"].unique().tolist() == ["tau", "male"]

    tau = table[table["feature"] == "tau"]
    assert len(tau) == 10
    assert np.all(np.diff(tau["value"].values) >= 0)
    assert ((tau["average"] >= 0) & (tau["average"] <= 1)).all()
    # higher tau raises the predicted probability of impairment
    assert tau["average"].iloc[-1] > tau["average"].iloc[0]

    male = table[table["feature"] == "male"]
    assert sorted(male["value"].tolist()) == [0.0, 1.0]


def test_partial_dependence_table_no_features(design):
    X, y = design
    trained = fit_directly("lda", X, y)
    table = partial_dependence_table(trained, X, ["missing"])
    assert table.empty
