import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


def make_raw_frame(n=120, seed=0):
    """Synthetic table shaped like the exported biomarker CSV, with untidy names and labels."""
    rng = np.random.default_rng(seed)
    impaired = rng.random(n) < 0.3
    impaired[:4] = [True, True, False, False]

    tau = rng.normal(0.0, 0.5, n) + 1.0 * impaired
    ab_42 = rng.normal(0.0, 0.5, n) - 0.8 * impaired
    genotypes = np.where(
        impaired,
        rng.choice(["e3e4", "E4E4", "E3/E3"], n),
        rng.choice(["E2E3", "E3E3", "e3/e3", "E3E4"], n),
    )
    labels = np.where(
        impaired,
        rng.choice(["Impaired", "impaired", "IMPAIRED "], n),
        rng.choice(["Control", "control", " Control"], n),
    )

    raw = pd.DataFrame({
        "Response": labels,
        "Age": rng.normal(0.98, 0.02, n).round(4),
        "Gender": rng.choice(["M", "F"], n),
        "Genotype": genotypes,
        "tau": tau,
        "p_tau": tau * 0.6 + rng.normal(0, 0.4, n),
        "Ab_42": ab_42,
        "ACE (CD143)": rng.normal(1.5, 0.3, n),
        "tau copy": tau * 2.0 + rng.normal(0, 0.01, n),
    })
    for i in range(1, 6):
        raw[f"Marker.{i}"] = rng.normal(0, 1, n)
    return raw


@pytest.fixture
def raw_frame():
    return make_raw_frame()


@pytest.fixture
def biomarker_csv(tmp_path, raw_frame):
    path = tmp_path / "biomarkers.csv"
    raw_frame.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def biomarker_data(biomarker_csv):
    from ad_analysis.data_processing import load_biomarker_data
    return load_biomarker_data(biomarker_csv)
