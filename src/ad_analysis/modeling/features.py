"""
Predictor preparation for model fitting.
"""

import logging

import pandas as pd
from sklearn.model_selection import train_test_split

from ..config import CONFIG
from ..analysis.summary import find_correlated_features

logger = logging.getLogger(__name__)


def build_design_matrix(df, biomarkers, include_demographics=True):
    """
    Build the predictor matrix X and the 0/1 outcome y.

    Genotype is one-hot encoded with its first level dropped. Impaired is the
    positive class (y = 1). Rows with a missing predictor are dropped.

    Args:
        df (pd.DataFrame): Dataset returned by load_biomarker_data.
        biomarkers (list): Biomarker columns to use as predictors.
        include_demographics (bool): Add age, male and genotype dummies.

    Returns:
        tuple: (X, y) as a float DataFrame and an integer Series.
    """
    columns = list(biomarkers)
    if include_demographics:
        columns = [c for c in ('age', 'male') if c in df.columns] + columns

    X = df[columns].astype(float)
    if include_demographics and 'genotype' in df.columns:
        dummies = pd.get_dummies(df['genotype'], prefix='genotype', drop_first=True, dtype=float)
        X = pd.concat([X, dummies], axis=1)

    y = (df['response'] == CONFIG['labels']['positive']).astype(int)
    y.name = 'impaired'

    complete = X.notna().all(axis=1)
    if include_demographics and 'genotype' in df.columns:
        complete &= df['genotype'].notna()
    if not complete.all():
        logger.warning(f"Dropping {int((~complete).sum())} rows with missing predictors")
        X, y = X[complete], y[complete]

    logger.info(f"Design matrix: {X.shape[0]} rows x {X.shape[1]} predictors, {int(y.sum())} impaired")
    return X, y


def remove_near_zero_variance(X, freq_cut=95 / 5, unique_cut=10):
    """
    Drop predictors with zero variance or a dominant value and few unique values.

    A predictor is near-zero-variance when the ratio of its most common value
    to its second most common value exceeds freq_cut and its percentage of
    distinct values is at most unique_cut.
    """
    dropped = []
    n = len(X)
    for col in X.columns:
        counts = X[col].value_counts()
        if len(counts) <= 1:
            dropped.append(col)
            continue
        freq_ratio = counts.iloc[0] / counts.iloc[1]
        percent_unique = 100.0 * len(counts) / n
        if freq_ratio > freq_cut and percent_unique <= unique_cut:
            dropped.append(col)
    if dropped:
        logger.info(f"Removing {len(dropped)} near-zero-variance predictors: {dropped}")
    return X.drop(columns=dropped), dropped


def remove_correlated(X, cutoff=0.9):
    """Drop predictors until no pair has an absolute correlation above cutoff."""
    if cutoff is None or cutoff >= 1:
        return X, []
    dropped = find_correlated_features(X.corr(), cutoff=cutoff)
    if dropped:
        logger.info(f"Removing {len(dropped)} predictors with |r| > {cutoff}: {dropped}")
    return X.drop(columns=dropped), dropped


def train_test_split_stratified(X, y, test_size=0.25, seed=42):
    """Stratified train/test split that keeps the class ratio in both parts."""
    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=test_size, random_state=seed, stratify=y
    )
    logger.info(
        f"Training set: {len(X_train)} rows ({y_train.mean():.1%} impaired); "
        f"test set: {len(X_test)} rows ({y_test.mean():.1%} impaired)"
    )
    return X_train, X_test, y_train, y_test
