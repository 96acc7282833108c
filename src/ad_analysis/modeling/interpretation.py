"""
Model Interpretation
Variable importance and partial dependence for fitted models
"""

import logging

import numpy as np
import pandas as pd
from sklearn.inspection import partial_dependence, permutation_importance

logger = logging.getLogger(__name__)


def _scale_0_100(values):
    values = np.asarray(values, dtype=float)
    span = values.max() - values.min()
    if span == 0:
        return np.zeros_like(values)
    return 100.0 * (values - values.min()) / span


def variable_importance(trained, X, y, n_repeats=10, seed=42, n_jobs=1):
    """
    Importance of each predictor for a fitted model, scaled to 0-100.

    Tree ensembles use their impurity importances and scaled linear models
    the absolute coefficients. Any other model falls back to permutation
    importance measured as the drop in ROC AUC on (X, y).

    Returns:
        pd.DataFrame: feature, importance, raw_importance, method; most
        important first.
    """
    features = trained.feature_names
    pipeline = trained.estimator
    clf = pipeline.named_steps['clf']
    scaled = pipeline.named_steps['scale'] != 'passthrough'

    if hasattr(clf, 'feature_importances_'):
        raw = clf.feature_importances_
        method = 'impurity'
    elif hasattr(clf, 'coef_') and scaled:
        raw = np.abs(np.ravel(clf.coef_))
        method = 'coefficient'
    else:
        result = permutation_importance(
            pipeline, X[features], y,
            scoring='roc_auc', n_repeats=n_repeats, random_state=seed, n_jobs=n_jobs
        )
        raw = result.importances_mean
        method = 'permutation'

    importance = pd.DataFrame({
        'feature': features,
        'importance': _scale_0_100(raw),
        'raw_importance': raw,
        'method': method,
    })
    importance = importance.sort_values('importance', ascending=False).reset_index(drop=True)
    logger.info(f"{trained.name} top predictors ({method}): {importance['feature'].head(5).tolist()}")
    return importance


def partial_dependence_table(trained, X, features, grid_resolution=20):
    """
    Average predicted probability of impairment over each feature's range.

    For every feature the other predictors are held at their observed values
    and the model's predictions are averaged at each grid point.

    Returns:
        pd.DataFrame: Long format with columns feature, value, average.
    """
    data = X[trained.feature_names]
    frames = []
    for feature in features:
        if feature not in data.columns:
            logger.warning(f"Feature {feature} not used by {trained.name}; skipping")
            continue
        result = partial_dependence(
            trained.estimator, data, [feature],
            kind='average', method='brute', response_method='predict_proba',
            grid_resolution=grid_resolution,
        )
        frames.append(pd.DataFrame({
            'feature': feature,
            'value': result['grid_values'][0],
            'average': result['average'][0],
        }))
    if not frames:
        return pd.DataFrame(columns=['feature', 'value', 'average'])
    table = pd.concat(frames, ignore_index=True)
    logger.info(f"Computed partial dependence for {table['feature'].nunique()} features of {trained.name}")
    return table
