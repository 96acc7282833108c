"""
Performance metrics on the held-out set and comparison of resampled scores.
"""

import logging
from itertools import combinations

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.metrics import accuracy_score, cohen_kappa_score, confusion_matrix, roc_auc_score, roc_curve
from statsmodels.stats.multitest import multipletests

logger = logging.getLogger(__name__)


def _safe_div(num, den):
    return num / den if den else np.nan


def classification_metrics(y_true, proba, threshold=0.5):
    """
    Threshold-based and ranking metrics with Impaired (1) as the positive class.

    Returns:
        dict: auc, accuracy, kappa, sensitivity, specificity, ppv, npv and
        the confusion counts tp, fp, tn, fn.
    """
    y_true = np.asarray(y_true).astype(int)
    proba = np.asarray(proba, dtype=float)
    y_pred = (proba >= threshold).astype(int)

    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
    auc = roc_auc_score(y_true, proba) if len(np.unique(y_true)) == 2 else np.nan

    return {
        'auc': auc,
        'accuracy': accuracy_score(y_true, y_pred),
        'kappa': cohen_kappa_score(y_true, y_pred) if len(np.unique(np.r_[y_true, y_pred])) > 1 else np.nan,
        'sensitivity': _safe_div(tp, tp + fn),
        'specificity': _safe_div(tn, tn + fp),
        'ppv': _safe_div(tp, tp + fp),
        'npv': _safe_div(tn, tn + fn),
        'tp': int(tp),
        'fp': int(fp),
        'tn': int(tn),
        'fn': int(fn),
    }


def evaluate_models(models, X_test, y_test, threshold=0.5):
    """Test-set metrics and cross-validated AUC for each model, best first."""
    rows = []
    for name, trained in models.items():
        row = classification_metrics(y_test, trained.predict_proba(X_test), threshold=threshold)
        row['model'] = name
        row['cv_mean_auc'] = trained.cv_mean
        row['cv_std_auc'] = trained.cv_std
        rows.append(row)
        logger.info(f"{name}: test AUC={row['auc']:.3f}, sensitivity={row['sensitivity']:.3f}, "
                    f"specificity={row['specificity']:.3f}")
    metrics = pd.DataFrame(rows).set_index('model')
    return metrics.sort_values('auc', ascending=False)


def resample_table(models):
    """Cross-validated scores in long format: model, resample, score."""
    frames = [
        pd.DataFrame({
            'model': name,
            'resample': np.arange(1, len(trained.cv_scores) + 1),
            'score': trained.cv_scores,
        })
        for name, trained in models.items()
    ]
    if not frames:
        return pd.DataFrame(columns=['model', 'resample', 'score'])
    return pd.concat(frames, ignore_index=True)


def compare_resamples(models):
    """
    Pairwise differences of resampled scores between models.

    All models share the same resampling splits, so the scores are paired
    and compared with a paired t-test. p-values are Bonferroni adjusted.
    """
    columns = ['model_a', 'model_b', 'mean_diff', 'statistic', 'p_value', 'p_adjusted']
    rows = []
    for (name_a, a), (name_b, b) in combinations(models.items(), 2):
        diff = a.cv_scores - b.cv_scores
        if len(diff) > 1 and np.nanstd(diff) > 0:
            statistic, p_value = stats.ttest_rel(a.cv_scores, b.cv_scores, nan_policy='omit')
        else:
            statistic, p_value = np.nan, np.nan
        rows.append({
            'model_a': name_a,
            'model_b': name_b,
            'mean_diff': float(np.nanmean(diff)),
            'statistic': float(statistic),
            'p_value': float(p_value),
        })

    comparison = pd.DataFrame(rows, columns=columns[:-1])
    comparison['p_adjusted'] = np.nan
    valid = comparison['p_value'].notna()
    if valid.any():
        comparison.loc[valid, 'p_adjusted'] = multipletests(
            comparison.loc[valid, 'p_value'], method='bonferroni'
        )[1]
    return comparison[columns]


def roc_points(y_true, proba):
    """ROC curve coordinates as a DataFrame of fpr, tpr and threshold."""
    fpr, tpr, thresholds = roc_curve(y_true, proba)
    return pd.DataFrame({'fpr': fpr, 'tpr': tpr, 'threshold': thresholds})


def best_model(metrics):
    """Name of the model with the highest test-set AUC."""
    return metrics['auc'].idxmax()
