"""
Textual conclusions of an analysis run.
"""

import os
import logging

from .config import CONFIG

logger = logging.getLogger(__name__)


def summarize_findings(balance, biomarker_tests, metrics, importance=None, top_k=5):
    """
    Turn the analysis tables into plain-language conclusions.

    Args:
        balance (pd.DataFrame): Output of class_balance.
        biomarker_tests (pd.DataFrame): Output of compare_biomarkers.
        metrics (pd.DataFrame): Output of evaluate_models.
        importance (pd.DataFrame, optional): Variable importance of the best model.
        top_k (int): Number of biomarkers/predictors to name.

    Returns:
        list: One sentence per finding.
    """
    positive = CONFIG['labels']['positive']
    alpha = CONFIG['fdr_alpha']
    lines = []

    n_total = int(balance['count'].sum())
    n_pos = int(balance['count'].get(positive, 0))
    lines.append(
        f"The cohort has {n_total} patients, {n_pos} ({n_pos / n_total:.1%}) of them {positive.lower()}."
    )

    significant = biomarker_tests[biomarker_tests['fdr'] < alpha]
    lines.append(
        f"{len(significant)} of {len(biomarker_tests)} biomarkers differ between groups at FDR < {alpha}."
    )
    if not significant.empty:
        named = ', '.join(
            f"{row.biomarker} ({'higher' if row.diff > 0 else 'lower'} in {positive.lower()})"
            for row in significant.head(top_k).itertuples()
        )
        lines.append(f"Strongest univariate differences: {named}.")

    if metrics is not None and not metrics.empty:
        name = metrics['auc'].idxmax()
        best = metrics.loc[name]
        lines.append(
            f"Best model on the test set: {name} with AUC {best['auc']:.3f} "
            f"(sensitivity {best['sensitivity']:.3f}, specificity {best['specificity']:.3f}; "
            f"cross-validated AUC {best['cv_mean_auc']:.3f} +/- {best['cv_std_auc']:.3f})."
        )
        if len(metrics) > 1:
            worst = metrics['auc'].idxmin()
            lines.append(
                f"Test AUC ranged from {metrics.loc[worst, 'auc']:.3f} ({worst}) "
                f"to {best['auc']:.3f} ({name}) across {len(metrics)} models."
            )

    if importance is not None and not importance.empty:
        lines.append(
            "Most important predictors of the best model: "
            + ', '.join(importance['feature'].head(top_k)) + "."
        )
    return lines


def write_report(lines, metrics, reports_dir):
    """Write conclusions.txt and model_metrics.csv; return the conclusions path."""
    os.makedirs(reports_dir, exist_ok=True)
    report_file = os.path.join(reports_dir, 'conclusions.txt')
    with open(report_file, 'w', encoding='utf-8') as f:
        f.write('\n'.join(lines) + '\n')
    logger.info(f"Saved conclusions to {report_file}")

    if metrics is not None:
        metrics_file = os.path.join(reports_dir, 'model_metrics.csv')
        metrics.to_csv(metrics_file)
        logger.info(f"Saved model metrics to {metrics_file}")
    return report_file


def print_report(lines):
    print("\nConclusions")
    print("=" * 60)
    for line in lines:
        print(f"- {line}")
