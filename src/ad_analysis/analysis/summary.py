"""
Summary Statistics
Cohort description and univariate comparisons between impaired and control patients
"""

import logging

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.multitest import multipletests

from ..config import CONFIG

logger = logging.getLogger(__name__)


def class_balance(df):
    """Count and proportion of patients in each response class."""
    counts = df['response'].value_counts()
    balance = pd.DataFrame({
        'count': counts,
        'proportion': counts / counts.sum(),
    })
    balance.index.name = 'response'
    logger.info(f"Class balance: {counts.to_dict()}")
    return balance


def describe_by_response(df, columns):
    """Mean, standard deviation and median of each column split by response."""
    summary = df.groupby('response', observed=True)[list(columns)].agg(['mean', 'std', 'median']).T
    summary.index.names = ['variable', 'statistic']
    return summary


def _adjust_pvalues(p_values, method='fdr_bh'):
    """Multiple-testing correction that leaves NaN p-values as NaN."""
    p_values = np.asarray(p_values, dtype=float)
    adjusted = np.full_like(p_values, np.nan)
    mask = ~np.isnan(p_values)
    if mask.any():
        adjusted[mask] = multipletests(p_values[mask], method=method)[1]
    return adjusted


def compare_biomarkers(df, biomarkers, test='ttest'):
    """
    Two-sample test of each biomarker between impaired and control patients.

    Parameters:
    -----------
    df : pd.DataFrame
        Dataset with a 'response' column
    biomarkers : list
        Columns to test
    test : str
        'ttest' (Welch's t-test) or 'mannwhitney' (Mann-Whitney U)

    Returns:
    --------
    pd.DataFrame
        One row per biomarker with group means, their difference, the test
        statistic, p-value and Benjamini-Hochberg FDR, sorted by p-value
    """
    if test not in ('ttest', 'mannwhitney'):
        raise ValueError(f"Unknown test '{test}', expected 'ttest' or 'mannwhitney'")

    positive = CONFIG['labels']['positive']
    negative = CONFIG['labels']['negative']
    impaired = df[df['response'] == positive]
    control = df[df['response'] == negative]

    rows = []
    for marker in biomarkers:
        x = impaired[marker].dropna()
        y = control[marker].dropna()
        if len(x) < 2 or len(y) < 2:
            logger.warning(f"Too few observations to test {marker}")
            statistic, p_value = np.nan, np.nan
        elif test == 'ttest':
            statistic, p_value = stats.ttest_ind(x, y, equal_var=False)
        else:
            statistic, p_value = stats.mannwhitneyu(x, y, alternative='two-sided')
        rows.append({
            'biomarker': marker,
            'impaired_mean': x.mean(),
            'control_mean': y.mean(),
            'diff': x.mean() - y.mean(),
            'impaired_n': len(x),
            'control_n': len(y),
            'statistic': statistic,
            'p_value': p_value,
        })

    results = pd.DataFrame(rows, columns=[
        'biomarker', 'impaired_mean', 'control_mean', 'diff',
        'impaired_n', 'control_n', 'statistic', 'p_value'
    ])
    results['fdr'] = _adjust_pvalues(results['p_value'].values)
    results = results.sort_values('p_value', na_position='last').reset_index(drop=True)

    n_sig = int((results['fdr'] < CONFIG['fdr_alpha']).sum())
    logger.info(f"{n_sig} of {len(results)} biomarkers differ at FDR < {CONFIG['fdr_alpha']} ({test})")
    return results


def genotype_association(df):
    """Genotype by response contingency table with a chi-square test of independence."""
    if 'genotype' not in df.columns:
        logger.warning("No genotype column; skipping genotype association")
        return None
    table = pd.crosstab(df['genotype'], df['response'])
    chi2, p_value, dof, _ = stats.chi2_contingency(table)
    logger.info(f"Genotype vs response: chi2={chi2:.2f}, dof={dof}, p={p_value:.3g}")
    return {
        'table': table,
        'chi2': chi2,
        'p_value': p_value,
        'dof': dof,
    }


def correlated_pairs(df, biomarkers, threshold=0.9):
    """Biomarker pairs whose absolute Pearson correlation is at least threshold."""
    corr = df[list(biomarkers)].corr()
    upper = corr.where(np.triu(np.ones(corr.shape, dtype=bool), k=1))
    pairs = upper.stack().rename('r').reset_index()
    pairs.columns = ['feature_a', 'feature_b', 'r']
    pairs = pairs[pairs['r'].abs() >= threshold]
    pairs = pairs.reindex(pairs['r'].abs().sort_values(ascending=False).index)
    return pairs.reset_index(drop=True)


def find_correlated_features(corr, cutoff=0.9):
    """
    Columns to remove so that no remaining pair exceeds the absolute correlation cutoff.

    Pairs are visited from the strongest correlation down. For each pair whose
    members are both still kept, the member with the larger mean absolute
    correlation is removed (the second member on ties). Mean correlations are
    recomputed over the kept columns before every decision.
    """
    abs_corr = corr.abs()
    columns = list(abs_corr.columns)

    pairs = []
    for i, a in enumerate(columns):
        for b in columns[i + 1:]:
            value = abs_corr.loc[a, b]
            if pd.notna(value) and value > cutoff:
                pairs.append((value, a, b))
    pairs.sort(key=lambda p: p[0], reverse=True)

    kept = list(columns)
    removed = []
    for _, a, b in pairs:
        if a in removed or b in removed:
            continue
        mean_abs = abs_corr.loc[kept, kept].mean()
        drop = a if mean_abs[a] > mean_abs[b] else b
        removed.append(drop)
        kept.remove(drop)
    return removed
