"""
Dataset schema helpers: column groups and invariant checks.
"""

import logging

import pandas as pd

from ..config import CONFIG

logger = logging.getLogger(__name__)

DEMOGRAPHIC_COLUMNS = ('age', 'male', 'genotype')
DERIVED_COLUMNS = ('e4_count', 'e2_count')


def split_columns(df):
    """
    Group columns into response, demographics and biomarkers.

    Biomarkers are the numeric columns that are neither the response nor a
    demographic or derived genotype column.
    """
    demographics = [c for c in DEMOGRAPHIC_COLUMNS + DERIVED_COLUMNS if c in df.columns]
    excluded = set(demographics) | {'response'}
    biomarkers = [
        c for c in df.columns
        if c not in excluded and pd.api.types.is_numeric_dtype(df[c])
    ]
    return {
        'response': 'response',
        'demographics': demographics,
        'biomarkers': biomarkers,
    }


def validate_dataset(df):
    """
    Check the dataset invariants and raise ValueError listing every violation.

    - a binary 'response' column holding only the canonical labels
    - a 'male' column without missing values
    - at least one biomarker column
    """
    problems = []
    labels = CONFIG['labels']
    expected = {labels['positive'], labels['negative']}

    if 'response' not in df.columns:
        problems.append("missing 'response' column")
    else:
        observed = set(df['response'].dropna().unique())
        if df['response'].isna().any():
            problems.append("missing response labels")
        if observed != expected:
            problems.append(f"response labels {sorted(observed)} != {sorted(expected)}")

    if 'male' not in df.columns:
        problems.append("missing 'male' column")
    elif df['male'].isna().any():
        problems.append(f"{int(df['male'].isna().sum())} missing gender values")

    if not split_columns(df)['biomarkers']:
        problems.append("no biomarker columns")

    if problems:
        logger.error(f"Dataset validation failed: {problems}")
        raise ValueError("Invalid biomarker dataset: " + "; ".join(problems))

    logger.info("Dataset passed validation")
    return True
