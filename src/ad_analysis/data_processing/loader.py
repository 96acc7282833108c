"""
Biomarker Data Loader
Loads the Alzheimer's biomarker CSV and harmonizes its columns:
- cleaning column names
- locating and normalizing the diagnostic response
- encoding gender as a 0/1 'male' column
- standardizing APOE genotype strings
"""

import os
import re
import logging

import numpy as np
import pandas as pd

from ..config import CONFIG

logger = logging.getLogger(__name__)

# Lower-cased label spellings seen in exported versions of the dataset
LABEL_SYNONYMS = {
    'impaired': 'Impaired',
    'ad': 'Impaired',
    'cdr>0': 'Impaired',
    'cdr > 0': 'Impaired',
    'control': 'Control',
    'not impaired': 'Control',
    'notimpaired': 'Control',
    'not_impaired': 'Control',
    'normal': 'Control',
    'cdr=0': 'Control',
    'cdr = 0': 'Control',
}

GENDER_VALUES = {
    '1': 1, '1.0': 1, 'm': 1, 'male': 1, 'true': 1, 'yes': 1,
    '0': 0, '0.0': 0, 'f': 0, 'female': 0, 'false': 0, 'no': 0,
}


def load_csv(path: str) -> pd.DataFrame:
    """Read a CSV file, handling UTF-8 BOM if present."""
    if not os.path.exists(path):
        logger.error(f"Data file not found: {path}")
        raise FileNotFoundError(f"Data file not found: {path}")
    df = pd.read_csv(path, encoding='utf-8-sig')
    logger.info(f"Loaded {path} with shape {df.shape}")
    return df


def clean_column_name(name) -> str:
    """Lower-case a column name and collapse punctuation, e.g. 'ACE (CD143)' -> 'ace_cd143'."""
    cleaned = re.sub(r'[^0-9a-zA-Z]+', '_', str(name).strip()).strip('_').lower()
    return cleaned or 'unnamed'


def clean_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Apply clean_column_name to every column, suffixing duplicates with _2, _3, ...
    and dropping row-name columns left behind by R's write.csv.
    """
    df = df.copy()
    seen = {}
    new_columns = []
    for col in df.columns:
        cleaned = clean_column_name(col)
        if cleaned in seen:
            seen[cleaned] += 1
            cleaned = f"{cleaned}_{seen[cleaned]}"
        else:
            seen[cleaned] = 1
        new_columns.append(cleaned)
    df.columns = new_columns

    row_name_cols = [c for c in df.columns if re.fullmatch(r'unnamed(_\d+)?', c)]
    if row_name_cols:
        logger.info(f"Dropping row-name columns: {row_name_cols}")
        df = df.drop(columns=row_name_cols)
    return df


def find_response_column(df: pd.DataFrame, aliases=None) -> str:
    """Return the first column matching a known response alias."""
    aliases = aliases or CONFIG['columns']['response_aliases']
    for alias in aliases:
        if alias in df.columns:
            return alias
    logger.error(f"No response column found; looked for {aliases}")
    raise ValueError(f"No response column found. Expected one of {aliases}, got {df.columns.tolist()}")


def normalize_labels(series: pd.Series) -> pd.Series:
    """
    Standardize response labels to 'Impaired' / 'Control'.

    Unknown spellings are stripped and title-cased. Missing labels are
    dropped. Raises ValueError unless exactly two classes remain.
    """
    missing = series.isna()
    if missing.any():
        logger.warning(f"Dropping {missing.sum()} rows with a missing response label")
        series = series[~missing]

    def _normalize(label):
        text = re.sub(r'\s+', ' ', str(label).strip())
        return LABEL_SYNONYMS.get(text.lower(), text.title())

    normalized = series.map(_normalize)
    classes = sorted(normalized.unique())
    if len(classes) != 2:
        logger.error(f"Response must be binary, found classes {classes}")
        raise ValueError(f"Response must have exactly two classes, found {classes}")
    return normalized


def normalize_gender(df: pd.DataFrame, aliases=None) -> pd.DataFrame:
    """
    Encode gender as an integer 'male' column (1 = male, 0 = female).

    Raises ValueError when no gender column exists or when any value is
    missing or unrecognized.
    """
    aliases = aliases or CONFIG['columns']['gender_aliases']
    source = next((col for col in aliases if col in df.columns), None)
    if source is None:
        logger.error(f"No gender column found; looked for {aliases}")
        raise ValueError(f"No gender column found. Expected one of {aliases}")

    values = df[source]
    if values.isna().any():
        n_missing = int(values.isna().sum())
        logger.error(f"{n_missing} missing values in gender column '{source}'")
        raise ValueError(f"Gender column '{source}' has {n_missing} missing values")

    encoded = values.map(lambda v: GENDER_VALUES.get(str(v).strip().lower()))
    unknown = values[encoded.isna()].unique().tolist()
    if unknown:
        logger.error(f"Unrecognized gender values: {unknown}")
        raise ValueError(f"Unrecognized gender values in '{source}': {unknown}")

    df = df.copy()
    if source != 'male':
        df = df.drop(columns=[source])
    df['male'] = encoded.astype(int)
    return df


def _allele_count(genotype, allele):
    if pd.isna(genotype):
        return np.nan
    return re.findall(r'E([234])', genotype).count(allele)


def normalize_genotype(df: pd.DataFrame, aliases=None) -> pd.DataFrame:
    """Standardize APOE genotype strings (e.g. 'e3/e4' -> 'E3E4') and count E2/E4 alleles."""
    aliases = aliases or CONFIG['columns']['genotype_aliases']
    source = next((col for col in aliases if col in df.columns), None)
    if source is None:
        logger.warning(f"No genotype column found; looked for {aliases}")
        return df

    df = df.copy()
    genotype = df[source].map(
        lambda g: re.sub(r'[^A-Z0-9]', '', str(g).upper()) if pd.notna(g) else np.nan
    )
    if source != 'genotype':
        df = df.drop(columns=[source])
    df['genotype'] = genotype.astype('category')
    df['e4_count'] = genotype.map(lambda g: _allele_count(g, '4')).astype(float)
    df['e2_count'] = genotype.map(lambda g: _allele_count(g, '2')).astype(float)
    logger.info(f"Genotype levels: {df['genotype'].cat.categories.tolist()}")
    return df


def coerce_numeric(df: pd.DataFrame, exclude=()) -> pd.DataFrame:
    """
    Convert object columns to numbers, warning about values that become NaN.

    Columns where no value parses as a number (identifiers, free text) are left
    as text so they are not mistaken for biomarkers.
    """
    df = df.copy()
    for col in df.columns:
        if col in exclude or not (df[col].dtype == object or pd.api.types.is_string_dtype(df[col])):
            continue
        converted = pd.to_numeric(df[col], errors='coerce')
        if converted.isna().all() and df[col].notna().any():
            logger.warning(f"Column '{col}' has no numeric values; leaving it as text")
            continue
        lost = int(converted.isna().sum() - df[col].isna().sum())
        if lost:
            logger.warning(f"Column '{col}': {lost} non-numeric values set to NaN")
        df[col] = converted
    return df


def load_biomarker_data(path: str) -> pd.DataFrame:
    """
    Load the biomarker CSV and return an analysis-ready DataFrame.

    Args:
        path (str): Path to the CSV file.

    Returns:
        pd.DataFrame: One row per patient with a 'response' column
        ('Impaired'/'Control'), 'age', 'male', 'genotype', allele counts
        and numeric biomarker columns.
    """
    df = clean_columns(load_csv(path))

    response_col = find_response_column(df)
    if response_col != 'response':
        df = df.rename(columns={response_col: 'response'})
    labels = normalize_labels(df['response'])
    df = df.loc[labels.index].copy()
    df['response'] = labels

    df = normalize_gender(df)
    df = normalize_genotype(df)
    df = coerce_numeric(df, exclude=('response', 'genotype'))
    df = df.reset_index(drop=True)

    counts = df['response'].value_counts()
    logger.info(f"Loaded {len(df)} patients and {df.shape[1]} columns")
    logger.info(f"Response counts: {counts.to_dict()}")
    return df
