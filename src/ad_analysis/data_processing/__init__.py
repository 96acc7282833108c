"""
Data Processing module for the Alzheimer's biomarker dataset.

This package provides utilities for:
- Loading the biomarker CSV and cleaning its column names
- Normalizing response labels, gender and APOE genotype
- Grouping columns and checking dataset invariants
"""

from .loader import (
    load_csv,
    clean_column_name,
    clean_columns,
    find_response_column,
    normalize_labels,
    normalize_gender,
    normalize_genotype,
    load_biomarker_data
)
from .schema import split_columns, validate_dataset
