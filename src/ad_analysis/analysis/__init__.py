"""
Exploratory analysis: summary statistics and plots.
"""

from .summary import (
    class_balance,
    describe_by_response,
    compare_biomarkers,
    genotype_association,
    correlated_pairs,
    find_correlated_features
)
