"""
Analysis configuration
Default paths, column names and modeling settings
"""

import copy

MODEL_NAMES = (
    'logistic',
    'elastic_net',
    'random_forest',
    'gradient_boosting',
    'svm_rbf',
    'knn',
    'lda',
)

# Configuration dictionary for file paths, column names and modeling defaults
CONFIG = {
    'data_path': 'data/alzheimers_biomarkers.csv',
    'output_dir': 'output/ad_analysis',
    'plots_subdir': 'plots',
    'results_subdir': 'results',
    'reports_subdir': 'reports',
    'columns': {
        'response_aliases': ['response', 'diagnosis', 'class', 'y'],
        'gender_aliases': ['male', 'gender', 'sex'],
        'genotype_aliases': ['genotype', 'apoe', 'apoe_genotype'],
        'age': 'age',
    },
    'labels': {
        'positive': 'Impaired',
        'negative': 'Control',
    },
    'models': list(MODEL_NAMES),
    'seed': 42,
    'test_size': 0.25,
    'cv_folds': 10,
    'cv_repeats': 5,
    'n_jobs': 1,
    'scoring': 'roc_auc',
    'top_k': 6,
    'corr_cutoff': 0.9,
    'test': 'ttest',
    'fdr_alpha': 0.05,
    'importance_repeats': 10,
    'pdp_grid_resolution': 20,
    'make_plots': True,
    'log_level': 'INFO',
}


def build_config(**overrides):
    """
    Return a copy of CONFIG with the given overrides applied.

    Overrides whose value is None are ignored so that unset command-line
    options fall back to the defaults.
    """
    config = copy.deepcopy(CONFIG)
    for key, value in overrides.items():
        if value is None:
            continue
        config[key] = value
    return config
