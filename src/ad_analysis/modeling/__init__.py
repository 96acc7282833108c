"""
Predictive modeling: predictor preparation, training with repeated
cross-validation, evaluation and interpretation.
"""

from .features import (
    build_design_matrix,
    remove_near_zero_variance,
    remove_correlated,
    train_test_split_stratified
)
from .training import MODEL_SPECS, ModelTrainer, TrainedModel
from .evaluation import (
    classification_metrics,
    evaluate_models,
    resample_table,
    compare_resamples,
    roc_points,
    best_model
)
from .interpretation import variable_importance, partial_dependence_table
