"""
Model Training
Tunes and fits classifiers through one resampling interface
"""

import logging

import numpy as np
import sklearn
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis
from sklearn.ensemble import GradientBoostingClassifier, RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import GridSearchCV, ParameterGrid, RepeatedStratifiedKFold
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC

logger = logging.getLogger(__name__)

# scikit-learn 1.8 infers the elastic-net penalty from l1_ratio and deprecates penalty=
SKLEARN_VERSION = tuple(int(part) for part in sklearn.__version__.split('.')[:2])
ELASTIC_NET_KWARGS = {} if SKLEARN_VERSION >= (1, 8) else {'penalty': 'elasticnet'}


def _pipeline(estimator, scale):
    return Pipeline([
        ('scale', StandardScaler() if scale else 'passthrough'),
        ('clf', estimator),
    ])


# name -> (estimator factory taking a seed, tuning grid over the 'clf' step)
MODEL_SPECS = {
    'logistic': (
        # effectively unpenalized GLM
        lambda seed: _pipeline(LogisticRegression(C=1e6, max_iter=5000), scale=True),
        {},
    ),
    'elastic_net': (
        lambda seed: _pipeline(
            LogisticRegression(solver='saga', l1_ratio=0.5, max_iter=5000, random_state=seed,
                               **ELASTIC_NET_KWARGS),
            scale=True,
        ),
        {
            'clf__C': [0.01, 0.1, 1.0],
            'clf__l1_ratio': [0.1, 0.5, 0.9],
        },
    ),
    'random_forest': (
        lambda seed: _pipeline(RandomForestClassifier(n_estimators=500, random_state=seed), scale=False),
        {
            'clf__max_features': ['sqrt', 0.2, 0.5],
        },
    ),
    'gradient_boosting': (
        lambda seed: _pipeline(GradientBoostingClassifier(subsample=0.8, random_state=seed), scale=False),
        {
            'clf__n_estimators': [100, 250],
            'clf__max_depth': [1, 3],
            'clf__learning_rate': [0.05, 0.1],
        },
    ),
    'svm_rbf': (
        lambda seed: _pipeline(SVC(kernel='rbf', probability=True, random_state=seed), scale=True),
        {
            'clf__C': [0.25, 1.0, 4.0],
            'clf__gamma': ['scale', 0.001],
        },
    ),
    'knn': (
        lambda seed: _pipeline(KNeighborsClassifier(), scale=True),
        {
            'clf__n_neighbors': [5, 9, 15],
        },
    ),
    'lda': (
        lambda seed: _pipeline(LinearDiscriminantAnalysis(), scale=False),
        {},
    ),
}


class TrainedModel:
    """A tuned, refitted estimator with its cross-validation record"""

    def __init__(self, name, estimator, best_params, cv_scores, feature_names):
        self.name = name
        self.estimator = estimator
        self.best_params = best_params
        self.cv_scores = np.asarray(cv_scores, dtype=float)
        self.feature_names = list(feature_names)

    @property
    def cv_mean(self):
        return float(np.nanmean(self.cv_scores))

    @property
    def cv_std(self):
        return float(np.nanstd(self.cv_scores, ddof=1)) if len(self.cv_scores) > 1 else 0.0

    def predict_proba(self, X):
        """Probability of the positive (impaired) class"""
        return self.estimator.predict_proba(X[self.feature_names])[:, 1]

    def predict(self, X, threshold=0.5):
        return (self.predict_proba(X) >= threshold).astype(int)

    def __repr__(self):
        return (f"TrainedModel(name={self.name!r}, cv_mean={self.cv_mean:.3f}, "
                f"best_params={self.best_params!r})")


class ModelTrainer:
    """
    Fits any registered model with the same repeated stratified k-fold
    resampling, so cross-validated scores are paired across models.

    Parameters:
    -----------
    cv_folds : int
        Number of folds per repeat
    cv_repeats : int
        Number of repeats of the k-fold split
    n_jobs : int
        Worker count passed to the grid search
    seed : int
        Seed for resampling and for stochastic estimators
    scoring : str
        scikit-learn scorer used to pick tuning parameters
    """

    def __init__(self, cv_folds=10, cv_repeats=5, n_jobs=1, seed=42, scoring='roc_auc'):
        self.cv_folds = cv_folds
        self.cv_repeats = cv_repeats
        self.n_jobs = n_jobs
        self.seed = seed
        self.scoring = scoring

    def resampler(self):
        return RepeatedStratifiedKFold(n_splits=self.cv_folds, n_repeats=self.cv_repeats,
                                       random_state=self.seed)

    def train(self, name, X, y):
        """Tune the named model over its grid and refit it on all of X."""
        if name not in MODEL_SPECS:
            logger.error(f"Unknown model '{name}'")
            raise ValueError(f"Unknown model '{name}'. Available: {sorted(MODEL_SPECS)}")

        factory, grid = MODEL_SPECS[name]
        resampler = self.resampler()
        n_splits = resampler.get_n_splits()
        logger.info(f"Training {name}: {len(ParameterGrid(grid))} candidates x {n_splits} resamples")

        search = GridSearchCV(
            factory(self.seed),
            param_grid=grid,
            scoring=self.scoring,
            cv=resampler,
            n_jobs=self.n_jobs,
            refit=True,
        )
        search.fit(X, y)

        best = search.best_index_
        cv_scores = [search.cv_results_[f'split{i}_test_score'][best] for i in range(n_splits)]
        trained = TrainedModel(name, search.best_estimator_, search.best_params_, cv_scores, X.columns)
        logger.info(f"{name}: CV {self.scoring} = {trained.cv_mean:.3f} +/- {trained.cv_std:.3f}, "
                    f"best params {trained.best_params}")
        return trained

    def train_all(self, names, X, y):
        """Train each named model in order and return them keyed by name."""
        return {name: self.train(name, X, y) for name in names}
