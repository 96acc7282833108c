"""
Alzheimer's Biomarker Analysis Pipeline
Runs loading, exploration, model fitting, evaluation and interpretation
"""

import os
import sys
import logging
import argparse

from .config import CONFIG, MODEL_NAMES, build_config
from .data_processing import load_biomarker_data, split_columns, validate_dataset
from .analysis import summary
from .analysis import plots
from .modeling import (
    ModelTrainer,
    build_design_matrix,
    remove_near_zero_variance,
    remove_correlated,
    train_test_split_stratified,
    evaluate_models,
    resample_table,
    compare_resamples,
    roc_points,
    best_model,
    variable_importance,
    partial_dependence_table
)
from .reporting import summarize_findings, write_report, print_report
from .utils.shared_functions import setup_logging, make_output_dirs, save_results

logger = logging.getLogger('ad_analysis')


class BiomarkerAnalysis:
    """Runs each stage of the biomarker analysis and keeps its outputs in self.results"""

    def __init__(self, config=None):
        self.config = config or build_config()
        self.dirs = make_output_dirs(self.config)
        self.results = {}
        self.data = None
        self.columns = None

    def load(self):
        """Load and validate the dataset"""
        logger.info(f"Loading biomarker data from {self.config['data_path']}")
        self.data = load_biomarker_data(self.config['data_path'])
        validate_dataset(self.data)
        self.columns = split_columns(self.data)
        logger.info(f"{len(self.columns['biomarkers'])} biomarkers, demographics: {self.columns['demographics']}")
        return self.data

    def summarize(self):
        """Summary statistics and univariate tests"""
        logger.info("Computing summary statistics...")
        df = self.data
        biomarkers = self.columns['biomarkers']
        results_dir = self.dirs['results']

        balance = summary.class_balance(df)
        described = summary.describe_by_response(df, [c for c in ('age',) if c in df.columns] + biomarkers)
        tests = summary.compare_biomarkers(df, biomarkers, test=self.config['test'])
        genotype = summary.genotype_association(df)
        pairs = summary.correlated_pairs(df, biomarkers, threshold=self.config['corr_cutoff'])

        save_results(balance, results_dir, 'class_balance.csv')
        save_results(described, results_dir, 'summary_by_response.csv')
        save_results(tests, results_dir, 'biomarker_tests.csv', index=False)
        save_results(pairs, results_dir, 'correlated_pairs.csv', index=False)
        if genotype is not None:
            save_results(genotype['table'], results_dir, 'genotype_by_response.csv')

        self.results.update({
            'class_balance': balance,
            'summary_by_response': described,
            'biomarker_tests': tests,
            'genotype_association': genotype,
            'correlated_pairs': pairs,
        })
        return tests

    def plot_exploration(self):
        """Exploratory charts"""
        if not self.config['make_plots']:
            return []
        logger.info("Plotting exploratory charts...")
        df = self.data
        plots_dir = self.dirs['plots']
        paths = [
            plots.plot_class_balance(df, plots_dir),
            plots.plot_age_distribution(df, plots_dir),
            plots.plot_biomarker_boxplots(df, self.results['biomarker_tests'], plots_dir,
                                          top_k=self.config['top_k']),
            plots.plot_correlation_heatmap(df, self.columns['biomarkers'], plots_dir),
            plots.plot_genotype_by_response(df, plots_dir),
        ]
        return [p for p in paths if p is not None]

    def prepare_features(self):
        """Build predictors, filter them and split off a test set"""
        X, y = build_design_matrix(self.data, self.columns['biomarkers'])
        X, nzv_dropped = remove_near_zero_variance(X)
        X, corr_dropped = remove_correlated(X, cutoff=self.config['corr_cutoff'])
        X_train, X_test, y_train, y_test = train_test_split_stratified(
            X, y, test_size=self.config['test_size'], seed=self.config['seed']
        )
        self.results.update({
            'X_train': X_train, 'X_test': X_test,
            'y_train': y_train, 'y_test': y_test,
            'dropped_predictors': nzv_dropped + corr_dropped,
        })
        return X_train, X_test, y_train, y_test

    def fit_models(self):
        """Tune and fit every configured model"""
        trainer = ModelTrainer(
            cv_folds=self.config['cv_folds'],
            cv_repeats=self.config['cv_repeats'],
            n_jobs=self.config['n_jobs'],
            seed=self.config['seed'],
            scoring=self.config['scoring'],
        )
        models = trainer.train_all(self.config['models'], self.results['X_train'], self.results['y_train'])
        self.results['models'] = models
        return models

    def evaluate(self):
        """Test-set metrics, resample comparison and assessment plots"""
        models = self.results['models']
        X_test, y_test = self.results['X_test'], self.results['y_test']
        results_dir = self.dirs['results']

        metrics = evaluate_models(models, X_test, y_test)
        resamples = resample_table(models)
        comparison = compare_resamples(models)
        roc_data = {name: roc_points(y_test, trained.predict_proba(X_test)) for name, trained in models.items()}
        best = best_model(metrics)
        logger.info(f"Best model: {best}")

        save_results(metrics, results_dir, 'model_metrics.csv')
        save_results(resamples, results_dir, 'resamples.csv', index=False)
        save_results(comparison, results_dir, 'resample_comparison.csv', index=False)

        if self.config['make_plots']:
            plots_dir = self.dirs['plots']
            plots.plot_roc_curves(roc_data, metrics, plots_dir)
            plots.plot_resample_comparison(resamples, plots_dir)
            plots.plot_confusion_matrix(metrics.loc[best], best, plots_dir)

        self.results.update({
            'metrics': metrics,
            'resamples': resamples,
            'resample_comparison': comparison,
            'roc': roc_data,
            'best_model': best,
        })
        return metrics

    def interpret(self):
        """Variable importance and partial dependence of the best model"""
        best = self.results['best_model']
        trained = self.results['models'][best]
        X_train, y_train = self.results['X_train'], self.results['y_train']

        importance = variable_importance(
            trained, X_train, y_train,
            n_repeats=self.config['importance_repeats'],
            seed=self.config['seed'],
            n_jobs=self.config['n_jobs'],
        )
        top_features = importance['feature'].head(self.config['top_k']).tolist()
        pdp = partial_dependence_table(trained, X_train, top_features,
                                       grid_resolution=self.config['pdp_grid_resolution'])

        save_results(importance, self.dirs['results'], f'variable_importance_{best}.csv', index=False)
        save_results(pdp, self.dirs['results'], f'partial_dependence_{best}.csv', index=False)
        if self.config['make_plots']:
            plots.plot_variable_importance(importance, best, self.dirs['plots'])
            plots.plot_partial_dependence(pdp, best, self.dirs['plots'])

        self.results.update({'importance': importance, 'partial_dependence': pdp})
        return importance

    def report(self):
        """Write the textual conclusions"""
        lines = summarize_findings(
            self.results['class_balance'],
            self.results['biomarker_tests'],
            self.results.get('metrics'),
            self.results.get('importance'),
            top_k=min(5, self.config['top_k']),
        )
        self.results['conclusions'] = lines
        self.results['report_file'] = write_report(lines, self.results.get('metrics'), self.dirs['reports'])
        return lines

    def run(self):
        """Run every stage in order"""
        self.load()
        self.summarize()
        self.plot_exploration()
        self.prepare_features()
        self.fit_models()
        self.evaluate()
        self.interpret()
        self.report()
        logger.info(f"Analysis complete. Outputs in {self.dirs['output']}")
        return self.results


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Run Alzheimer's biomarker analysis")

    parser.add_argument('--data-path', type=str, required=True,
                        help='Path to the biomarker CSV file')
    parser.add_argument('--output-dir', type=str, default=None,
                        help=f"Output directory (default: {CONFIG['output_dir']})")

    # Modeling options
    parser.add_argument('--models', nargs='+', choices=MODEL_NAMES, default=None,
                        help='Models to fit (default: all)')
    parser.add_argument('--cv-folds', type=int, default=None,
                        help=f"Cross-validation folds (default: {CONFIG['cv_folds']})")
    parser.add_argument('--cv-repeats', type=int, default=None,
                        help=f"Cross-validation repeats (default: {CONFIG['cv_repeats']})")
    parser.add_argument('--n-jobs', type=int, default=None,
                        help='Worker count for resampling (-1 uses all cores)')
    parser.add_argument('--test-size', type=float, default=None,
                        help=f"Held-out fraction (default: {CONFIG['test_size']})")
    parser.add_argument('--seed', type=int, default=None,
                        help=f"Random seed (default: {CONFIG['seed']})")
    parser.add_argument('--corr-cutoff', type=float, default=None,
                        help='Absolute correlation above which predictors are removed (1 disables)')

    # Reporting options
    parser.add_argument('--top-k', type=int, default=None,
                        help='Number of top biomarkers to plot and interpret')
    parser.add_argument('--test', choices=['ttest', 'mannwhitney'], default=None,
                        help='Univariate test for biomarker differences')
    parser.add_argument('--skip-plots', action='store_true',
                        help='Do not render figures')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Logging level (default: INFO)')

    return parser.parse_args(argv)


def main(argv=None):
    """Main function to run the biomarker analysis."""
    args = parse_args(argv)
    config = build_config(
        data_path=args.data_path,
        output_dir=args.output_dir,
        models=args.models,
        cv_folds=args.cv_folds,
        cv_repeats=args.cv_repeats,
        n_jobs=args.n_jobs,
        test_size=args.test_size,
        seed=args.seed,
        corr_cutoff=args.corr_cutoff,
        top_k=args.top_k,
        test=args.test,
        log_level=args.log_level,
        make_plots=False if args.skip_plots else None,
    )
    os.makedirs(config['output_dir'], exist_ok=True)
    setup_logging(config['output_dir'], config['log_level'])

    analysis = BiomarkerAnalysis(config)
    results = analysis.run()
    print_report(results['conclusions'])
    return 0


if __name__ == '__main__':
    sys.exit(main())
