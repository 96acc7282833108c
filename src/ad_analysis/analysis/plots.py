"""
Plots for exploratory analysis and model assessment.

Every function saves a PNG to plots_dir and returns its path. A failure is
logged with its traceback and None is returned so that the remaining
figures are still produced.
"""

import math
import logging
import traceback

import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from ..config import CONFIG
from ..utils.shared_functions import save_plot

logger = logging.getLogger(__name__)
plt.style.use('seaborn-v0_8-whitegrid')

RESPONSE_PALETTE = {
    CONFIG['labels']['negative']: '#2E86AB',
    CONFIG['labels']['positive']: '#C73E1D',
}


def plot_class_balance(df, plots_dir):
    """Bar chart of patients per response class."""
    try:
        fig, ax = plt.subplots(figsize=(6, 4))
        sns.countplot(data=df, x='response', hue='response', palette=RESPONSE_PALETTE, legend=False, ax=ax)
        for container in ax.containers:
            ax.bar_label(container)
        ax.set_title('Diagnosis')
        ax.set_xlabel('')
        ax.set_ylabel('Patients')
        return save_plot(fig, 'class_balance', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting class balance: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None


def plot_age_distribution(df, plots_dir):
    """Histogram with KDE of age by response."""
    try:
        if 'age' not in df.columns:
            logger.warning("No age column; skipping age distribution plot")
            return None
        fig, ax = plt.subplots(figsize=(8, 5))
        sns.histplot(data=df, x='age', hue='response', kde=True, bins=15,
                     palette=RESPONSE_PALETTE, alpha=0.5, ax=ax)
        ax.set_title('Age by Diagnosis')
        ax.set_xlabel('Age')
        ax.set_ylabel('Count')
        return save_plot(fig, 'age_distribution', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting age distribution: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None


def plot_biomarker_boxplots(df, biomarker_tests, plots_dir, top_k=6):
    """Box plots of the top_k biomarkers ranked by FDR, one panel per biomarker."""
    try:
        top = biomarker_tests.dropna(subset=['p_value']).head(top_k)
        if top.empty:
            logger.warning("No tested biomarkers to plot")
            return None
        n_cols = min(3, len(top))
        n_rows = math.ceil(len(top) / n_cols)
        fig, axes = plt.subplots(n_rows, n_cols, figsize=(5 * n_cols, 4 * n_rows), squeeze=False)
        for ax, (_, row) in zip(axes.flat, top.iterrows()):
            marker = row['biomarker']
            sns.boxplot(data=df, x='response', y=marker, hue='response',
                        palette=RESPONSE_PALETTE, legend=False, ax=ax)
            sns.stripplot(data=df, x='response', y=marker, color='black', size=2, alpha=0.4, ax=ax)
            ax.set_title(f"{marker}\nFDR = {row['fdr']:.2e}")
            ax.set_xlabel('')
        for ax in list(axes.flat)[len(top):]:
            ax.set_visible(False)
        fig.tight_layout()
        return save_plot(fig, 'top_biomarkers_boxplot', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting biomarker boxplots: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None


def plot_correlation_heatmap(df, biomarkers, plots_dir):
    """Heatmap of biomarker correlations ordered by hierarchical clustering."""
    try:
        corr = df[list(biomarkers)].corr()
        grid = sns.clustermap(corr, cmap='RdBu_r', vmin=-1, vmax=1, center=0,
                              xticklabels=False, yticklabels=False, figsize=(10, 10))
        grid.figure.suptitle('Biomarker Correlation', y=1.02)
        return save_plot(grid.figure, 'biomarker_correlation', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting correlation heatmap: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None


def plot_genotype_by_response(df, plots_dir):
    """Stacked proportions of APOE genotype within each response class."""
    try:
        if 'genotype' not in df.columns:
            logger.warning("No genotype column; skipping genotype plot")
            return None
        props = pd.crosstab(df['response'], df['genotype'], normalize='index') * 100
        fig, ax = plt.subplots(figsize=(8, 5))
        props.plot(kind='bar', stacked=True, colormap='viridis', ax=ax)
        ax.set_title('APOE Genotype by Diagnosis')
        ax.set_xlabel('')
        ax.set_ylabel('Percentage of Patients (%)')
        ax.tick_params(axis='x', rotation=0)
        ax.legend(title='Genotype', bbox_to_anchor=(1.02, 1), loc='upper left')
        return save_plot(fig, 'genotype_by_response', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting genotype distribution: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None


def plot_roc_curves(roc_data, metrics, plots_dir):
    """
    Held-out ROC curve for each model.

    Args:
        roc_data (dict): Model name -> DataFrame with fpr/tpr columns.
        metrics (pd.DataFrame): Evaluation table indexed by model with an 'auc' column.
    """
    try:
        fig, ax = plt.subplots(figsize=(7, 7))
        for name, points in roc_data.items():
            ax.plot(points['fpr'], points['tpr'], linewidth=1.5,
                    label=f"{name} (AUC = {metrics.loc[name, 'auc']:.3f})")
        ax.plot([0, 1], [0, 1], color='grey', linestyle='--', linewidth=1)
        ax.set_xlim(0, 1)
        ax.set_ylim(0, 1.01)
        ax.set_xlabel('1 - Specificity')
        ax.set_ylabel('Sensitivity')
        ax.set_title('ROC Curves (test set)')
        ax.legend(loc='lower right')
        return save_plot(fig, 'roc_curves', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting ROC curves: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None


def plot_resample_comparison(resamples, plots_dir):
    """Box plot of cross-validated AUC for each model."""
    try:
        order = resamples.groupby('model')['score'].median().sort_values(ascending=False).index
        fig, ax = plt.subplots(figsize=(8, 0.6 * len(order) + 2))
        sns.boxplot(data=resamples, x='score', y='model', order=order, color='lightgrey', ax=ax)
        sns.stripplot(data=resamples, x='score', y='model', order=order, size=3, alpha=0.5, color='black', ax=ax)
        ax.set_xlabel('ROC AUC (resamples)')
        ax.set_ylabel('')
        ax.set_title('Cross-validated Performance')
        return save_plot(fig, 'resample_comparison', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting resample comparison: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None


def plot_confusion_matrix(metrics_row, model_name, plots_dir):
    """Confusion matrix heatmap for one model on the test set."""
    try:
        positive = CONFIG['labels']['positive']
        negative = CONFIG['labels']['negative']
        matrix = pd.DataFrame(
            [[metrics_row['tp'], metrics_row['fn']],
             [metrics_row['fp'], metrics_row['tn']]],
            index=pd.Index([positive, negative], name='Observed'),
            columns=pd.Index([positive, negative], name='Predicted'),
        ).astype(int)
        fig, ax = plt.subplots(figsize=(5, 4))
        sns.heatmap(matrix, annot=True, fmt='d', cmap='Blues', cbar=False, ax=ax)
        ax.set_title(f'Confusion Matrix: {model_name}')
        return save_plot(fig, f'confusion_matrix_{model_name}', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting confusion matrix: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None


def plot_variable_importance(importance, model_name, plots_dir, top_n=20):
    """Horizontal bar chart of the most important predictors."""
    try:
        top = importance.head(top_n).iloc[::-1]
        fig, ax = plt.subplots(figsize=(8, 0.3 * len(top) + 1.5))
        ax.barh(top['feature'], top['importance'], color='#2E86AB')
        ax.set_xlabel('Importance (scaled 0-100)')
        ax.set_title(f'Variable Importance: {model_name}')
        return save_plot(fig, f'variable_importance_{model_name}', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting variable importance: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None


def plot_partial_dependence(pdp_table, model_name, plots_dir):
    """Grid of one-dimensional partial dependence curves."""
    try:
        features = list(dict.fromkeys(pdp_table['feature']))
        if not features:
            logger.warning("Empty partial dependence table")
            return None
        n_cols = min(3, len(features))
        n_rows = math.ceil(len(features) / n_cols)
        fig, axes = plt.subplots(n_rows, n_cols, figsize=(4.5 * n_cols, 3.5 * n_rows),
                                 squeeze=False, sharey=True)
        for ax, feature in zip(axes.flat, features):
            curve = pdp_table[pdp_table['feature'] == feature]
            ax.plot(curve['value'], curve['average'], color='#C73E1D', linewidth=2)
            ax.set_title(feature)
            ax.set_xlabel('Value')
        for ax in axes[:, 0]:
            ax.set_ylabel('P(Impaired)')
        for ax in list(axes.flat)[len(features):]:
            ax.set_visible(False)
        fig.suptitle(f'Partial Dependence: {model_name}')
        fig.tight_layout()
        return save_plot(fig, f'partial_dependence_{model_name}', plots_dir)
    except Exception as e:
        logger.error(f"Error plotting partial dependence: {e}")
        logger.error(traceback.format_exc())
        plt.close('all')
        return None
