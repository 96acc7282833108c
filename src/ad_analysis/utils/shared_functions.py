"""
Shared Functions Module
Common utility functions used across multiple modules
"""

import os
import logging
import traceback

import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(output_dir=None, level='INFO'):
    """
    Configure console logging and, when an output directory is given,
    a processing_log.txt file next to the results.

    Parameters:
    -----------
    output_dir : str, optional
        Directory for the log file
    level : str or int
        Logging level name or number

    Returns:
    --------
    logging.Logger
        The configured root logger
    """
    root = logging.getLogger()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(level)

    # Drop handlers from an earlier call so repeated runs don't duplicate lines
    for handler in list(root.handlers):
        if getattr(handler, '_ad_analysis', False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console._ad_analysis = True
    root.addHandler(console)

    if output_dir is not None:
        os.makedirs(output_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(output_dir, 'processing_log.txt'))
        file_handler.setFormatter(formatter)
        file_handler._ad_analysis = True
        root.addHandler(file_handler)

    return root


def make_output_dirs(config):
    """Create the plots/results/reports directories and return their paths"""
    output_dir = config['output_dir']
    dirs = {
        'output': output_dir,
        'plots': os.path.join(output_dir, config['plots_subdir']),
        'results': os.path.join(output_dir, config['results_subdir']),
        'reports': os.path.join(output_dir, config['reports_subdir']),
    }
    for directory in dirs.values():
        os.makedirs(directory, exist_ok=True)
    return dirs


def save_results(df, output_dir, filename, index=True):
    """Save results to CSV file"""
    os.makedirs(output_dir, exist_ok=True)
    output_file = os.path.join(output_dir, filename)
    df.to_csv(output_file, index=index)
    logger.info(f"Saved results to {output_file}")
    return output_file


def save_plot(fig, filename, output_dir):
    """
    Save a matplotlib figure to the specified output directory

    Parameters:
    -----------
    fig : matplotlib.figure.Figure
        Figure to save
    filename : str
        Name of the file (without extension)
    output_dir : str
        Directory to save the plot

    Returns:
    --------
    str or None
        Path of the saved PNG, None if saving failed
    """
    try:
        os.makedirs(output_dir, exist_ok=True)
        plot_path = os.path.join(output_dir, f"{filename}.png")
        fig.savefig(plot_path, dpi=300, bbox_inches='tight')
        logger.info(f"Saved plot: {plot_path}")
        return plot_path
    except Exception as e:
        logger.error(f"Error saving plot {filename}: {e}")
        logger.error(traceback.format_exc())
        return None
    finally:
        plt.close(fig)
