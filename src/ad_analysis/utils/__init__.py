"""
Utils package initialization
"""

from .shared_functions import (
    setup_logging,
    make_output_dirs,
    save_results,
    save_plot
)
