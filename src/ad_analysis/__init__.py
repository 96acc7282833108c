"""
Alzheimer's biomarker analysis.

This package loads a biomarker panel measured on impaired and control
patients, summarises and plots it, fits several classifiers with repeated
cross-validation and interprets the fitted models.
"""

__version__ = "1.0.0"
